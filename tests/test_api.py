def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_filter_endpoint_corrects_dropout(client, make_records):
    records = make_records([5] * 5, watt=[100, 100, 5, 100, 100])
    r = client.post("/sensor/filter", json={"records": records, "options": {"method": "correlation", "fields": ["watt"]}})
    assert r.status_code == 200
    body = r.json()
    assert body["method"] == "correlation"
    assert body["records"][2]["watt"] == 100
    assert body["records"][2]["watt_corrected"] is True
    assert body["stats"]["fixed_fields"] == {"watt": 1}
    assert body["stats"]["quality_score"] == 80.0
    assert body["metrics"]["dropout_reduction"]["watt"]["original"] == 0


def test_filter_endpoint_defaults(client, make_records):
    records = make_records([0, 0, 0], watt=[0, 0, 0])
    r = client.post("/sensor/filter", json={"records": records})
    assert r.status_code == 200
    assert r.json()["stats"]["noisy_points"] == 0


def test_filter_endpoint_rejects_unknown_method(client):
    r = client.post("/sensor/filter", json={"records": [], "options": {"method": "median"}})
    assert r.status_code == 400


def test_metrics_endpoint_reports_mismatch(client):
    r = client.post("/sensor/metrics", json={"original": [{"watt": 1}] * 10, "filtered": [{"watt": 1}] * 9})
    assert r.status_code == 200
    assert r.json() == {"error": "Data length mismatch", "original_length": 10, "filtered_length": 9}


def test_zone_distribution_from_series(client):
    payload = {
        "zones": [{"min": 0, "max": 50, "name": "A"}, {"min": 51, "max": None, "name": "B"}],
        "series": [
            {"timer_time": 0, "value": 30},
            {"timer_time": 10, "value": 30},
            {"timer_time": 20, "value": 70},
            {"timer_time": 30, "value": 70},
        ],
    }
    r = client.post("/zones/distribution", json=payload)
    assert r.status_code == 200
    items = r.json()
    assert [i["duration"] for i in items] == [10, 20]
    assert [i["percentage"] for i in items] == [33.33, 66.67]
    assert items[1]["zone"]["max"] is None


def test_zone_distribution_from_records(client, make_records):
    records = make_records([5, 5, 5], heart_rate=[120, 150, 150], time=[0, 30, 60])
    payload = {"zones": [{"min": 0, "max": 137, "name": "Z1"}, {"min": 138, "max": 200, "name": "Z2"}],
               "records": records, "field": "heart_rate"}
    r = client.post("/zones/distribution", json=payload)
    assert r.status_code == 200
    assert [i["duration"] for i in r.json()] == [0, 60]


def test_zone_distribution_needs_input(client):
    r = client.post("/zones/distribution", json={"zones": [{"min": 0, "max": 50, "name": "A"}]})
    assert r.status_code == 400


def test_session_statistics(client, make_records):
    records = make_records([10, 12, 14], watt=[100, 200, 300])
    r = client.post("/session/statistics", json={"records": records, "field": "watt", "ftp": 200})
    assert r.status_code == 200
    body = r.json()
    assert body["statistics"]["mean"] == 200
    assert body["power"]["max_power"] == 300
    assert body["power"]["intensity_factor"] is not None
    assert len(body["power"]["zone_distribution"]) == 7

    r = client.post("/session/statistics", json={"records": records, "field": "enhanced_speed"})
    assert r.json()["speed"]["avg_pace"] == 5.0


def test_session_statistics_without_values(client):
    r = client.post("/session/statistics", json={"records": [{"timer_time": 0}], "field": "watt"})
    assert r.status_code == 404


def test_zone_distribution_uses_builtin_table(client, make_records):
    records = make_records([5, 5, 5], stroke_rate=[50, 60, 60], time=[0, 30, 60])
    r = client.post("/zones/distribution", json={"records": records, "field": "stroke_rate"})
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 5
    assert items[1]["zone"]["name"] == "Zone 2 - Distance"
    assert items[1]["percentage"] == 100.0

    r = client.post("/zones/distribution", json={"records": records, "field": "altitude"})
    assert r.status_code == 400


def test_session_statistics_heart_rate_and_cadence(client, make_records):
    records = make_records([5] * 4, time=[0, 10, 20, 30], heart_rate=[120, 150, 160, 170], cadence=[80, 90, 100, 90])

    r = client.post("/session/statistics", json={"records": records, "field": "heart_rate"})
    assert r.status_code == 200
    hr = r.json()["heart_rate"]
    assert hr["avg_heart_rate"] == 150
    assert [z["duration"] for z in hr["zone_distribution"]] == [0, 10, 10, 10, 0]

    zones = [{"min": 0, "max": 150, "name": "easy"}, {"min": 151, "max": None, "name": "hard"}]
    r = client.post("/session/statistics", json={"records": records, "field": "heart rate", "zones": zones})
    assert [z["duration"] for z in r.json()["heart_rate"]["zone_distribution"]] == [10, 20]

    r = client.post("/session/statistics", json={"records": records, "field": "cadence"})
    assert r.json()["cadence"] == {"avg_cadence": 90, "max_cadence": 100}


def test_value_at_time_endpoint(client, make_records):
    records = make_records([5] * 4, time=[0, 10, 20, 30], watt=[100, 200, 300, 400])

    r = client.post("/session/value-at", json={"records": records, "field": "watt", "time": 21})
    assert r.status_code == 200
    assert r.json()["value"] == 300

    r = client.post("/session/value-at", json={"records": records, "field": "watt", "time": 100, "is_percentage": True})
    assert r.json()["value"] == 400

    r = client.post("/session/value-at", json={"records": records, "field": "watt", "time": 150, "is_percentage": True})
    assert r.status_code == 400

    r = client.post("/session/value-at", json={"records": records, "field": "heart_rate", "time": 10})
    assert r.status_code == 404


def test_text_summary_endpoint(client):
    r = client.post("/session/summary", json={"summary": {"sport": "kayaking", "avg_power": 150}, "entity": "Lap"})
    assert r.status_code == 200
    body = r.json()
    assert body["entity"] == "Lap"
    assert body["text"].startswith("Lap Summary:\n")
    assert "avg_power: 150.00" in body["text"]

    r = client.post("/session/summary", json={"summary": {}, "entity": "Activity"})
    assert r.status_code == 422
