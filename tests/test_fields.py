import pytest

from telemetry.core.analytics.fields import (
    FieldKey,
    canonical_field,
    field_variants,
    get_value,
    require_value,
    set_value,
)
from telemetry.core.errors import MissingDataError


def test_get_value_accepts_spelling_variants():
    assert get_value({"stroke rate": 30}, "stroke_rate") == 30
    assert get_value({"STROKE_RATE": 25}, "stroke_rate") == 25
    assert get_value({"Stroke Rate": 22}, FieldKey.STROKE_RATE) == 22


def test_get_value_skips_non_numeric_variant():
    record = {"stroke_rate": "n/a", "Stroke Rate": 22}
    assert get_value(record, "stroke_rate") == 22


def test_get_value_missing():
    assert get_value({}, "watt") is None
    assert get_value({"watt": None}, "watt") is None


def test_set_value_keeps_existing_spelling():
    record = {"Watt": 5}
    set_value(record, "watt", 120)
    assert record == {"Watt": 120}

    fresh = {}
    set_value(fresh, FieldKey.WATT, 80)
    assert fresh == {"watt": 80}


def test_require_value_raises_with_context():
    with pytest.raises(MissingDataError) as exc:
        require_value({"watt": 10}, "enhanced_speed", 4)
    assert exc.value.field == "enhanced_speed"
    assert exc.value.index == 4


def test_canonical_field():
    assert canonical_field("Watt") == FieldKey.WATT
    assert canonical_field("heartRate") == FieldKey.HEART_RATE
    assert canonical_field("altitude") is None


def test_field_variants_start_with_callers_spelling():
    variants = field_variants("stroke rate")
    assert variants[0] == "stroke rate"
    assert "stroke_rate" in variants
    assert "STROKE_RATE" in variants
