"""
Shared pytest fixtures.

- ``make_records``: builds decoded records from parallel value lists;
- ``client``: FastAPI test client for the HTTP layer.
"""

import pytest
from fastapi.testclient import TestClient

from telemetry.main import app


def build_records(speed, time=None, **fields):
    """One dict per sample; ``None`` values are stored as ``None``."""
    n = len(speed)
    times = time if time is not None else list(range(n))
    records = []
    for i in range(n):
        record = {"timer_time": times[i], "enhanced_speed": speed[i]}
        for name, values in fields.items():
            record[name] = values[i]
        records.append(record)
    return records


@pytest.fixture
def make_records():
    return build_records


@pytest.fixture
def client():
    return TestClient(app)
