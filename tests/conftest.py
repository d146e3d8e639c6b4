# tests/conftest.py
import pytest

from backend.lib.energy_core.pipeline import UsageIngestionPipeline
from fakes import FakeNotifier, FakeRecordStore, FakeTimeSeries, fixed_clock


@pytest.fixture
def record_store():
    return FakeRecordStore()


@pytest.fixture
def time_series():
    return FakeTimeSeries()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def pipeline(record_store, time_series, notifier):
    return UsageIngestionPipeline(record_store, time_series, notifier, clock=fixed_clock)


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    # boto3 clients are built in some tests; keep them off real credentials
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
