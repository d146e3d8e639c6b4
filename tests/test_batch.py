# tests/test_batch.py
import pytest

from backend.lib.energy_core.batch import CsvBatchDriver
from backend.lib.energy_core.errors import BatchProcessingError, BlobRetrievalError
from backend.lib.energy_core.io import FALLBACK_USER_ID
from backend.lib.energy_core.pipeline import UsageIngestionPipeline
from fakes import FakeBlobStore, FakeNotifier, FakeRecordStore, FakeTimeSeries, fixed_clock

BUCKET = "energy-csv-uploads"


def make_driver(objects, store=None, series=None, notifier=None):
    store = store or FakeRecordStore()
    series = series or FakeTimeSeries()
    notifier = notifier or FakeNotifier()
    pipeline = UsageIngestionPipeline(store, series, notifier, clock=fixed_clock)
    return CsvBatchDriver(FakeBlobStore(objects), pipeline), store, series


def test_rows_are_ingested_for_owner():
    key = "user123-usage-1700000000000.csv"
    driver, store, series = make_driver({
        (BUCKET, key): "date,usage\n2023-01-01,12.5\n2023-01-02,9.75\n",
    })

    result = driver.process_batch(BUCKET, key)

    assert result.user_id == "user123"
    assert result.rows_processed == 2
    assert result.rows_skipped == 0
    assert [p['id'] for p in store.puts] == ["user123", "user123"]
    assert [w[1] for w in series.writes] == ["2023-01-01", "2023-01-02"]


def test_header_only_file():
    driver, store, _ = make_driver({(BUCKET, "user1-usage-1.csv"): "date,usage\n"})
    result = driver.process_batch(BUCKET, "user1-usage-1.csv")
    assert result.rows_processed == 0
    assert store.puts == []


def test_unrecognised_name_uses_fallback_user():
    driver, store, _ = make_driver({
        (BUCKET, "energy_data.csv"): "timestamp,energy\n2023-01-01T00:00:00Z,4\n",
    })
    result = driver.process_batch(BUCKET, "energy_data.csv")
    assert result.user_id == FALLBACK_USER_ID
    assert store.puts[0]['id'] == FALLBACK_USER_ID
    assert store.puts[0]['date'] == "2023-01-01"


def test_bad_rows_are_skipped():
    key = "user123_energy_data.csv"
    csv_text = (
        "date,usage\n"
        "2023-01-01,1\n"
        "2023-01-02,\n"
        "2023-13-01,2\n"
        "2023-01-03,-4\n"
        "2023-01-04,0\n"
    )
    driver, store, _ = make_driver({(BUCKET, key): csv_text})

    result = driver.process_batch(BUCKET, key)

    assert result.rows_processed == 2
    assert [(s.line_number, s.reason) for s in result.skipped] == [
        (3, "missing usage"),
        (4, "Invalid date format. Use YYYY-MM-DD"),
        (5, "Usage must be a non-negative number"),
    ]
    assert [p['date'] for p in store.puts] == ["2023-01-01", "2023-01-04"]


def test_missing_object():
    driver, _, _ = make_driver({})
    with pytest.raises(BlobRetrievalError) as exc:
        driver.process_batch(BUCKET, "user1-usage-1.csv")
    assert exc.value.message == "Error retrieving file from S3"


def test_store_failure_aborts_batch():
    key = "user1-usage-1.csv"
    series = FakeTimeSeries(fail=True)
    driver, store, _ = make_driver(
        {(BUCKET, key): "date,usage\n2023-01-01,1\n2023-01-02,2\n"},
        series=series,
    )

    with pytest.raises(BatchProcessingError) as exc:
        driver.process_batch(BUCKET, key)

    assert exc.value.message == "Error processing CSV data"
    # first row reached the durable store before the time-series write failed
    assert len(store.puts) == 1
