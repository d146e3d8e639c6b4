# backend/lib/energy_core/batch.py
from backend.lib.observability import logger
from .errors import BatchProcessingError, BlobRetrievalError, ClientInputError, DependencyError
from .io import parse_csv_string, user_id_from_key
from .models import BatchResult, SkippedRow
from .pipeline import UsageIngestionPipeline


class CsvBatchDriver:
    """
    Feeds every row of an uploaded CSV through the ingestion pipeline.

    Rows are processed one after another. Rows that fail validation are
    skipped; a failed store write aborts the batch.
    """

    def __init__(self, blob_store, pipeline: UsageIngestionPipeline):
        self.blob_store = blob_store
        self.pipeline = pipeline

    def process_batch(self, bucket: str, key: str) -> BatchResult:
        logger.info(f"Processing file s3://{bucket}/{key}")

        content = self.blob_store.get_text(bucket, key)
        if content is None:
            raise BlobRetrievalError("Error retrieving file from S3")

        rows = parse_csv_string(content)
        user_id = user_id_from_key(key)
        logger.info(f"Parsed {len(rows)} rows from {key}", extra={'user_id': user_id})

        result = BatchResult(key=key, user_id=user_id)
        for row in rows:
            if isinstance(row, SkippedRow):
                logger.warning(f"Skipping line {row.line_number}: {row.reason}")
                result.skipped.append(row)
                continue
            try:
                self.pipeline.ingest(user_id, row.date, row.usage, row.timestamp)
            except ClientInputError as e:
                logger.warning(f"Skipping line {row.line_number}: {e.message}")
                result.skipped.append(SkippedRow(line_number=row.line_number, reason=e.message))
                continue
            except DependencyError as e:
                logger.exception(f"Aborting {key} at line {row.line_number}")
                raise BatchProcessingError("Error processing CSV data") from e
            result.rows_processed += 1

        logger.info(f"Successfully processed {result.rows_processed} items from {key}")
        return result
