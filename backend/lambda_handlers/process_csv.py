# backend/lambda_handlers/process_csv.py
"""
Lambda function to process CSV uploads from S3
Triggered when a new CSV file is uploaded to the CSV bucket

Expected CSV format:
    date,usage
    2023-01-01,12.5
    2023-01-02,9.75

The owning user is taken from the object name (<userId>-usage-<millis>.csv).
"""
from urllib.parse import unquote_plus

from backend.lib.energy_core.batch import CsvBatchDriver
from backend.lib.energy_core.errors import BatchProcessingError, BlobRetrievalError
from backend.lib.observability import logger
from backend.lib.responses import error_response, response
from backend.lib.wiring import build_batch_driver


def s3_objects(event: dict) -> list:
    """(bucket, key) pairs from an S3 put notification; keys arrive URL-encoded."""
    objects = []
    for record in event['Records']:
        bucket = record['s3']['bucket']['name']
        key = unquote_plus(record['s3']['object']['key'])
        objects.append((bucket, key))
    return objects


def handle(event: dict, driver: CsvBatchDriver) -> dict:
    logger.info("Received S3 event", extra={'records': len((event or {}).get('Records') or [])})

    try:
        objects = s3_objects(event)
    except (KeyError, TypeError):
        logger.exception("Malformed S3 event")
        return error_response(400, "Invalid S3 event")

    processed = 0
    keys = []
    try:
        for bucket, key in objects:
            result = driver.process_batch(bucket, key)
            processed += result.rows_processed
            keys.append(key)
    except BlobRetrievalError:
        logger.exception("Error retrieving file from S3")
        return error_response(500, "Error retrieving file from S3")
    except BatchProcessingError:
        logger.exception("Error processing CSV data")
        return error_response(500, "Error processing CSV data")
    except Exception as e:
        logger.exception("Unexpected error processing CSV file")
        return error_response(500, str(e))

    return response(200, {
        'message': f"Successfully processed {processed} items from {', '.join(keys)}"
    })


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_batch_driver())
