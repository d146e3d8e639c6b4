# backend/lambda_handlers/post_energy_upload.py
"""
Lambda function to copy a CSV from a pre-signed URL into the CSV bucket
Triggered by API Gateway (POST)

Request body:
    {"presignedUrl": "https://..."}

The copy is named <userId>-usage-<epoch millis>.csv; process_csv relies on
that name to find the owning user.
"""
import time

import httpx

from backend.lib.config import get_settings
from backend.lib.energy_core.errors import ClientInputError
from backend.lib.energy_core.identity import user_id_or_default
from backend.lib.observability import logger
from backend.lib.responses import error_response, parse_json_body, require_method, response
from backend.lib.s3_service import S3Service
from backend.lib.wiring import build_blob_store, build_http_client


def upload_key(user_id: str, now_ms: int = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{user_id}-usage-{now_ms}.csv"


def handle(event: dict, http_client: httpx.Client, blob_store: S3Service, bucket: str) -> dict:
    require_method(event, 'POST', 'post_energy_upload')

    try:
        body = parse_json_body(event)
    except ClientInputError as e:
        return error_response(e.status_code, e.message)

    presigned_url = body.get('presignedUrl')
    if not presigned_url:
        return error_response(400, "Missing presignedUrl in request body")

    try:
        logger.info("Fetching file from pre-signed URL")
        fetched = http_client.get(presigned_url)
        if fetched.is_error:
            return error_response(
                500, f"Failed to fetch file from pre-signed URL: {fetched.reason_phrase}"
            )
    except httpx.HTTPError as e:
        logger.exception("Error fetching file from pre-signed URL")
        return error_response(500, str(e))

    file_name = upload_key(user_id_or_default(event))
    content_type = fetched.headers.get('content-type') or 'text/csv'

    logger.info(f"Uploading file {file_name} to {bucket}")
    if not blob_store.put_object(bucket, file_name, fetched.content, content_type):
        return error_response(500, "Error uploading file to S3")

    return response(200, {
        'message': 'File successfully copied to CSVUploadBucket',
        'fileName': file_name,
    })


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_http_client(), build_blob_store(), get_settings().csv_bucket)
