# backend/lambda_handlers/get_all_items.py
"""
Lambda function to list every usage record in the table
Triggered by API Gateway (GET)

For development and testing only: it scans the whole usage table and
ignores the caller's identity.
"""
from backend.lib.observability import logger
from backend.lib.responses import error_response, require_method, response
from backend.lib.wiring import build_record_store


def handle(event: dict, record_store) -> dict:
    require_method(event, 'GET', 'get_all_items')
    logger.info("Received scan request", extra={'path': event.get('path')})

    items = record_store.scan_usage()
    if items is None:
        return error_response(500, "Error retrieving all items")

    logger.info(f"Returning {len(items)} items")
    return response(200, items)


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_record_store())
