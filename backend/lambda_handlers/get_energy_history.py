# backend/lambda_handlers/get_energy_history.py
"""
Lambda function to get energy usage history for a date range
Triggered by API Gateway (GET)

Query parameters:
- startDate: Required, YYYY-MM-DD
- endDate: Required, YYYY-MM-DD
- aggregation: Optional, 'daily', 'weekly' or 'monthly'. Without it the
  stored records are returned as they are.
"""
from backend.lib.energy_core.errors import ClientInputError
from backend.lib.energy_core.history import aggregate_usage
from backend.lib.energy_core.identity import user_id_or_default
from backend.lib.energy_core.validation import is_valid_date
from backend.lib.observability import logger
from backend.lib.responses import error_response, require_method, response
from backend.lib.wiring import build_record_store


def handle(event: dict, record_store) -> dict:
    require_method(event, 'GET', 'get_energy_history')
    logger.info("Received energy history request", extra={'path': event.get('path')})

    user_id = user_id_or_default(event)
    params = event.get('queryStringParameters') or {}
    start_date = params.get('startDate')
    end_date = params.get('endDate')
    aggregation = params.get('aggregation')

    if not start_date or not end_date:
        return error_response(400, "Missing required query parameters: startDate and endDate are required")
    if not is_valid_date(start_date) or not is_valid_date(end_date):
        return error_response(400, "Invalid date format. Required format is YYYY-MM-DD")
    if start_date > end_date:
        return error_response(400, "startDate must not be after endDate")

    items = record_store.query_usage(user_id, start_date, end_date)
    if items is None:
        return error_response(500, "Error retrieving energy history data")

    if not aggregation:
        return response(200, items)
    try:
        return response(200, aggregate_usage(items, aggregation))
    except ClientInputError as e:
        return error_response(e.status_code, e.message)


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_record_store())
