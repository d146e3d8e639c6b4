# backend/lambda_handlers/update_threshold.py
"""
Lambda function to set the caller's usage alert threshold
Triggered by API Gateway (POST)

Request body:
    {"threshold": 150}

Requires Cognito claims: a threshold always belongs to an authenticated user.
"""
from backend.lib.energy_core.errors import AuthorizationError, ClientInputError
from backend.lib.energy_core.identity import user_id_from_event
from backend.lib.energy_core.validation import parse_non_negative
from backend.lib.observability import logger
from backend.lib.responses import error_response, parse_json_body, require_method, response
from backend.lib.wiring import build_record_store


def parse_threshold(body: dict) -> float:
    if body.get('threshold') is None:
        raise ClientInputError("Missing threshold in request body")
    threshold = body['threshold']
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ClientInputError("Threshold must be a number")
    return parse_non_negative(threshold, "Threshold must be a non-negative number")


def handle(event: dict, record_store) -> dict:
    require_method(event, 'POST', 'update_threshold')
    logger.info("Received threshold update", extra={'path': event.get('path')})

    try:
        user_id = user_id_from_event(event)
        if not user_id:
            raise AuthorizationError("Not authenticated")
        threshold = parse_threshold(parse_json_body(event))
    except (AuthorizationError, ClientInputError) as e:
        return error_response(e.status_code, e.message)

    updated = record_store.update_threshold(user_id, threshold)
    if updated is None:
        return error_response(500, "Error updating threshold")

    logger.info("Threshold updated", extra={'user_id': user_id, 'threshold': threshold})
    return response(200, {
        'message': 'Threshold updated successfully',
        'id': user_id,
        'threshold': threshold,
    })


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_record_store())
