# backend/lambda_handlers/post_energy_input.py
"""
Lambda function to save one energy usage reading
Triggered by API Gateway (POST)

Request body:
    {"date": "2023-01-01", "usage": 12.5, "timestamp": "...", "userId": "..."}

timestamp is optional. The user id comes from the Cognito claims; the body's
userId is only used when the request carries no claims.
"""
from backend.lib.energy_core.errors import ClientInputError, DependencyError
from backend.lib.energy_core.identity import DEFAULT_USER_ID, user_id_from_event
from backend.lib.energy_core.pipeline import UsageIngestionPipeline
from backend.lib.observability import logger
from backend.lib.responses import error_response, parse_json_body, require_method, response
from backend.lib.wiring import build_pipeline


def handle(event: dict, pipeline: UsageIngestionPipeline) -> dict:
    require_method(event, 'POST', 'post_energy_input')
    logger.info("Received energy input request", extra={'path': event.get('path')})

    try:
        body = parse_json_body(event)
        user_id = user_id_from_event(event) or body.get('userId') or DEFAULT_USER_ID
        result = pipeline.ingest(
            user_id,
            body.get('date'),
            body.get('usage'),
            body.get('timestamp'),
        )
    except ClientInputError as e:
        logger.warning(f"Rejected energy input: {e.message}")
        return error_response(e.status_code, e.message)
    except DependencyError:
        logger.exception("Error saving energy data")
        return error_response(500, "Error saving energy data")
    except Exception as e:
        logger.exception("Unexpected error saving energy data")
        return error_response(500, str(e))

    observation = result.observation
    return response(200, {
        'id': observation.user_id,
        'date': observation.date,
        'usage': observation.usage,
        'timestamp': observation.timestamp,
        'message': 'Energy data saved successfully',
        'threshold': result.threshold,
        'thresholdExceeded': result.threshold_exceeded,
    })


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_pipeline())
