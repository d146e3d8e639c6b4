# backend/lib/responses.py
import json
from decimal import Decimal
from typing import Any, Optional

from backend.lib.energy_core.errors import ClientInputError, MethodNotAllowedError

CORS_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'OPTIONS,POST,GET',
    'Access-Control-Allow-Headers': 'Content-Type'
}


def _json_default(value):
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def response(status_code: int, body: Any) -> dict:
    """Create API Gateway response."""
    return {
        'statusCode': status_code,
        'headers': dict(CORS_HEADERS),
        'body': json.dumps(body, default=_json_default)
    }


def error_response(status_code: int, message: str) -> dict:
    return response(status_code, {'error': message})


def require_method(event: dict, method: str, handler_name: str) -> None:
    actual = (event or {}).get('httpMethod')
    if actual != method:
        raise MethodNotAllowedError(
            f"{handler_name} only accepts {method} method, you tried: {actual}"
        )


def parse_json_body(event: dict) -> dict:
    """Decode the request body; anything but a JSON object is a client error."""
    raw: Optional[str] = (event or {}).get('body')
    try:
        body = json.loads(raw) if raw is not None else None
    except (TypeError, ValueError):
        raise ClientInputError("Invalid request body")
    if not isinstance(body, dict):
        raise ClientInputError("Invalid request body")
    return body
