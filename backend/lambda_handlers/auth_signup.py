# backend/lambda_handlers/auth_signup.py
"""
Lambda function to register a user with Cognito
Triggered by API Gateway (POST)
"""
from backend.lib.cognito_service import CognitoService
from backend.lib.energy_core.errors import ClientInputError, IdentityProviderError
from backend.lib.observability import logger
from backend.lib.responses import error_response, parse_json_body, require_method, response
from backend.lib.wiring import build_identity_provider


def handle(event: dict, cognito: CognitoService) -> dict:
    require_method(event, 'POST', 'signup')
    logger.info("Received signup request")

    try:
        body = parse_json_body(event)
    except ClientInputError as e:
        return error_response(e.status_code, e.message)

    username = body.get('username')
    password = body.get('password')
    email = body.get('email')
    if not username or not password or not email:
        return error_response(400, "Username, password, and email are required")

    try:
        result = cognito.signup(username, password, email)
    except IdentityProviderError as e:
        return error_response(e.status_code, e.message or "An error occurred during user registration")

    return response(200, {
        'message': 'User registration successful',
        'username': username,
        **result,
    })


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_identity_provider())
