# backend/lambda_handlers/auth_login.py
"""
Lambda function to log a user in with Cognito
Triggered by API Gateway (POST)
"""
from backend.lib.cognito_service import CognitoService
from backend.lib.energy_core.errors import ClientInputError, IdentityProviderError
from backend.lib.observability import logger
from backend.lib.responses import error_response, parse_json_body, require_method, response
from backend.lib.wiring import build_identity_provider


def handle(event: dict, cognito: CognitoService) -> dict:
    require_method(event, 'POST', 'login')
    # never log the body here, it carries the password
    logger.info("Received login request")

    try:
        body = parse_json_body(event)
    except ClientInputError as e:
        return error_response(e.status_code, e.message)

    username = body.get('username')
    password = body.get('password')
    if not username or not password:
        return error_response(400, "Username and password are required")

    try:
        tokens = cognito.login(username, password)
    except IdentityProviderError as e:
        return error_response(e.status_code, e.message or "An error occurred during login")

    return response(200, {'message': 'Login successful', **tokens})


@logger.inject_lambda_context
def lambda_handler(event, context):
    return handle(event, build_identity_provider())
