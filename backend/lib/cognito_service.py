"""
=============================================================================
COGNITO SERVICE - user sign-up and login against a Cognito user pool
=============================================================================

Both calls use the app client (USER_POOL_CLIENT_ID) with the
USER_PASSWORD_AUTH flow. Unlike the storage services, failures are raised:
the handlers must answer with the status and message Cognito returned
(e.g. 400 "User already exists", 400 "Incorrect username or password.").
=============================================================================
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from typing import Dict

from backend.lib.config import Settings, get_settings
from backend.lib.energy_core.errors import IdentityProviderError
from backend.lib.observability import logger


def _provider_error(e: ClientError) -> IdentityProviderError:
    error = e.response.get('Error', {})
    status = e.response.get('ResponseMetadata', {}).get('HTTPStatusCode') or 500
    message = error.get('Message') or str(e)
    return IdentityProviderError(message, status_code=status)


class CognitoService:
    """
    Thin wrapper over the cognito-idp client.

    Usage:
        cognito = CognitoService()
        tokens = cognito.login("alice", "Password123!")
    """

    def __init__(self, settings: Settings = None, client=None):
        settings = settings or get_settings()
        self.client_id = settings.user_pool_client_id
        self.client = client or boto3.client('cognito-idp', region_name=settings.region)

    def login(self, username: str, password: str) -> Dict:
        """
        Authenticate a user.

        Returns:
            dict: idToken, accessToken, refreshToken, expiresIn

        Raises:
            IdentityProviderError: with Cognito's status code and message
        """
        try:
            response = self.client.initiate_auth(
                AuthFlow='USER_PASSWORD_AUTH',
                ClientId=self.client_id,
                AuthParameters={'USERNAME': username, 'PASSWORD': password}
            )
        except ClientError as e:
            logger.error(f"Error logging in user: {e}")
            raise _provider_error(e) from e
        except BotoCoreError as e:
            logger.error(f"Error logging in user: {e}")
            raise IdentityProviderError(str(e)) from e

        result = response.get('AuthenticationResult', {})
        return {
            'idToken': result.get('IdToken'),
            'accessToken': result.get('AccessToken'),
            'refreshToken': result.get('RefreshToken'),
            'expiresIn': result.get('ExpiresIn'),
        }

    def signup(self, username: str, password: str, email: str) -> Dict:
        """
        Register a user with an email attribute.

        Returns:
            dict: userConfirmed, userSub

        Raises:
            IdentityProviderError: with Cognito's status code and message
        """
        try:
            response = self.client.sign_up(
                ClientId=self.client_id,
                Username=username,
                Password=password,
                UserAttributes=[{'Name': 'email', 'Value': email}]
            )
        except ClientError as e:
            logger.error(f"Error signing up user: {e}")
            raise _provider_error(e) from e
        except BotoCoreError as e:
            logger.error(f"Error signing up user: {e}")
            raise IdentityProviderError(str(e)) from e

        return {
            'userConfirmed': response.get('UserConfirmed'),
            'userSub': response.get('UserSub'),
        }
