"""
Authentication service for the M-Pesa API.
Handles token generation and in-memory caching.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..constants import (
    APIEndpoints, AUTH_ERROR_MESSAGES, DEFAULT_TOKEN_EXPIRES_IN, DEFAULT_TOKEN_TYPE
)
from ..exceptions import (
    APIError, AuthenticationError, NetworkError, NotAuthenticatedError, MpesaException
)
from ..utils.http_client import HTTPClient
from ..utils.security import generate_basic_credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthToken:
    """An access token and the moment it stops being valid."""
    access_token: str
    token_type: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class AuthService:
    """
    Service for managing M-Pesa access tokens.

    The token is cached on the instance and reused until it expires, so
    each client should own its own AuthService.
    """

    def __init__(self, config, http_client: Optional[HTTPClient] = None,
                 clock: Callable[[], float] = time.time):
        self.config = config
        self.http_client = http_client or HTTPClient.from_config(config)
        self._clock = clock
        self._token: Optional[AuthToken] = None

    @property
    def token(self) -> Optional[AuthToken]:
        return self._token

    @property
    def expires_at(self) -> Optional[float]:
        return self._token.expires_at if self._token else None

    @property
    def token_type(self) -> Optional[str]:
        return self._token.token_type if self._token else None

    def has_token(self) -> bool:
        return self._token is not None

    def is_expired(self) -> bool:
        """True when no token is cached or its expiry time has been reached."""
        if self._token is None:
            return True
        return self._token.is_expired(self._clock())

    def authenticate(self, force_refresh: bool = False) -> AuthToken:
        """
        Get a valid token, requesting a new one only when needed.

        Args:
            force_refresh: Request a new token even if the cached one is valid

        Returns:
            The cached or newly issued AuthToken

        Raises:
            AuthenticationError: If token generation fails
        """
        if not force_refresh and not self.is_expired():
            logger.debug("Using cached token")
            return self._token

        return self.generate_token()

    def generate_token(self) -> AuthToken:
        """
        Request a new access token using the consumer key and secret.

        Raises:
            AuthenticationError: If token generation fails
        """
        logger.info("Generating new M-Pesa access token")

        if not self.config.consumer_key or not self.config.consumer_secret:
            raise AuthenticationError(
                "Consumer key and secret are required to authenticate",
                error_type=AuthenticationError.MISSING_CREDENTIALS
            )

        headers = {
            'Authorization': 'Basic ' + generate_basic_credentials(
                self.config.consumer_key, self.config.consumer_secret
            )
        }

        try:
            response = self.http_client.get(
                endpoint=APIEndpoints.GENERATE_TOKEN,
                params={'grant_type': 'client_credentials'},
                headers=headers
            )
        except APIError as e:
            raise self._classify_error(e) from e
        except NetworkError as e:
            logger.error(f"Network error during authentication: {str(e)}")
            raise AuthenticationError(
                f"Authentication failed: network error: {str(e)}",
                response_data=e.response_data,
                error_type=AuthenticationError.NETWORK
            ) from e
        except MpesaException as e:
            logger.error(f"Failed to generate token: {str(e)}")
            raise AuthenticationError(
                f"Authentication failed: {str(e)}",
                response_data=e.response_data
            ) from e

        access_token = response.get('access_token')
        if not access_token:
            raise AuthenticationError(
                "Failed to get access token from response",
                response_data=response
            )

        try:
            expires_in = int(response.get('expires_in') or DEFAULT_TOKEN_EXPIRES_IN)
        except (TypeError, ValueError):
            logger.warning(
                f"Invalid expires_in {response.get('expires_in')!r}, "
                f"using {DEFAULT_TOKEN_EXPIRES_IN} seconds"
            )
            expires_in = DEFAULT_TOKEN_EXPIRES_IN

        self._token = AuthToken(
            access_token=access_token,
            token_type=response.get('token_type') or DEFAULT_TOKEN_TYPE,
            expires_at=self._clock() + expires_in
        )

        logger.info("Successfully generated and cached new token")
        return self._token

    def _classify_error(self, error: APIError) -> AuthenticationError:
        """Map a token endpoint error to a descriptive AuthenticationError."""
        body = (error.response_data or {}).get('response')
        code = None
        if isinstance(body, dict):
            code = body.get('resultCode', body.get('errorCode'))
        if code is None:
            code = error.error_code
        code = None if code is None else str(code)

        message = AUTH_ERROR_MESSAGES.get(code)
        if message:
            error_type = (
                AuthenticationError.INVALID_TOKEN if code == '404.001.03'
                else AuthenticationError.INVALID_CREDENTIALS
            )
        else:
            message = error.message
            error_type = None

        logger.error(f"Authentication failed ({code}): {message}")
        return AuthenticationError(
            f"Authentication failed: {message}",
            error_code=code,
            response_data=body,
            error_type=error_type
        )

    def get_token(self) -> str:
        """
        Get the current access token string.

        Raises:
            NotAuthenticatedError: If no token has been obtained and
                auto authentication is disabled
        """
        if self.config.auto_authenticate:
            return self.authenticate().access_token

        if self._token is None:
            raise NotAuthenticatedError(
                "No access token available. Call authenticate() first."
            )
        return self._token.access_token

    def invalidate_token(self):
        """Forget the cached token."""
        logger.info("Invalidating cached token")
        self._token = None

    def get_auth_header(self) -> dict:
        """
        Get authorization header for API requests.

        Returns:
            Dictionary with Authorization header
        """
        token = self.get_token()
        return {'Authorization': f"Bearer {token}"}
