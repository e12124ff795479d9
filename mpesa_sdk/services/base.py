"""
Shared plumbing for services that call the M-Pesa API.
"""

import logging
from typing import Any, Dict, Optional

from ..exceptions import APIError
from ..utils.http_client import HTTPClient
from .auth_service import AuthService

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base class for operation services.
    Holds the shared HTTP client and auth service and sends authorised requests.
    """

    def __init__(self, config, http_client: Optional[HTTPClient] = None,
                 auth_service: Optional[AuthService] = None):
        self.config = config
        self.http_client = http_client or HTTPClient.from_config(config)
        self.auth_service = auth_service or AuthService(config, self.http_client)

    def _post(self, endpoint: str, payload: Dict[str, Any],
              params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send an authorised POST request and return the parsed body."""
        headers = self.auth_service.get_auth_header()
        return self.http_client.post(
            endpoint=endpoint,
            data=payload,
            headers=headers,
            params=params
        )

    def _ensure_accepted(self, response, operation: str):
        """
        Raise when the gateway reports a non-zero response code.

        Raises:
            APIError: Carrying the response code and description
        """
        if response.response_code is not None and not response.is_successful():
            logger.error(
                f"{operation} rejected: {response.response_code} "
                f"{response.response_description}"
            )
            raise APIError.from_response(response.raw)
        return response
