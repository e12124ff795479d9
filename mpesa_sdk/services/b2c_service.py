"""
B2C service for business-to-customer disbursements.
"""

import logging
from typing import Any, Dict, Optional

from ..builders import B2CRequest
from ..constants import APIEndpoints
from ..responses import B2CResponse, B2CResult
from .base import BaseService

logger = logging.getLogger(__name__)


class B2CService(BaseService):
    """
    Service for B2C payments (salary, business and promotion payouts).
    """

    def send(self, request: Optional[B2CRequest] = None, **fields) -> B2CResponse:
        """
        Send a B2C payment request.

        Args:
            request: Prepared B2CRequest builder
            **fields: initiator_name, security_credential, command_id, amount,
                party_a, party_b, remarks, occasion, queue_timeout_url, result_url

        Returns:
            B2CResponse acknowledging the request; the outcome is delivered
            later to the ResultURL

        Raises:
            ValidationError: If the request is incomplete or invalid
            APIError: If the gateway rejects the request
        """
        request = B2CRequest.build(request, **fields)
        if not request.party_a and self.config.shortcode:
            request.set_party_a(self.config.shortcode)
        request.validate()

        payload = request.to_payload()
        logger.info(
            f"Sending B2C {request.command_id} of {request.amount} to {request.party_b}"
        )
        response = B2CResponse(self._post(APIEndpoints.B2C_PAYMENT, payload))
        self._ensure_accepted(response, 'B2C payment')

        logger.info(f"B2C payment accepted. ConversationID: {response.conversation_id}")
        return response

    def process_callback(self, payload: Dict[str, Any]) -> B2CResult:
        """Parse the body POSTed to the B2C ResultURL."""
        result = B2CResult.from_payload(payload)
        if result.is_successful():
            logger.info(
                f"B2C payment completed. TransactionID: {result.transaction_id}, "
                f"Amount: {result.transaction_amount}"
            )
        else:
            logger.warning(f"B2C payment failed: {result.get_detailed_error()}")
        return result
