"""
Transaction status service.
"""

import logging
from typing import Any, Dict, Optional

from ..builders import TransactionStatusRequest
from ..constants import APIEndpoints
from ..responses import TransactionStatusResponse
from .base import BaseService

logger = logging.getLogger(__name__)


class TransactionStatusService(BaseService):
    """Queries the status of earlier transactions."""

    def query(self, request: Optional[TransactionStatusRequest] = None, **fields) -> TransactionStatusResponse:
        """
        Ask the gateway for the status of a transaction.

        The immediate response only acknowledges the query; the status
        itself is POSTed to ``result_url`` and can be parsed with
        ``process_callback``.

        Args:
            request: Prepared TransactionStatusRequest builder
            **fields: initiator, security_credential, transaction_id,
                original_conversation_id, party_a, identifier_type,
                result_url, queue_timeout_url, remarks, occasion

        Raises:
            ValidationError: If the request is incomplete or invalid
            APIError: If the gateway rejects the query
        """
        request = TransactionStatusRequest.build(request, **fields)
        if not request.party_a and self.config.shortcode:
            request.set_party_a(self.config.shortcode)
        request.validate()

        logger.info(
            f"Querying transaction status: "
            f"{request.transaction_id or request.original_conversation_id}"
        )
        response = TransactionStatusResponse(
            self._post(APIEndpoints.TRANSACTION_STATUS, request.to_payload())
        )
        return self._ensure_accepted(response, 'Transaction status query')

    def process_callback(self, payload: Dict[str, Any]) -> TransactionStatusResponse:
        """
        Parse a transaction status result callback.

        Raises:
            ValidationError: If the payload has no Result object
        """
        response = TransactionStatusResponse.from_payload(payload)
        logger.info(
            f"Transaction status result for {response.transaction_id}: "
            f"{response.result_code} {response.result_desc}"
        )
        return response
