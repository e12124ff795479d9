"""
STK push (Lipa na M-Pesa online) service.
Prompts a customer's phone to authorise a payment.
"""

import logging
from typing import Any, Dict, Optional

from ..builders import StkPushRequest
from ..constants import APIEndpoints
from ..exceptions import ValidationError
from ..responses import StkPushResponse, StkQueryResponse, StkCallback
from ..utils.security import generate_password, generate_timestamp
from .base import BaseService

logger = logging.getLogger(__name__)


class StkPushService(BaseService):
    """
    Service for STK push operations.
    Handles push initiation, status queries, and callback parsing.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._test_password: Optional[str] = None

    def set_test_password(self, password: str) -> 'StkPushService':
        """
        Use a fixed password instead of the generated one (sandbox only).

        Raises:
            ValidationError: If the configured environment is not sandbox
        """
        if not self.config.is_sandbox:
            raise ValidationError("Test passwords can only be set in sandbox environment")
        self._test_password = password
        return self

    def generate_password(self, timestamp: str) -> str:
        """Password for the given timestamp: base64(shortcode + passkey + timestamp)."""
        if self._test_password is not None:
            return self._test_password
        return generate_password(self.config.shortcode, self.config.passkey, timestamp)

    def _credentials(self, timestamp: Optional[str] = None):
        if not self.config.shortcode:
            raise ValidationError("Shortcode is required for STK push")
        timestamp = timestamp or generate_timestamp()
        return timestamp, self.generate_password(timestamp)

    def push(self, request: Optional[StkPushRequest] = None, **fields) -> StkPushResponse:
        """
        Send an STK push request to the customer's phone.

        Accepts a StkPushRequest, keyword fields, or both:
            service.push(StkPushRequest().set_phone_number(...).set_amount(...))
            service.push(phone_number='251700404709', amount=10, ...)

        Args:
            request: Prepared request builder
            **fields: phone_number, amount, callback_url, account_reference,
                transaction_desc, timestamp

        Returns:
            StkPushResponse with MerchantRequestID and CheckoutRequestID

        Raises:
            ValidationError: If the request is incomplete or invalid
            APIError: If the gateway rejects the request
        """
        request = StkPushRequest.build(request, **fields)
        request.validate()

        timestamp, password = self._credentials(request.timestamp)
        payload = request.to_payload(self.config.shortcode, password, timestamp)

        logger.info(f"Initiating STK push for account reference: {request.account_reference}")
        response = StkPushResponse(self._post(APIEndpoints.STK_PUSH, payload))
        self._ensure_accepted(response, 'STK push')

        logger.info(
            f"STK push accepted. CheckoutRequestID: {response.checkout_request_id}"
        )
        return response

    def query(self, checkout_request_id: str, timestamp: Optional[str] = None) -> StkQueryResponse:
        """
        Query the status of an earlier STK push.

        Raises:
            ValidationError: If checkout_request_id is empty
            APIError: If the gateway rejects the query
        """
        if not checkout_request_id:
            raise ValidationError("CheckoutRequestID is required for STK push query")

        timestamp, password = self._credentials(timestamp)
        payload = {
            'BusinessShortCode': self.config.shortcode,
            'Password': password,
            'Timestamp': timestamp,
            'CheckoutRequestID': checkout_request_id,
        }

        logger.info(f"Querying STK push status: {checkout_request_id}")
        response = StkQueryResponse(self._post(APIEndpoints.STK_QUERY, payload))
        return self._ensure_accepted(response, 'STK push query')

    def process_callback(self, payload: Dict[str, Any]) -> StkCallback:
        """Parse the body POSTed to the STK push CallBackURL."""
        callback = StkCallback.from_payload(payload)
        logger.info(
            f"STK callback for {callback.checkout_request_id}: "
            f"{callback.result_code} {callback.result_desc}"
        )
        return callback
