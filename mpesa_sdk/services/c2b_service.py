"""
C2B (customer-to-business) services.

``C2BService`` calls the gateway to register callback URLs and to simulate
payments. ``C2BValidationService`` is the receiving side: it checks the
validation and confirmation requests the gateway POSTs to the business and
never makes an outbound call.
"""

import logging
from typing import Any, Dict, Optional

from ..builders import C2BSimulationRequest, RegisterUrlRequest
from ..constants import APIEndpoints, C2BResultCode
from ..exceptions import APIError
from ..responses import C2BSimulationResponse, C2BValidationResponse, RegisterUrlResponse
from ..utils.security import generate_third_party_trans_id
from ..utils.validators import is_valid_msisdn, is_valid_amount, is_valid_shortcode
from .base import BaseService

logger = logging.getLogger(__name__)


class C2BService(BaseService):
    """Outbound C2B operations: URL registration and payment simulation."""

    def register_url(self, request: Optional[RegisterUrlRequest] = None, **fields) -> RegisterUrlResponse:
        """
        Register the confirmation and validation URLs for a shortcode.

        Args:
            request: Prepared RegisterUrlRequest builder
            **fields: short_code, response_type, confirmation_url,
                validation_url, command_id

        Returns:
            RegisterUrlResponse

        Raises:
            ValidationError: If the request is incomplete or invalid
            APIError: If the gateway does not confirm the registration
        """
        request = RegisterUrlRequest.build(request, **fields)
        if not request.short_code and self.config.shortcode:
            request.set_short_code(self.config.shortcode)
        request.validate()

        logger.info(f"Registering C2B URLs for shortcode {request.short_code}")
        data = self._post(
            APIEndpoints.REGISTER_URL,
            request.to_payload(),
            params={'apikey': self.config.consumer_key}
        )
        response = RegisterUrlResponse(data)

        if not response.is_successful():
            message = response.response_message or response.response_description or 'Unknown error'
            logger.error(f"C2B URL registration failed: {message}")
            raise APIError(
                f"URL registration failed: {message}",
                error_code=response.header_response_code or response.response_code,
                response_data=response.raw
            )

        logger.info(f"C2B URLs registered: {response.customer_message}")
        return response

    def simulate(self, request: Optional[C2BSimulationRequest] = None, **fields) -> C2BSimulationResponse:
        """
        Simulate a customer paying into a shortcode (sandbox).

        Raises:
            ValidationError: If the request is incomplete or invalid
            APIError: If the gateway rejects the simulation
        """
        request = C2BSimulationRequest.build(request, **fields)
        if not request.short_code and self.config.shortcode:
            request.set_short_code(self.config.shortcode)
        request.validate()

        logger.info(f"Simulating C2B payment of {request.amount} from {request.msisdn}")
        response = C2BSimulationResponse(
            self._post(APIEndpoints.C2B_SIMULATE, request.to_payload())
        )
        return self._ensure_accepted(response, 'C2B simulation')


class C2BValidationService:
    """
    Checks incoming C2B validation requests and acknowledges confirmations.
    """

    REQUIRED_FIELDS = ('TransAmount', 'MSISDN', 'BusinessShortCode')

    def handle_validation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Decide whether to accept a C2B payment.

        Returns:
            Dict with ResultCode and ResultDesc, plus ThirdPartyTransID when
            the payment is accepted
        """
        payload = payload or {}
        logger.info(f"Handling C2B validation for transaction {payload.get('TransID')}")

        missing = [name for name in self.REQUIRED_FIELDS if payload.get(name) in (None, '')]
        if missing:
            logger.warning(f"C2B validation rejected, missing: {', '.join(missing)}")
            return self._reject(C2BResultCode.MISSING_FIELD, 'Missing required field')

        if not is_valid_msisdn(str(payload['MSISDN'])):
            logger.warning(f"C2B validation rejected, invalid MSISDN: {payload['MSISDN']}")
            return self._reject(C2BResultCode.INVALID_MSISDN, 'Invalid MSISDN')

        if not is_valid_amount(payload['TransAmount']):
            logger.warning(f"C2B validation rejected, invalid amount: {payload['TransAmount']}")
            return self._reject(C2BResultCode.INVALID_AMOUNT, 'Invalid Amount')

        if not is_valid_shortcode(str(payload['BusinessShortCode'])):
            logger.warning(
                f"C2B validation rejected, invalid shortcode: {payload['BusinessShortCode']}"
            )
            return self._reject(C2BResultCode.INVALID_SHORTCODE, 'Invalid Shortcode')

        return {
            'ResultCode': C2BResultCode.ACCEPTED.value,
            'ResultDesc': 'Accepted',
            'ThirdPartyTransID': generate_third_party_trans_id(),
        }

    def _reject(self, code: C2BResultCode, description: str) -> Dict[str, Any]:
        return {'ResultCode': code.value, 'ResultDesc': description}

    def validate(self, payload: Dict[str, Any]) -> C2BValidationResponse:
        """Run ``handle_validation`` and wrap the request with its outcome."""
        data = dict(payload or {})
        data.update(self.handle_validation(payload))
        return C2BValidationResponse(data)

    def handle_confirmation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Acknowledge a completed C2B payment."""
        payload = payload or {}
        logger.info(
            f"C2B payment confirmed. TransID: {payload.get('TransID')}, "
            f"Amount: {payload.get('TransAmount')}, MSISDN: {payload.get('MSISDN')}"
        )
        return {'ResultCode': '0', 'ResultDesc': 'Success'}
