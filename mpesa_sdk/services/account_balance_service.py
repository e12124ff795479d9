"""
Account balance service.
"""

import logging
from typing import Any, Dict, Optional

from ..builders import AccountBalanceRequest
from ..constants import APIEndpoints
from ..responses import AccountBalanceResponse
from .base import BaseService

logger = logging.getLogger(__name__)


class AccountBalanceService(BaseService):

    def check_balance(self, request: Optional[AccountBalanceRequest] = None, **fields) -> AccountBalanceResponse:
        """
        Request the balances of the business accounts.

        Balances arrive later on ``result_url``; parse them with
        ``process_callback``.

        Raises:
            ValidationError: If the request is incomplete or invalid
            APIError: If the gateway rejects the query
        """
        request = AccountBalanceRequest.build(request, **fields)
        if not request.party_a and self.config.shortcode:
            request.set_party_a(self.config.shortcode)
        request.validate()

        logger.info(f"Checking account balance for {request.party_a}")
        response = AccountBalanceResponse(
            self._post(APIEndpoints.ACCOUNT_BALANCE, request.to_payload())
        )
        return self._ensure_accepted(response, 'Account balance query')

    def process_callback(self, payload: Dict[str, Any]) -> AccountBalanceResponse:
        response = AccountBalanceResponse.from_payload(payload)
        if response.is_successful():
            logger.info(f"Account balance received: {len(response.balances)} account(s)")
        else:
            logger.warning(f"Account balance query failed: {response.result_desc}")
        return response
