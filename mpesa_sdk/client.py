"""
M-Pesa client.

``Mpesa`` wires one HTTP client and one auth service into the operation
services and exposes them as attributes:

    mpesa = Mpesa(load_config_from_env())
    mpesa.stk_push.push(phone_number='251700404709', amount=10, ...)
    mpesa.b2c.send(B2CRequest().set_amount(100)...)
"""

import logging
from typing import Optional

import requests

from .config import MpesaConfig, load_config_from_env, load_config_from_settings
from .services import (
    AuthService, StkPushService, B2CService, C2BService, C2BValidationService,
    TransactionStatusService, AccountBalanceService
)
from .services.auth_service import AuthToken
from .utils.http_client import HTTPClient
from .utils.logger import configure_logging

logger = logging.getLogger(__name__)


class Mpesa:
    """
    Entry point to the M-Pesa API.

    Each instance owns its token cache; use one client per thread.
    """

    def __init__(self, config: MpesaConfig, session: Optional[requests.Session] = None,
                 setup_logging: bool = False):
        """
        Initialize the client.

        Args:
            config: Connection settings, validated here
            session: Optional requests session for the HTTP client
            setup_logging: Apply the config's logging options to the SDK logger

        Raises:
            ConfigurationError: If the config is invalid
        """
        config.validate()
        self.config = config

        if setup_logging:
            configure_logging(config)

        self.http_client = HTTPClient.from_config(config, session=session)
        self.auth = AuthService(config, self.http_client)

        services = (self.config, self.http_client, self.auth)
        self.stk_push = StkPushService(*services)
        self.b2c = B2CService(*services)
        self.c2b = C2BService(*services)
        self.transaction_status = TransactionStatusService(*services)
        self.account_balance = AccountBalanceService(*services)
        self.c2b_receiver = C2BValidationService()

        logger.debug(f"M-Pesa client ready for {config.environment} ({config.base_url})")

    @classmethod
    def from_env(cls, environ=None, **kwargs) -> 'Mpesa':
        return cls(load_config_from_env(environ), **kwargs)

    @classmethod
    def from_settings(cls, **kwargs) -> 'Mpesa':
        return cls(load_config_from_settings(), **kwargs)

    def authenticate(self, force_refresh: bool = False) -> AuthToken:
        """Obtain (or reuse) an access token."""
        return self.auth.authenticate(force_refresh=force_refresh)

    def close(self):
        self.http_client.close()
