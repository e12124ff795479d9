"""
M-Pesa Ethiopia SDK for Django

Client for the M-Pesa payment gateway: STK push, B2C, C2B, transaction
status and account balance, plus Django views for the gateway callbacks.
"""

__version__ = "0.1.0"

from .builders import (
    StkPushRequest, B2CRequest, C2BSimulationRequest, RegisterUrlRequest,
    TransactionStatusRequest, AccountBalanceRequest
)
from .client import Mpesa
from .config import MpesaConfig, load_config_from_env, load_config_from_settings
from .exceptions import (
    MpesaException, ValidationError, InvalidPhoneNumberError, InvalidAmountError,
    InvalidURLError, ConfigurationError, AuthenticationError, NotAuthenticatedError,
    NetworkError, APIError, DecodeError
)

__all__ = [
    'Mpesa',
    'MpesaConfig',
    'load_config_from_env',
    'load_config_from_settings',
    'StkPushRequest',
    'B2CRequest',
    'C2BSimulationRequest',
    'RegisterUrlRequest',
    'TransactionStatusRequest',
    'AccountBalanceRequest',
    'MpesaException',
    'ValidationError',
    'InvalidPhoneNumberError',
    'InvalidAmountError',
    'InvalidURLError',
    'ConfigurationError',
    'AuthenticationError',
    'NotAuthenticatedError',
    'NetworkError',
    'APIError',
    'DecodeError',
]
