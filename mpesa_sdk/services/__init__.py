"""
M-Pesa services.
"""

from .auth_service import AuthService, AuthToken
from .stk_push_service import StkPushService
from .b2c_service import B2CService
from .c2b_service import C2BService, C2BValidationService
from .transaction_status_service import TransactionStatusService
from .account_balance_service import AccountBalanceService

__all__ = [
    'AuthService',
    'AuthToken',
    'StkPushService',
    'B2CService',
    'C2BService',
    'C2BValidationService',
    'TransactionStatusService',
    'AccountBalanceService',
]
