"""
Signals sent by the callback views.

Every signal is sent with ``sender`` set to the view function and a
``result`` argument holding the parsed response model.
"""
from django.dispatch import Signal

# result: StkCallback
stk_push_callback_received = Signal()

# result: B2CResult
b2c_result_received = Signal()

# result: B2CResult (queue timeout notification)
b2c_timeout_received = Signal()

# result: TransactionStatusResponse
transaction_status_result_received = Signal()

# result: AccountBalanceResponse
account_balance_result_received = Signal()

# result: C2BValidationResponse for the confirmed payment
c2b_confirmation_received = Signal()
