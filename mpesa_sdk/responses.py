"""
Typed, read-only views over M-Pesa API payloads.

Synchronous responses report acceptance through ``ResponseCode``; asynchronous
callbacks report the outcome through ``ResultCode`` and carry a list of
``{Key, Value}`` result parameters. Every model keeps the raw payload and
exposes a single domain-level ``is_successful()`` predicate.
"""

import copy
import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from .constants import (
    B2C_RESULT_CODES, B2C_PHONE_NUMBER_ERRORS, B2C_LIMIT_ERRORS,
    B2C_INSUFFICIENT_BALANCE, B2C_CREDENTIAL_ERRORS, B2C_VALIDATION_ERRORS,
    B2C_SYSTEM_ERRORS, STK_CANCELLED_BY_USER
)
from .exceptions import ValidationError


def _to_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _is_zero(code) -> bool:
    return code is not None and str(code).strip() == '0'


class ApiResponse:
    """Base response for synchronous API calls."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = copy.deepcopy(data) if data else {}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]):
        return cls(data)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._data!r})"

    def __eq__(self, other):
        return type(self) is type(other) and self._data == other._data

    @property
    def raw(self) -> Dict[str, Any]:
        """A copy of the payload this response was built from."""
        return copy.deepcopy(self._data)

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    @property
    def response_code(self) -> Optional[str]:
        code = self._data.get('ResponseCode')
        return None if code is None else str(code)

    @property
    def response_description(self) -> Optional[str]:
        return self._data.get('ResponseDescription')

    @property
    def conversation_id(self) -> Optional[str]:
        return self._data.get('ConversationID')

    @property
    def originator_conversation_id(self) -> Optional[str]:
        return self._data.get('OriginatorConversationID')

    @property
    def customer_message(self) -> Optional[str]:
        return self._data.get('CustomerMessage')

    def is_successful(self) -> bool:
        """Whether the gateway accepted the request (ResponseCode "0")."""
        return self.response_code == '0'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ResponseCode': self.response_code,
            'ResponseDescription': self.response_description,
            'ConversationID': self.conversation_id,
            'OriginatorConversationID': self.originator_conversation_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class StkPushResponse(ApiResponse):
    """Acknowledgement of an STK push request."""

    @property
    def merchant_request_id(self) -> Optional[str]:
        return self._data.get('MerchantRequestID')

    @property
    def checkout_request_id(self) -> Optional[str]:
        return self._data.get('CheckoutRequestID')

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'MerchantRequestID': self.merchant_request_id,
            'CheckoutRequestID': self.checkout_request_id,
            'CustomerMessage': self.customer_message,
        })
        return data


class StkQueryResponse(StkPushResponse):
    """Status of an earlier STK push, as returned by the query endpoint."""

    @property
    def result_code(self) -> Optional[str]:
        code = self._data.get('ResultCode')
        return None if code is None else str(code)

    @property
    def result_desc(self) -> Optional[str]:
        return self._data.get('ResultDesc')

    def is_paid(self) -> bool:
        return _is_zero(self.result_code)

    def is_cancelled_by_user(self) -> bool:
        return self.result_code == str(STK_CANCELLED_BY_USER)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'ResultCode': self.result_code,
            'ResultDesc': self.result_desc,
        })
        return data


class StkCallback(ApiResponse):
    """
    STK push result delivered to the CallBackURL.

    Built from the ``Body.stkCallback`` object of the callback body.
    """

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'StkCallback':
        """
        Raises:
            ValidationError: If the payload has no Body.stkCallback object
        """
        callback = (payload or {}).get('Body', {}).get('stkCallback')
        if not isinstance(callback, dict):
            raise ValidationError("Invalid callback data: missing Body.stkCallback")
        return cls(callback)

    @property
    def merchant_request_id(self) -> Optional[str]:
        return self._data.get('MerchantRequestID')

    @property
    def checkout_request_id(self) -> Optional[str]:
        return self._data.get('CheckoutRequestID')

    @property
    def result_code(self) -> Optional[int]:
        return _to_int(self._data.get('ResultCode'))

    @property
    def result_desc(self) -> Optional[str]:
        return self._data.get('ResultDesc')

    @property
    def metadata(self) -> Dict[str, Any]:
        """CallbackMetadata items as a name -> value mapping."""
        items = self._data.get('CallbackMetadata', {}).get('Item', [])
        return {item['Name']: item.get('Value') for item in items if 'Name' in item}

    @property
    def amount(self) -> Optional[float]:
        return _to_float(self.metadata.get('Amount'))

    @property
    def receipt_number(self) -> Optional[str]:
        return self.metadata.get('MpesaReceiptNumber')

    @property
    def transaction_date(self) -> Optional[str]:
        value = self.metadata.get('TransactionDate')
        return None if value is None else str(value)

    @property
    def phone_number(self) -> Optional[str]:
        value = self.metadata.get('PhoneNumber')
        return None if value is None else str(value)

    def is_successful(self) -> bool:
        return self.result_code == 0

    def is_cancelled_by_user(self) -> bool:
        return self.result_code == STK_CANCELLED_BY_USER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'MerchantRequestID': self.merchant_request_id,
            'CheckoutRequestID': self.checkout_request_id,
            'ResultCode': self.result_code,
            'ResultDesc': self.result_desc,
            'Amount': self.amount,
            'MpesaReceiptNumber': self.receipt_number,
            'TransactionDate': self.transaction_date,
            'PhoneNumber': self.phone_number,
        }


class C2BSimulationResponse(StkPushResponse):
    """Acknowledgement of a simulated C2B payment."""
    pass


class C2BValidationResponse(ApiResponse):
    """
    A C2B validation exchange: the gateway's validation request together
    with the ResultCode/ResultDesc/ThirdPartyTransID sent back.
    """

    RESERVED_KEYS = (
        'ResponseCode', 'ResponseDescription', 'ConversationID',
        'OriginatorConversationID', 'ThirdPartyTransID', 'ResultCode', 'ResultDesc',
    )

    @property
    def result_code(self) -> Optional[str]:
        code = self._data.get('ResultCode')
        return None if code is None else str(code)

    @property
    def result_desc(self) -> Optional[str]:
        return self._data.get('ResultDesc')

    @property
    def third_party_trans_id(self) -> Optional[str]:
        return self._data.get('ThirdPartyTransID')

    @property
    def transaction_details(self) -> Dict[str, Any]:
        return {
            key: value for key, value in self._data.items()
            if key not in self.RESERVED_KEYS
        }

    def get_transaction_detail(self, key: str, default=None):
        return self.transaction_details.get(key, default)

    def is_successful(self) -> bool:
        return _is_zero(self.result_code)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'ResultCode': self.result_code,
            'ResultDesc': self.result_desc,
            'ThirdPartyTransID': self.third_party_trans_id,
            'TransactionDetails': self.transaction_details,
        })
        return data


class RegisterUrlResponse(ApiResponse):
    """
    Response of the C2B register-url endpoint.

    This endpoint reports its outcome in a ``header`` object whose
    ``responseCode`` is 200 on success.
    """

    @property
    def header(self) -> Dict[str, Any]:
        return self._data.get('header') or {}

    @property
    def header_response_code(self) -> Optional[int]:
        return _to_int(self.header.get('responseCode'))

    @property
    def response_message(self) -> Optional[str]:
        return self.header.get('responseMessage')

    @property
    def customer_message(self) -> Optional[str]:
        return self.header.get('customerMessage', self._data.get('CustomerMessage'))

    @property
    def timestamp(self) -> Optional[str]:
        return self.header.get('timestamp')

    def is_successful(self) -> bool:
        if self.header:
            return self.header_response_code == 200
        return super().is_successful()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'header': {
                'responseCode': self.header_response_code,
                'responseMessage': self.response_message,
                'customerMessage': self.customer_message,
                'timestamp': self.timestamp,
            }
        }


class ResultResponse(ApiResponse):
    """
    Base for operations whose outcome arrives as a ``Result`` object with
    ``ResultParameters.ResultParameter`` key/value pairs.
    """

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]):
        """
        Wrap a result callback body.

        Raises:
            ValidationError: If the payload has no Result object
        """
        if not isinstance((payload or {}).get('Result'), dict):
            raise ValidationError("Invalid callback data: missing Result object")
        return cls(payload)

    @property
    def result(self) -> Dict[str, Any]:
        return self._data.get('Result') or {}

    @property
    def conversation_id(self) -> Optional[str]:
        return self.result.get('ConversationID', self._data.get('ConversationID'))

    @property
    def originator_conversation_id(self) -> Optional[str]:
        return self.result.get(
            'OriginatorConversationID', self._data.get('OriginatorConversationID')
        )

    @property
    def result_type(self) -> Optional[str]:
        value = self.result.get('ResultType')
        return None if value is None else str(value)

    @property
    def result_code(self) -> Optional[str]:
        value = self.result.get('ResultCode')
        return None if value is None else str(value)

    @property
    def result_desc(self) -> Optional[str]:
        return self.result.get('ResultDesc')

    @property
    def transaction_id(self) -> Optional[str]:
        return self.result.get('TransactionID')

    @property
    def raw_result_parameters(self) -> List[Dict[str, Any]]:
        parameters = self.result.get('ResultParameters') or {}
        parameter_list = parameters.get('ResultParameter') or []
        if isinstance(parameter_list, dict):
            parameter_list = [parameter_list]
        return copy.deepcopy(parameter_list)

    @property
    def result_parameters(self) -> Dict[str, Any]:
        """Result parameters as a key -> value mapping."""
        return {
            param['Key']: param['Value']
            for param in self.raw_result_parameters
            if 'Key' in param and 'Value' in param
        }

    def get_result_parameter(self, key: str, default=None):
        return self.result_parameters.get(key, default)

    def has_result(self) -> bool:
        return bool(self.result)

    def is_successful(self) -> bool:
        """Callback payloads succeed on ResultCode 0, acknowledgements on ResponseCode "0"."""
        if self.has_result():
            return _is_zero(self.result_code)
        return super().is_successful()


class B2CResponse(ApiResponse):
    """Acknowledgement of a B2C payment request."""
    pass


class B2CResult(ResultResponse):
    """B2C payment result delivered to the ResultURL."""

    @property
    def result_code(self) -> Optional[int]:
        return _to_int(self.result.get('ResultCode'))

    @property
    def transaction_amount(self) -> Optional[float]:
        return _to_float(self.get_result_parameter('TransactionAmount'))

    @property
    def transaction_receipt(self) -> Optional[str]:
        return self.get_result_parameter('TransactionReceipt')

    @property
    def receiver_name(self) -> Optional[str]:
        return self.get_result_parameter('ReceiverPartyPublicName')

    @property
    def transaction_datetime(self) -> Optional[str]:
        return self.get_result_parameter('TransactionCompletedDateTime')

    @property
    def account_balances(self) -> Dict[str, Optional[float]]:
        return {
            'utility': _to_float(self.get_result_parameter('B2CUtilityAccountAvailableFunds')),
            'working': _to_float(self.get_result_parameter('B2CWorkingAccountAvailableFunds')),
            'charges': _to_float(self.get_result_parameter('B2CChargesPaidAccountAvailableFunds')),
        }

    def is_recipient_registered(self) -> Optional[bool]:
        value = self.get_result_parameter('B2CRecipientIsRegisteredCustomer')
        return None if value is None else value == 'Y'

    def is_successful(self) -> bool:
        return self.result_code == 0

    def has_error(self, error_code: int) -> bool:
        return self.result_code == error_code

    def has_phone_number_error(self) -> bool:
        return self.result_code in B2C_PHONE_NUMBER_ERRORS

    def has_limit_error(self) -> bool:
        return self.result_code in B2C_LIMIT_ERRORS

    def has_insufficient_balance_error(self) -> bool:
        return self.has_error(B2C_INSUFFICIENT_BALANCE)

    def has_credential_error(self) -> bool:
        return self.result_code in B2C_CREDENTIAL_ERRORS

    def has_validation_error(self) -> bool:
        return self.result_code in B2C_VALIDATION_ERRORS

    def has_system_error(self) -> bool:
        return self.result_code in B2C_SYSTEM_ERRORS

    def get_detailed_error(self) -> str:
        """Describe the result code, e.g. 'Error Code: 16 - Insufficient balance. Details: ...'."""
        if self.result_code is None:
            return 'Unknown error occurred'

        message = f"Error Code: {self.result_code} - "
        message += B2C_RESULT_CODES.get(self.result_code, 'Unknown error code') + '.'
        if self.result_desc:
            message += f" Details: {self.result_desc}"
        return message

    def get_user_friendly_error(self) -> str:
        if self.has_phone_number_error():
            return ("There was an issue with the recipient's phone number. "
                    "Please verify the number and try again.")
        if self.has_limit_error():
            return 'Transaction limit exceeded. Please try a lower amount or try again later.'
        if self.has_insufficient_balance_error():
            return 'Insufficient balance to complete the transaction.'
        if self.has_credential_error():
            return 'Authentication failed. Please contact support.'
        if self.has_validation_error():
            return ('Invalid transaction details provided. '
                    'Please verify all information and try again.')
        if self.has_system_error():
            return ('A system error occurred. Please try again later '
                    'or contact support if the problem persists.')
        return 'An error occurred while processing the transaction. Please try again later.'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resultType': self.result_type,
            'resultCode': self.result_code,
            'resultDesc': self.result_desc,
            'transactionId': self.transaction_id,
            'conversationId': self.conversation_id,
            'originatorConversationId': self.originator_conversation_id,
            'transactionAmount': self.transaction_amount,
            'transactionReceipt': self.transaction_receipt,
            'receiverName': self.receiver_name,
            'transactionDateTime': self.transaction_datetime,
            'accountBalances': self.account_balances,
            'recipientRegistered': self.is_recipient_registered(),
        }


class TransactionStatusResponse(ResultResponse):
    """Transaction status acknowledgement or result callback."""

    @property
    def transaction_status(self) -> Optional[str]:
        return self.get_result_parameter('TransactionStatus')

    @property
    def amount(self) -> Optional[float]:
        return _to_float(self.get_result_parameter('Amount'))

    @property
    def transaction_date(self) -> Optional[str]:
        return self.get_result_parameter('FinalisedTime')

    @property
    def phone_number(self) -> Optional[str]:
        value = self.get_result_parameter('PhoneNumber')
        return None if value is None else str(value)

    @property
    def debit_party_name(self) -> Optional[str]:
        return self.get_result_parameter('DebitPartyName')

    @property
    def credit_party_name(self) -> Optional[str]:
        return self.get_result_parameter('CreditPartyName')

    @property
    def receipt_number(self) -> Optional[str]:
        return self.get_result_parameter('ReceiptNo')

    def is_completed(self) -> bool:
        return self.transaction_status == 'Completed'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resultType': self.result_type,
            'resultCode': self.result_code,
            'resultDesc': self.result_desc,
            'transactionStatus': self.transaction_status,
            'amount': self.amount,
            'transactionDate': self.transaction_date,
            'phoneNumber': self.phone_number,
            'debitPartyName': self.debit_party_name,
            'creditPartyName': self.credit_party_name,
            'receiptNumber': self.receipt_number,
            'rawResultParameters': self.raw_result_parameters,
        }


@dataclass(frozen=True)
class BalanceEntry:
    """One account in an account-balance result."""
    account: str
    currency: str
    amount: str

    @property
    def value(self) -> Optional[Decimal]:
        try:
            return Decimal(self.amount)
        except InvalidOperation:
            return None

    def to_dict(self) -> Dict[str, str]:
        return {'account': self.account, 'currency': self.currency, 'amount': self.amount}


def parse_balance_string(value: str) -> List[BalanceEntry]:
    """
    Parse an AccountBalance value of the form
    'Account|Currency|Amount&Account|Currency|Amount...'.

    Raises:
        ValidationError: If an entry does not have exactly three fields
    """
    if not value:
        return []

    entries = []
    for account in str(value).split('&'):
        parts = account.split('|')
        if len(parts) != 3:
            raise ValidationError(f"Invalid account balance entry: {account}")
        name, currency, amount = parts
        entries.append(BalanceEntry(account=name, currency=currency, amount=amount))
    return entries


class AccountBalanceResponse(ResultResponse):
    """Account balance acknowledgement or result callback."""

    @property
    def balances(self) -> List[BalanceEntry]:
        return parse_balance_string(self.get_result_parameter('AccountBalance'))

    @property
    def completed_time(self) -> Optional[str]:
        return self.get_result_parameter('BOCompletedTime')

    def get_balance(self, account: str) -> Optional[BalanceEntry]:
        for entry in self.balances:
            if entry.account == account:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resultType': self.result_type,
            'resultCode': self.result_code,
            'resultDesc': self.result_desc,
            'conversationId': self.conversation_id,
            'originatorConversationId': self.originator_conversation_id,
            'balances': [entry.to_dict() for entry in self.balances],
        }


def parse_balance_result(payload: Dict[str, Any]) -> List[BalanceEntry]:
    """
    Parse the balances out of an account-balance result callback.

    Raises:
        ValidationError: If the payload has no result parameters
    """
    parameters = (payload or {}).get('Result', {}).get('ResultParameters', {})
    if not parameters.get('ResultParameter'):
        raise ValidationError("Invalid balance result format")
    return AccountBalanceResponse(payload).balances
