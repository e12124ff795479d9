"""
Request builders for M-Pesa operations.

Each builder accumulates the fields of one operation, either through chained
``set_*`` calls or keyword arguments, and is validated as a whole right
before it is turned into a wire payload.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .constants import (
    B2CCommandID, C2BCommandID, ResponseType, DEFAULT_IDENTIFIER_TYPE
)
from .exceptions import ValidationError
from .utils.security import generate_reference
from .utils.validators import (
    validate_phone_number, validate_amount, validate_https_url,
    validate_choice, validate_shortcode, validate_required
)


class OperationRequest:
    """Shared behaviour of the request builders."""

    operation = 'request'

    def update(self, **values) -> 'OperationRequest':
        """
        Set several fields at once through their setters.

        Raises:
            TypeError: If a keyword does not name a field of this request
        """
        names = {f.name for f in fields(self)}
        for name, value in values.items():
            if name not in names:
                raise TypeError(f"{self.__class__.__name__} has no field '{name}'")
            if value is None:
                continue
            setter = getattr(self, f"set_{name}", None)
            if setter is not None:
                setter(value)
            else:
                setattr(self, name, value)
        return self

    @classmethod
    def build(cls, request=None, **values):
        """
        Accept either a ready builder or keyword arguments (or both, with
        keywords overriding the builder's fields).
        """
        if request is None:
            request = cls()
        elif not isinstance(request, cls):
            raise TypeError(f"Expected {cls.__name__}, got {type(request).__name__}")
        return request.update(**values)

    def validate(self) -> None:
        raise NotImplementedError


@dataclass
class StkPushRequest(OperationRequest):
    """Fields of an STK push (prompt-to-pay) request."""

    phone_number: Optional[str] = None
    amount: Optional[float] = None
    callback_url: Optional[str] = None
    account_reference: Optional[str] = None
    transaction_desc: str = 'Payment'
    timestamp: Optional[str] = None

    operation = 'STK push'

    def set_phone_number(self, phone_number):
        self.phone_number = validate_phone_number(phone_number)
        return self

    def set_amount(self, amount):
        self.amount = validate_amount(amount)
        return self

    def set_callback_url(self, url):
        self.callback_url = validate_https_url(url, 'Callback URL')
        return self

    def set_account_reference(self, reference):
        self.account_reference = str(reference)
        return self

    def set_transaction_desc(self, desc):
        self.transaction_desc = str(desc)
        return self

    def set_timestamp(self, timestamp):
        self.timestamp = str(timestamp)
        return self

    def validate(self):
        validate_required({
            'PhoneNumber': self.phone_number,
            'Amount': self.amount,
            'CallBackURL': self.callback_url,
            'AccountReference': self.account_reference,
        }, self.operation)
        validate_phone_number(self.phone_number)
        validate_amount(self.amount)
        validate_https_url(self.callback_url, 'Callback URL')

    def to_payload(self, shortcode: str, password: str, timestamp: str) -> Dict[str, Any]:
        return {
            'MerchantRequestID': generate_reference('Partner name'),
            'BusinessShortCode': shortcode,
            'Password': password,
            'Timestamp': timestamp,
            'TransactionType': C2BCommandID.CUSTOMER_PAY_BILL_ONLINE.value,
            'Amount': self.amount,
            'PartyA': self.phone_number,
            'PartyB': shortcode,
            'PhoneNumber': self.phone_number,
            'CallBackURL': self.callback_url,
            'AccountReference': self.account_reference,
            'TransactionDesc': self.transaction_desc,
            'ReferenceData': [
                {
                    'Key': 'ThirdPartyReference',
                    'Value': generate_reference('Ref'),
                }
            ],
        }


@dataclass
class B2CRequest(OperationRequest):
    """Fields of a business-to-customer disbursement."""

    initiator_name: Optional[str] = None
    security_credential: Optional[str] = None
    command_id: str = B2CCommandID.BUSINESS_PAYMENT.value
    amount: Optional[float] = None
    party_a: Optional[str] = None
    party_b: Optional[str] = None
    remarks: Optional[str] = None
    occasion: str = ''
    queue_timeout_url: Optional[str] = None
    result_url: Optional[str] = None

    operation = 'B2C transaction'

    def set_initiator_name(self, initiator_name):
        self.initiator_name = str(initiator_name)
        return self

    def set_security_credential(self, security_credential):
        self.security_credential = str(security_credential)
        return self

    def set_command_id(self, command_id):
        self.command_id = validate_choice(command_id, B2CCommandID, 'CommandID')
        return self

    def set_amount(self, amount):
        self.amount = validate_amount(amount)
        return self

    def set_party_a(self, party_a):
        self.party_a = validate_shortcode(party_a, 'PartyA')
        return self

    def set_party_b(self, party_b):
        self.party_b = validate_phone_number(party_b, 'PartyB')
        return self

    def set_remarks(self, remarks):
        self.remarks = str(remarks)
        return self

    def set_occasion(self, occasion):
        self.occasion = str(occasion)
        return self

    def set_queue_timeout_url(self, url):
        self.queue_timeout_url = validate_https_url(url, 'Queue Timeout URL')
        return self

    def set_result_url(self, url):
        self.result_url = validate_https_url(url, 'Result URL')
        return self

    def validate(self):
        validate_required({
            'InitiatorName': self.initiator_name,
            'SecurityCredential': self.security_credential,
            'CommandID': self.command_id,
            'Amount': self.amount,
            'PartyA': self.party_a,
            'PartyB': self.party_b,
            'Remarks': self.remarks,
            'QueueTimeOutURL': self.queue_timeout_url,
            'ResultURL': self.result_url,
        }, self.operation)
        validate_choice(self.command_id, B2CCommandID, 'CommandID')
        validate_amount(self.amount)
        validate_phone_number(self.party_b, 'PartyB')
        validate_https_url(self.result_url, 'Result URL')
        validate_https_url(self.queue_timeout_url, 'Queue Timeout URL')

    def to_payload(self) -> Dict[str, Any]:
        return {
            'OriginatorConversationID': generate_reference('MPESA-B2C'),
            'InitiatorName': self.initiator_name,
            'SecurityCredential': self.security_credential,
            'CommandID': self.command_id,
            'Amount': self.amount,
            'PartyA': self.party_a,
            'PartyB': self.party_b,
            'Remarks': self.remarks,
            'QueueTimeOutURL': self.queue_timeout_url,
            'ResultURL': self.result_url,
            'Occassion': self.occasion,
        }


@dataclass
class C2BSimulationRequest(OperationRequest):
    """Fields of a simulated customer-to-business payment (sandbox)."""

    command_id: str = C2BCommandID.CUSTOMER_PAY_BILL_ONLINE.value
    amount: Optional[float] = None
    msisdn: Optional[str] = None
    bill_ref_number: Optional[str] = None
    short_code: Optional[str] = None

    operation = 'C2B simulation'

    def set_command_id(self, command_id):
        self.command_id = validate_choice(command_id, C2BCommandID, 'CommandID')
        return self

    def set_amount(self, amount):
        self.amount = validate_amount(amount)
        return self

    def set_msisdn(self, msisdn):
        self.msisdn = validate_phone_number(msisdn, 'MSISDN')
        return self

    def set_bill_ref_number(self, bill_ref_number):
        self.bill_ref_number = str(bill_ref_number)
        return self

    def set_short_code(self, short_code):
        self.short_code = validate_shortcode(short_code)
        return self

    def validate(self):
        validate_required({
            'CommandID': self.command_id,
            'Amount': self.amount,
            'Msisdn': self.msisdn,
            'BillRefNumber': self.bill_ref_number,
            'ShortCode': self.short_code,
        }, self.operation)
        validate_choice(self.command_id, C2BCommandID, 'CommandID')
        validate_amount(self.amount)
        validate_phone_number(self.msisdn, 'MSISDN')

    def to_payload(self) -> Dict[str, Any]:
        return {
            'CommandID': self.command_id,
            'Amount': str(self.amount),
            'Msisdn': self.msisdn,
            'BillRefNumber': self.bill_ref_number,
            'ShortCode': self.short_code,
        }


@dataclass
class RegisterUrlRequest(OperationRequest):
    """Fields of a C2B confirmation/validation URL registration."""

    short_code: Optional[str] = None
    response_type: str = ResponseType.COMPLETED.value
    confirmation_url: Optional[str] = None
    validation_url: Optional[str] = None
    command_id: str = 'RegisterURL'

    operation = 'URL registration'

    def set_short_code(self, short_code):
        self.short_code = validate_shortcode(short_code)
        return self

    def set_response_type(self, response_type):
        self.response_type = validate_choice(response_type, ResponseType, 'ResponseType')
        return self

    def set_confirmation_url(self, url):
        self.confirmation_url = validate_https_url(url, 'Confirmation URL')
        return self

    def set_validation_url(self, url):
        self.validation_url = validate_https_url(url, 'Validation URL')
        return self

    def set_command_id(self, command_id):
        self.command_id = str(command_id)
        return self

    def validate(self):
        validate_required({
            'ShortCode': self.short_code,
            'ResponseType': self.response_type,
            'ConfirmationURL': self.confirmation_url,
            'ValidationURL': self.validation_url,
            'CommandID': self.command_id,
        }, self.operation)
        validate_shortcode(self.short_code)
        validate_choice(self.response_type, ResponseType, 'ResponseType')
        validate_https_url(self.confirmation_url, 'Confirmation URL')
        validate_https_url(self.validation_url, 'Validation URL')

    def to_payload(self) -> Dict[str, Any]:
        return {
            'ShortCode': self.short_code,
            'ResponseType': self.response_type,
            'CommandID': self.command_id,
            'ConfirmationURL': self.confirmation_url,
            'ValidationURL': self.validation_url,
        }


@dataclass
class TransactionStatusRequest(OperationRequest):
    """Fields of a transaction status query."""

    initiator: Optional[str] = None
    security_credential: Optional[str] = None
    transaction_id: Optional[str] = None
    original_conversation_id: Optional[str] = None
    party_a: Optional[str] = None
    identifier_type: str = DEFAULT_IDENTIFIER_TYPE
    result_url: Optional[str] = None
    queue_timeout_url: Optional[str] = None
    remarks: str = 'Transaction Status Query'
    occasion: str = ''

    operation = 'transaction status query'

    def set_initiator(self, initiator):
        self.initiator = str(initiator)
        return self

    def set_security_credential(self, security_credential):
        self.security_credential = str(security_credential)
        return self

    def set_transaction_id(self, transaction_id):
        self.transaction_id = str(transaction_id)
        return self

    def set_original_conversation_id(self, conversation_id):
        self.original_conversation_id = str(conversation_id)
        return self

    def set_party_a(self, party_a):
        self.party_a = validate_shortcode(party_a, 'PartyA')
        return self

    def set_identifier_type(self, identifier_type):
        self.identifier_type = str(identifier_type)
        return self

    def set_result_url(self, url):
        self.result_url = validate_https_url(url, 'Result URL')
        return self

    def set_queue_timeout_url(self, url):
        self.queue_timeout_url = validate_https_url(url, 'Queue Timeout URL')
        return self

    def set_remarks(self, remarks):
        self.remarks = str(remarks)
        return self

    def set_occasion(self, occasion):
        self.occasion = str(occasion)
        return self

    def validate(self):
        validate_required({
            'Initiator': self.initiator,
            'SecurityCredential': self.security_credential,
            'PartyA': self.party_a,
            'ResultURL': self.result_url,
            'QueueTimeOutURL': self.queue_timeout_url,
        }, self.operation)
        if not self.transaction_id and not self.original_conversation_id:
            raise ValidationError("Either TransactionID or OriginalConversationID is required")
        validate_https_url(self.result_url, 'Result URL')
        validate_https_url(self.queue_timeout_url, 'Queue Timeout URL')

    def to_payload(self) -> Dict[str, Any]:
        return {
            'Initiator': self.initiator,
            'SecurityCredential': self.security_credential,
            'CommandID': 'TransactionStatusQuery',
            'TransactionID': self.transaction_id or '0',
            'OriginalConversationID': self.original_conversation_id or '',
            'PartyA': self.party_a,
            'IdentifierType': self.identifier_type,
            'ResultURL': self.result_url,
            'QueueTimeOutURL': self.queue_timeout_url,
            'Remarks': self.remarks,
            'Occasion': self.occasion,
        }


@dataclass
class AccountBalanceRequest(OperationRequest):
    """Fields of an account balance query."""

    initiator: Optional[str] = None
    security_credential: Optional[str] = None
    party_a: Optional[str] = None
    identifier_type: str = DEFAULT_IDENTIFIER_TYPE
    remarks: str = 'Balance check'
    queue_timeout_url: Optional[str] = None
    result_url: Optional[str] = None
    originator_conversation_id: Optional[str] = None

    operation = 'account balance query'

    def set_initiator(self, initiator):
        self.initiator = str(initiator)
        return self

    def set_security_credential(self, security_credential):
        self.security_credential = str(security_credential)
        return self

    def set_party_a(self, party_a):
        self.party_a = validate_shortcode(party_a, 'PartyA')
        return self

    def set_identifier_type(self, identifier_type):
        self.identifier_type = str(identifier_type)
        return self

    def set_remarks(self, remarks):
        self.remarks = str(remarks)
        return self

    def set_queue_timeout_url(self, url):
        self.queue_timeout_url = validate_https_url(url, 'Queue Timeout URL')
        return self

    def set_result_url(self, url):
        self.result_url = validate_https_url(url, 'Result URL')
        return self

    def set_originator_conversation_id(self, originator_id):
        self.originator_conversation_id = str(originator_id)
        return self

    def validate(self):
        validate_required({
            'Initiator': self.initiator,
            'SecurityCredential': self.security_credential,
            'PartyA': self.party_a,
            'QueueTimeOutURL': self.queue_timeout_url,
            'ResultURL': self.result_url,
        }, self.operation)
        validate_https_url(self.result_url, 'Result URL')
        validate_https_url(self.queue_timeout_url, 'Queue Timeout URL')

    def to_payload(self) -> Dict[str, Any]:
        return {
            'OriginatorConversationID': (
                self.originator_conversation_id or generate_reference('Partner')
            ),
            'Initiator': self.initiator,
            'SecurityCredential': self.security_credential,
            'CommandID': 'AccountBalance',
            'PartyA': self.party_a,
            'IdentifierType': self.identifier_type,
            'Remarks': self.remarks,
            'QueueTimeOutURL': self.queue_timeout_url,
            'ResultURL': self.result_url,
        }
