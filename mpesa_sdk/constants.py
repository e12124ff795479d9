"""
Constants and enums for M-Pesa operations.
"""

from enum import Enum


class Environment(str, Enum):
    """Gateway environments."""
    SANDBOX = "sandbox"
    PRODUCTION = "production"


class B2CCommandID(str, Enum):
    """Allowed B2C command identifiers."""
    BUSINESS_PAYMENT = "BusinessPayment"
    SALARY_PAYMENT = "SalaryPayment"
    PROMOTION_PAYMENT = "PromotionPayment"


class C2BCommandID(str, Enum):
    """Allowed C2B simulation command identifiers."""
    CUSTOMER_PAY_BILL_ONLINE = "CustomerPayBillOnline"


class ResponseType(str, Enum):
    """Default action when the validation URL is unreachable."""
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class C2BResultCode(str, Enum):
    """Result codes returned to the gateway by the C2B validation endpoint."""
    ACCEPTED = "0"
    INVALID_MSISDN = "C2B00011"
    INVALID_AMOUNT = "C2B00013"
    INVALID_SHORTCODE = "C2B00015"
    MISSING_FIELD = "C2B00016"


BASE_URLS = {
    Environment.SANDBOX.value: "https://apisandbox.safaricom.et",
    Environment.PRODUCTION.value: "https://apis.safaricom.et",
}


# API Endpoints
class APIEndpoints:
    """M-Pesa API endpoints."""
    GENERATE_TOKEN = "/v1/token/generate"

    # Lipa na M-Pesa online
    STK_PUSH = "/mpesa/stkpush/v3/processrequest"
    STK_QUERY = "/mpesa/stkpushquery/v1/query"

    # C2B
    REGISTER_URL = "/v1/c2b-register-url/register"
    C2B_SIMULATE = "/mpesa/b2c/simulatetransaction/v1/request"

    # B2C
    B2C_PAYMENT = "/mpesa/b2c/v2/paymentrequest"

    # Queries
    TRANSACTION_STATUS = "/mpesa/transactionstatus/v1/query"
    ACCOUNT_BALANCE = "/mpesa/accountbalance/v2/query"


# Token settings
DEFAULT_TOKEN_EXPIRES_IN = 3599  # seconds
DEFAULT_TOKEN_TYPE = "Bearer"

# Authentication error codes returned by the token endpoint
AUTH_ERROR_MESSAGES = {
    "999991": "Invalid client id passed. Please check your consumer key.",
    "999996": "Invalid authentication passed. Please check your consumer key and secret.",
    "999997": "Invalid authorization header. Please check the Basic credentials.",
    "999998": "Required authorization header is missing.",
    "404.001.03": "Invalid access token. The token has expired or is invalid.",
    "400.008.01": "Invalid authentication type.",
    "400.008.02": "Invalid grant type passed.",
}

# Phone number settings
MSISDN_PATTERN = r"^251[17]\d{8}$"
SHORTCODE_PATTERN = r"^\d{5,6}$"

# STK push result codes
STK_CANCELLED_BY_USER = 1032

# B2C result codes and their descriptions
B2C_RESULT_CODES = {
    0: "Success",
    1: "Internal Server Error",
    2: "Unauthorized",
    3: "Invalid initiator name",
    4: "Invalid security credential",
    5: "Invalid command ID",
    6: "Invalid party A",
    7: "Invalid party B",
    8: "Invalid amount",
    9: "Invalid remarks",
    10: "Invalid occassion",
    11: "Invalid URL",
    12: "Invalid queue timeout URL",
    13: "Invalid result URL",
    14: "Invalid transaction type",
    15: "Duplicate transaction",
    16: "Insufficient balance",
    17: "Invalid phone number",
    18: "Unregistered phone number",
    19: "Inactive phone number",
    20: "Blocked phone number",
    21: "Transaction limit exceeded",
    22: "Daily limit exceeded",
    23: "Weekly limit exceeded",
    24: "Monthly limit exceeded",
    25: "Invalid transaction",
    26: "Transaction expired",
    27: "Transaction cancelled",
    28: "Transaction failed",
    29: "Request cancelled",
    30: "Request timeout",
    31: "Request not found",
    32: "System error",
    33: "Invalid request",
    34: "Invalid parameters",
    35: "Invalid response",
    36: "Invalid status",
}

B2C_PHONE_NUMBER_ERRORS = (17, 18, 19, 20)
B2C_LIMIT_ERRORS = (21, 22, 23, 24)
B2C_INSUFFICIENT_BALANCE = 16
B2C_CREDENTIAL_ERRORS = (2, 3, 4)
B2C_VALIDATION_ERRORS = (5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 34)
B2C_SYSTEM_ERRORS = (1, 32, 35, 36)

# Default settings
DEFAULT_TIMEOUT = 30  # seconds
MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1000  # milliseconds
MAX_BACKOFF_DELAY = 10000  # milliseconds
MAX_JITTER = 1000  # milliseconds
DEFAULT_CACHE_TTL = 3600  # seconds
DEFAULT_IDENTIFIER_TYPE = "4"

DEFAULT_LOGGING_CONFIG = {
    'log_dir': 'logs',
    'log_to_file': True,
    'log_to_console': False,
    'min_log_level': 'debug',
    'log_format': None,
    'max_file_size': None,
    'max_files': None,
}
