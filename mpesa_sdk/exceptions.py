"""
Custom exceptions for M-Pesa operations.
"""


class MpesaException(Exception):
    """Base exception for all M-Pesa-related errors."""

    def __init__(self, message, error_code=None, response_data=None):
        self.message = message
        self.error_code = error_code
        self.response_data = response_data
        super().__init__(self.message)


class ValidationError(MpesaException):
    """Raised when input validation fails, before any request is sent."""
    pass


class InvalidPhoneNumberError(ValidationError):
    """Raised when phone number format is invalid."""
    pass


class InvalidAmountError(ValidationError):
    """Raised when amount is invalid."""
    pass


class InvalidURLError(ValidationError):
    """Raised when a callback URL is not an absolute HTTPS URL."""
    pass


class ConfigurationError(ValidationError):
    """Raised when there's a configuration issue."""
    pass


class AuthenticationError(MpesaException):
    """Raised when an access token cannot be obtained."""

    INVALID_CREDENTIALS = 'invalid_credentials'
    INVALID_TOKEN = 'invalid_token'
    MISSING_CREDENTIALS = 'missing_credentials'
    NETWORK = 'network'

    def __init__(self, message, error_code=None, response_data=None, error_type=None):
        self.error_type = error_type
        super().__init__(message, error_code=error_code, response_data=response_data)


class NotAuthenticatedError(AuthenticationError, RuntimeError):
    """Raised when a token is requested before one has been obtained."""
    pass


class NetworkError(MpesaException):
    """Raised when the gateway could not be reached or gave no usable response."""

    def __init__(self, message, error_code=None, response_data=None,
                 status_code=None, url=None, attempts=None):
        self.status_code = status_code
        self.url = url
        self.attempts = attempts
        super().__init__(message, error_code=error_code, response_data=response_data)


class APIError(MpesaException):
    """Raised when the M-Pesa API returns an error or a non-success result code."""

    def __init__(self, message, error_code=None, response_data=None,
                 status_code=None, attempts=None):
        self.status_code = status_code
        self.attempts = attempts
        super().__init__(message, error_code=error_code, response_data=response_data)

    @classmethod
    def from_response(cls, response, status_code=None):
        """Build an error from a gateway response body."""
        response = response if isinstance(response, dict) else {}
        message = (
            response.get('ResponseDescription')
            or response.get('errorMessage')
            or response.get('resultDesc')
            or 'Unknown error'
        )
        code = response.get('ResponseCode')
        if code is None:
            code = response.get('errorCode', response.get('resultCode'))
        return cls(message, error_code=code, response_data=response, status_code=status_code)


class DecodeError(MpesaException):
    """Raised when a response body is not valid JSON."""
    pass
