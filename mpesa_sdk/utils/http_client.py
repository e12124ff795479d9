"""
HTTP client for M-Pesa API communication.
"""

import logging
import random
import time
from typing import Dict, Any, Optional

import requests

from mpesa_sdk.constants import (
    DEFAULT_TIMEOUT, MAX_RETRIES, DEFAULT_RETRY_DELAY, MAX_BACKOFF_DELAY, MAX_JITTER
)
from mpesa_sdk.exceptions import APIError, DecodeError, NetworkError

logger = logging.getLogger(__name__)


def compute_backoff_delay(attempt: int, retry_delay: int, jitter: Optional[int] = None) -> int:
    """
    Get the delay in milliseconds to wait before retry number ``attempt``.

    The base delay doubles per attempt and is capped at 10 seconds; a random
    jitter of 0-1000 ms is added on top of the capped value.

    Args:
        attempt: 1 for the first retry, 2 for the second, ...
        retry_delay: Base delay in milliseconds
        jitter: Fixed jitter in milliseconds (random when omitted)
    """
    delay = min(retry_delay * (2 ** (attempt - 1)), MAX_BACKOFF_DELAY)
    if jitter is None:
        jitter = random.randint(0, MAX_JITTER)
    return delay + jitter


def is_retryable_status(status_code: Optional[int]) -> bool:
    """Client errors are final, except 429 Too Many Requests."""
    if status_code is None:
        return True
    return not (400 <= status_code < 500 and status_code != 429)


class HTTPClient:
    """
    HTTP client wrapper for M-Pesa API requests.
    Handles request/response, error handling, retries with backoff, and logging.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_delay: int = DEFAULT_RETRY_DELAY,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
        config=None
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL for API requests
            timeout: Request timeout in seconds
            max_retries: Retries after the first attempt for transient failures
            retry_delay: Base backoff delay in milliseconds
            verify_ssl: Whether to verify TLS certificates
            session: Optional pre-built requests session
            config: MpesaConfig to read the settings above from on every
                request, so later config changes take effect
        """
        self._base_url = base_url
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._verify_ssl = verify_ssl
        self.config = config
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> 'HTTPClient':
        """Create a client that follows the connection settings of an MpesaConfig."""
        return cls(
            config.base_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            verify_ssl=config.verify_ssl,
            session=session,
            config=config
        )

    @property
    def base_url(self) -> str:
        base_url = self.config.base_url if self.config is not None else self._base_url
        return base_url.rstrip('/')

    @property
    def timeout(self) -> int:
        return self.config.request_timeout if self.config is not None else self._timeout

    @property
    def max_retries(self) -> int:
        return self.config.max_retries if self.config is not None else self._max_retries

    @property
    def retry_delay(self) -> int:
        return self.config.retry_delay if self.config is not None else self._retry_delay

    @property
    def verify_ssl(self) -> bool:
        return self.config.verify_ssl if self.config is not None else self._verify_ssl

    def _get_full_url(self, endpoint: str) -> str:
        """Get full URL for endpoint."""
        if endpoint.startswith('http://') or endpoint.startswith('https://'):
            return endpoint
        endpoint = endpoint.lstrip('/')
        return f"{self.base_url}/{endpoint}"

    def _log_request(self, method: str, url: str, headers: Dict, data: Optional[Dict] = None):
        """Log API request details."""
        logger.info(f"M-Pesa API Request: {method} {url}")
        logger.debug(f"Headers: {self._sanitize_headers(headers)}")
        if data:
            logger.debug(f"Payload: {data}")

    def _log_response(self, response: requests.Response):
        """Log API response details."""
        logger.info(f"M-Pesa API Response: {response.status_code}")
        logger.debug(f"Response: {response.text}")

    def _sanitize_headers(self, headers: Dict) -> Dict:
        """Remove sensitive data from headers for logging."""
        sanitized = headers.copy()
        authorization = sanitized.get('Authorization')
        if authorization:
            scheme = authorization.split(' ', 1)[0]
            sanitized['Authorization'] = f"{scheme} ***"
        return sanitized

    def _error_body(self, response: requests.Response):
        try:
            return response.json()
        except ValueError:
            return response.text

    def _handle_response(self, response: requests.Response, url: str, method: str) -> Dict[str, Any]:
        """
        Raise for HTTP errors and parse the JSON body.

        Raises:
            requests.HTTPError: For 4xx/5xx responses (classified by the caller)
            DecodeError: If the body is not a valid JSON object
        """
        self._log_response(response)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(
                f"Invalid JSON response: {str(e)}",
                response_data={'response': response.text, 'url': url, 'method': method}
            )

        if not isinstance(data, dict):
            raise DecodeError(
                f"Expected a JSON object, got {type(data).__name__}",
                response_data={'response': response.text, 'url': url, 'method': method}
            )
        return data

    def _terminal_error(self, error: requests.HTTPError, url: str, method: str, attempts: int) -> APIError:
        """Build the error raised for a non-retryable client error."""
        response = error.response
        body = self._error_body(response)
        if isinstance(body, dict):
            parsed = APIError.from_response(body)
            message, error_code = parsed.message, parsed.error_code
        else:
            message, error_code = body, None

        return APIError(
            f"Request failed: {message or f'API request failed with status {response.status_code}'}",
            error_code=error_code if error_code is not None else response.status_code,
            response_data={
                'error': str(error),
                'response': body,
                'url': url,
                'method': method,
            },
            status_code=response.status_code,
            attempts=attempts
        )

    def request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Execute one logical API call, retrying transient failures.

        Client errors (4xx other than 429) fail immediately. Server errors,
        429 and connection failures are retried up to ``max_retries`` times
        with exponential backoff, strictly one attempt at a time.

        Args:
            method: HTTP method
            endpoint: API endpoint path or absolute URL
            data: JSON payload
            params: Query parameters
            headers: Request headers

        Returns:
            Parsed JSON response

        Raises:
            APIError: On a client error, or a server error after the last retry
            NetworkError: When no response was received after the last retry
            DecodeError: If a successful response is not valid JSON
        """
        url = self._get_full_url(endpoint)
        headers = dict(headers or {})
        if data is not None:
            headers.setdefault('Content-Type', 'application/json')

        self._log_request(method, url, headers, data)

        max_retries = self.max_retries
        attempt = 0
        last_error = None
        while attempt <= max_retries:
            try:
                response = self.session.request(
                    method,
                    url,
                    json=data,
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                    verify=self.verify_ssl
                )
                return self._handle_response(response, url, method)

            except requests.HTTPError as e:
                status_code = e.response.status_code
                if not is_retryable_status(status_code):
                    logger.error(f"Request failed with client error {status_code}: {url}")
                    raise self._terminal_error(e, url, method, attempt + 1)
                last_error = e

            except requests.RequestException as e:
                last_error = e

            attempt += 1
            if attempt <= max_retries:
                delay = compute_backoff_delay(attempt, self.retry_delay)
                logger.warning(
                    f"Request failed (attempt {attempt}/{max_retries + 1}): "
                    f"{str(last_error)}. Retrying in {delay} ms"
                )
                time.sleep(delay / 1000.0)

        logger.error(f"Max retries exceeded for {method} {url}: {str(last_error)}")
        response = getattr(last_error, 'response', None)
        context = {
            'error': str(last_error),
            'attempts': attempt,
            'url': url,
            'method': method,
        }
        if response is not None:
            context['response'] = self._error_body(response)
            raise APIError(
                f"Max retries exceeded after {attempt} attempts. Last error: {str(last_error)}",
                error_code=response.status_code,
                response_data=context,
                status_code=response.status_code,
                attempts=attempt
            )
        raise NetworkError(
            f"Max retries exceeded after {attempt} attempts. Last error: {str(last_error)}",
            response_data=context,
            url=url,
            attempts=attempt
        )

    def post(
        self,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Make POST request to API."""
        return self.request('POST', endpoint, data=data, params=params, headers=headers)

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Make GET request to API."""
        return self.request('GET', endpoint, params=params, headers=headers)

    def close(self):
        """Close the session."""
        self.session.close()
