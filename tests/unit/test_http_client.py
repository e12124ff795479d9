"""
Unit tests for the HTTP client retry behaviour.
"""

import pytest
import requests
import responses

from mpesa_sdk.config import MpesaConfig
from mpesa_sdk.exceptions import APIError, DecodeError, NetworkError
from mpesa_sdk.utils.http_client import HTTPClient, compute_backoff_delay, is_retryable_status

BASE_URL = 'https://apisandbox.safaricom.et'
ENDPOINT = '/mpesa/stkpush/v3/processrequest'
URL = f"{BASE_URL}{ENDPOINT}"


def make_client(max_retries=3, retry_delay=1000):
    return HTTPClient(BASE_URL, timeout=5, max_retries=max_retries, retry_delay=retry_delay)


@pytest.mark.unit
class TestBackoff:
    """Test cases for the backoff computation."""

    def test_delay_doubles_per_attempt(self):
        assert compute_backoff_delay(1, 1000, jitter=0) == 1000
        assert compute_backoff_delay(2, 1000, jitter=0) == 2000
        assert compute_backoff_delay(3, 1000, jitter=0) == 4000

    def test_delay_is_capped_before_jitter(self):
        assert compute_backoff_delay(10, 1000, jitter=0) == 10000
        assert compute_backoff_delay(10, 1000, jitter=500) == 10500

    def test_random_jitter_range(self):
        for _ in range(50):
            delay = compute_backoff_delay(1, 100)
            assert 100 <= delay <= 1100

    @pytest.mark.parametrize('status_code,expected', [
        (400, False),
        (401, False),
        (404, False),
        (429, True),
        (500, True),
        (503, True),
    ])
    def test_retryable_status(self, status_code, expected):
        assert is_retryable_status(status_code) is expected


@pytest.mark.unit
class TestHTTPClient:
    """Test cases for HTTPClient.request."""

    @responses.activate
    def test_success_returns_json(self):
        responses.add(responses.POST, URL, json={'ResponseCode': '0'}, status=200)

        result = make_client().post(ENDPOINT, data={'Amount': 10})

        assert result == {'ResponseCode': '0'}
        assert len(responses.calls) == 1
        assert responses.calls[0].request.headers['Content-Type'] == 'application/json'

    @pytest.mark.parametrize('max_retries', [0, 1, 3])
    @responses.activate
    def test_server_error_retried_max_retries_plus_one_times(self, max_retries, no_sleep):
        responses.add(responses.POST, URL, json={'errorMessage': 'boom'}, status=500)

        with pytest.raises(APIError) as exc_info:
            make_client(max_retries=max_retries).post(ENDPOINT, data={})

        assert len(responses.calls) == max_retries + 1
        assert exc_info.value.attempts == max_retries + 1
        assert exc_info.value.status_code == 500
        assert len(no_sleep) == max_retries

    @pytest.mark.parametrize('status_code', [400, 401, 404])
    @responses.activate
    def test_client_error_not_retried(self, status_code, no_sleep):
        responses.add(
            responses.POST, URL,
            json={'errorCode': '404.001.03', 'errorMessage': 'Invalid Access Token'},
            status=status_code
        )

        with pytest.raises(APIError) as exc_info:
            make_client().post(ENDPOINT, data={})

        assert len(responses.calls) == 1
        assert no_sleep == []
        assert exc_info.value.attempts == 1
        assert exc_info.value.status_code == status_code
        assert exc_info.value.error_code == '404.001.03'
        assert 'Invalid Access Token' in str(exc_info.value)

    @responses.activate
    def test_rate_limit_is_retried(self, no_sleep):
        responses.add(responses.POST, URL, json={}, status=429)
        responses.add(responses.POST, URL, json={'ResponseCode': '0'}, status=200)

        result = make_client().post(ENDPOINT, data={})

        assert result == {'ResponseCode': '0'}
        assert len(responses.calls) == 2
        assert len(no_sleep) == 1

    @responses.activate
    def test_recovers_after_server_error(self, no_sleep):
        responses.add(responses.POST, URL, json={}, status=503)
        responses.add(responses.POST, URL, json={}, status=502)
        responses.add(responses.POST, URL, json={'ResponseCode': '0'}, status=200)

        result = make_client(retry_delay=100).post(ENDPOINT, data={})

        assert result == {'ResponseCode': '0'}
        assert len(responses.calls) == 3
        assert 0.1 <= no_sleep[0] <= 1.1
        assert 0.2 <= no_sleep[1] <= 1.2

    @responses.activate
    def test_connection_error_raises_network_error(self):
        responses.add(responses.POST, URL, body=requests.ConnectionError('refused'))

        with pytest.raises(NetworkError) as exc_info:
            make_client(max_retries=2).post(ENDPOINT, data={})

        assert len(responses.calls) == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.url == URL

    @responses.activate
    def test_invalid_json_raises_decode_error(self):
        responses.add(responses.GET, URL, body='not json', status=200)

        with pytest.raises(DecodeError):
            make_client().get(ENDPOINT)

        assert len(responses.calls) == 1

    @pytest.mark.parametrize('body', ['[]', '"ok"', 'null', '42'])
    @responses.activate
    def test_non_object_json_raises_decode_error(self, body):
        responses.add(responses.POST, URL, body=body, status=200, content_type='application/json')

        with pytest.raises(DecodeError, match='Expected a JSON object'):
            make_client().post(ENDPOINT, data={})

        assert len(responses.calls) == 1

    @responses.activate
    def test_follows_config_changes(self):
        config = MpesaConfig(consumer_key='key', consumer_secret='secret')
        client = HTTPClient.from_config(config)
        production_url = f"https://apis.safaricom.et{ENDPOINT}"
        responses.add(responses.POST, production_url, json={}, status=500)

        config.set_environment('production').set_max_retries(1).set_request_timeout(5)

        with pytest.raises(APIError) as exc_info:
            client.post(ENDPOINT, data={})

        assert len(responses.calls) == 2
        assert exc_info.value.attempts == 2
        assert client.timeout == 5

    def test_absolute_urls_are_used_as_is(self):
        client = make_client()

        assert client._get_full_url('https://other.example.com/x') == 'https://other.example.com/x'
        assert client._get_full_url('/v1/token/generate') == f"{BASE_URL}/v1/token/generate"

    def test_authorization_header_is_masked(self):
        sanitized = make_client()._sanitize_headers({'Authorization': 'Bearer secret-token'})

        assert sanitized == {'Authorization': 'Bearer ***'}
