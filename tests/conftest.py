"""
Pytest configuration and shared fixtures.
"""

import pytest
import responses as responses_lib

from mpesa_sdk import Mpesa, MpesaConfig
from mpesa_sdk.constants import APIEndpoints
from tests.utils.mocks import MockMpesaResponses, api_url


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """
    Record retry delays instead of sleeping.
    """
    delays = []
    monkeypatch.setattr('mpesa_sdk.utils.http_client.time.sleep', delays.append)
    return delays


@pytest.fixture
def config():
    return MpesaConfig(
        consumer_key='test_key',
        consumer_secret='test_secret',
        passkey='test_passkey',
        shortcode='174379',
        environment='sandbox',
    )


@pytest.fixture
def mpesa(config):
    return Mpesa(config)


@pytest.fixture
def mocked_api():
    """
    Activate ``responses`` with a successful token endpoint registered.
    """
    with responses_lib.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(
            responses_lib.GET,
            api_url(APIEndpoints.GENERATE_TOKEN),
            json=MockMpesaResponses.auth_success(),
            status=200
        )
        yield rsps
