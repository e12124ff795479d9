"""
Tests for the callback views.
"""

import json

import pytest
from django.urls import reverse

from mpesa_sdk import signals
from mpesa_sdk.responses import AccountBalanceResponse, B2CResult, StkCallback, TransactionStatusResponse
from tests.utils.mocks import MockMpesaResponses


class SignalRecorder:

    def __init__(self, signal, error=None):
        self.signal = signal
        self.error = error
        self.results = []

    def __call__(self, sender, result, **kwargs):
        self.results.append(result)
        if self.error:
            raise self.error

    def __enter__(self):
        self.signal.connect(self, weak=False)
        return self

    def __exit__(self, *exc_info):
        self.signal.disconnect(self)


def post_json(client, url_name, payload):
    return client.post(
        reverse(url_name),
        data=json.dumps(payload) if not isinstance(payload, str) else payload,
        content_type='application/json'
    )


@pytest.mark.unit
class TestCallbackViews:
    """Test cases for the M-Pesa callback views."""

    def test_stk_push_callback(self, client):
        with SignalRecorder(signals.stk_push_callback_received) as recorder:
            response = post_json(client, 'mpesa_stk_push_callback', MockMpesaResponses.stk_callback())

        assert response.status_code == 200
        assert response.json() == {'ResultCode': 0, 'ResultDesc': 'Accepted'}
        assert isinstance(recorder.results[0], StkCallback)
        assert recorder.results[0].receipt_number == 'RCT1234XYZ'

    def test_invalid_json_still_answers_200(self, client):
        response = post_json(client, 'mpesa_stk_push_callback', 'not json')

        assert response.status_code == 200
        assert response.json() == {'ResultCode': 1, 'ResultDesc': 'Failed'}

    def test_malformed_callback_still_answers_200(self, client):
        response = post_json(client, 'mpesa_b2c_result', {'unexpected': True})

        assert response.status_code == 200
        assert response.json()['ResultCode'] == 1

    def test_receiver_failure_still_answers_200(self, client):
        with SignalRecorder(signals.b2c_result_received, error=RuntimeError('db down')):
            response = post_json(client, 'mpesa_b2c_result', MockMpesaResponses.b2c_result())

        assert response.status_code == 200
        assert response.json()['ResultCode'] == 1

    def test_b2c_result(self, client):
        with SignalRecorder(signals.b2c_result_received) as recorder:
            response = post_json(client, 'mpesa_b2c_result', MockMpesaResponses.b2c_result())

        assert response.json()['ResultCode'] == 0
        assert isinstance(recorder.results[0], B2CResult)
        assert recorder.results[0].transaction_amount == 100.0

    def test_b2c_timeout(self, client):
        with SignalRecorder(signals.b2c_timeout_received) as recorder:
            response = post_json(client, 'mpesa_b2c_timeout', MockMpesaResponses.b2c_result(1))

        assert response.json()['ResultCode'] == 0
        assert recorder.results[0].has_system_error()

    def test_transaction_status_result(self, client):
        with SignalRecorder(signals.transaction_status_result_received) as recorder:
            post_json(
                client, 'mpesa_transaction_status_result',
                MockMpesaResponses.transaction_status_result()
            )

        assert isinstance(recorder.results[0], TransactionStatusResponse)
        assert recorder.results[0].is_completed()

    def test_account_balance_result(self, client):
        with SignalRecorder(signals.account_balance_result_received) as recorder:
            post_json(
                client, 'mpesa_account_balance_result',
                MockMpesaResponses.account_balance_result()
            )

        assert isinstance(recorder.results[0], AccountBalanceResponse)
        assert len(recorder.results[0].balances) == 2

    def test_get_not_allowed(self, client):
        response = client.get(reverse('mpesa_stk_push_callback'))

        assert response.status_code == 405


@pytest.mark.unit
class TestC2BViews:
    """Test cases for the C2B receiver views."""

    def test_validation_accepts(self, client):
        response = post_json(
            client, 'mpesa_c2b_validation', MockMpesaResponses.c2b_validation_request()
        )

        body = response.json()
        assert response.status_code == 200
        assert body['ResultCode'] == '0'
        assert body['ThirdPartyTransID'].startswith('TXN')

    def test_validation_rejects_invalid_msisdn(self, client):
        response = post_json(
            client, 'mpesa_c2b_validation',
            MockMpesaResponses.c2b_validation_request(MSISDN='0700404709')
        )

        assert response.status_code == 200
        assert response.json() == {'ResultCode': 'C2B00011', 'ResultDesc': 'Invalid MSISDN'}

    def test_confirmation(self, client):
        with SignalRecorder(signals.c2b_confirmation_received) as recorder:
            response = post_json(
                client, 'mpesa_c2b_confirmation', MockMpesaResponses.c2b_validation_request()
            )

        assert response.json() == {'ResultCode': '0', 'ResultDesc': 'Success'}
        assert recorder.results[0].get_transaction_detail('TransID') == 'RKL51ZDR4F'
