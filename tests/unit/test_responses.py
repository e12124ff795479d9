"""
Unit tests for response models and gateway error mapping.
"""

import json

import pytest

from mpesa_sdk.exceptions import APIError
from mpesa_sdk.responses import ApiResponse, RegisterUrlResponse, StkPushResponse
from tests.utils.mocks import MockMpesaResponses


@pytest.mark.unit
class TestApiResponse:
    """Test cases for the base response model."""

    def test_numeric_response_code_is_normalised(self):
        response = ApiResponse({'ResponseCode': 0})

        assert response.response_code == '0'
        assert response.is_successful()

    def test_missing_code_is_not_successful(self):
        assert not ApiResponse({}).is_successful()
        assert not ApiResponse(None).is_successful()

    def test_payload_is_copied(self):
        payload = MockMpesaResponses.stk_push_success()
        response = StkPushResponse(payload)
        payload['ResponseCode'] = '1'
        response.raw['ResponseCode'] = '1'

        assert response.response_code == '0'

    def test_to_json(self):
        response = StkPushResponse(MockMpesaResponses.stk_push_success())
        data = json.loads(response.to_json())

        assert data['CheckoutRequestID'] == 'ws_CO_123456789'
        assert data['ResponseCode'] == '0'

    def test_equality(self):
        payload = MockMpesaResponses.api_accepted()

        assert ApiResponse(payload) == ApiResponse.from_dict(payload)
        assert ApiResponse(payload) != StkPushResponse(payload)


@pytest.mark.unit
class TestRegisterUrlResponse:
    """Test cases for the register-url header format."""

    def test_header_success(self):
        response = RegisterUrlResponse(MockMpesaResponses.register_url_success())

        assert response.is_successful()
        assert response.header_response_code == 200
        assert response.timestamp == '2024-01-01T12:00:00.000'

    def test_header_failure(self):
        response = RegisterUrlResponse(MockMpesaResponses.register_url_failure())

        assert not response.is_successful()
        assert response.response_message == 'Short Code already Registered'

    def test_plain_response_code(self):
        assert RegisterUrlResponse({'ResponseCode': '0'}).is_successful()


@pytest.mark.unit
class TestAPIErrorFromResponse:
    """Test cases for APIError.from_response."""

    def test_response_code_and_description(self):
        error = APIError.from_response(MockMpesaResponses.api_rejected())

        assert error.error_code == '2001'
        assert error.message == 'The initiator information is invalid.'
        assert error.response_data['ConversationID'] == ''

    def test_error_code_and_message(self):
        error = APIError.from_response({'errorCode': '500.001.1001', 'errorMessage': 'Balance low'})

        assert error.error_code == '500.001.1001'
        assert str(error) == 'Balance low'

    def test_unknown_body(self):
        error = APIError.from_response('oops')

        assert error.message == 'Unknown error'
        assert error.error_code is None
