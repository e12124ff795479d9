"""
Unit tests for the Mpesa client and logging setup.
"""

import logging

import pytest
import responses

from mpesa_sdk import Mpesa, MpesaConfig
from mpesa_sdk.exceptions import ConfigurationError
from mpesa_sdk.utils.logger import configure_logging, get_log_level
from tests.utils.mocks import MockMpesaResponses


@pytest.mark.unit
class TestMpesaClient:
    """Test cases for client composition."""

    def test_services_share_transport_and_auth(self, mpesa):
        services = [
            mpesa.stk_push, mpesa.b2c, mpesa.c2b,
            mpesa.transaction_status, mpesa.account_balance,
        ]

        for service in services:
            assert service.http_client is mpesa.http_client
            assert service.auth_service is mpesa.auth
            assert service.config is mpesa.config

    def test_invalid_config_is_rejected(self):
        with pytest.raises(ConfigurationError):
            Mpesa(MpesaConfig())

    def test_separate_clients_have_separate_token_caches(self, config):
        assert Mpesa(config).auth is not Mpesa(config).auth

    def test_authenticate(self, mpesa, mocked_api):
        token = mpesa.authenticate()

        assert token.access_token == 'test_access_token_12345'
        mpesa.authenticate()
        assert len(mocked_api.calls) == 1

    def test_environment_change_after_construction(self, mpesa):
        with responses.RequestsMock() as rsps:
            rsps.add(
                responses.GET, 'https://apis.safaricom.et/v1/token/generate',
                json=MockMpesaResponses.auth_success(), status=200
            )

            mpesa.config.set_environment('production')
            mpesa.authenticate()

            assert rsps.calls[0].request.url.startswith('https://apis.safaricom.et/')
        assert mpesa.http_client.base_url == 'https://apis.safaricom.et'

    def test_from_env(self):
        mpesa = Mpesa.from_env({
            'MPESA_CONSUMER_KEY': 'key',
            'MPESA_CONSUMER_SECRET': 'secret',
            'MPESA_ENVIRONMENT': 'production',
        })

        assert mpesa.http_client.base_url == 'https://apis.safaricom.et'

    def test_from_settings(self):
        mpesa = Mpesa.from_settings()

        assert mpesa.config.shortcode == '174379'


@pytest.mark.unit
class TestLogging:
    """Test cases for configure_logging."""

    def teardown_method(self):
        logger = logging.getLogger('mpesa_sdk')
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_file_logging(self, config, tmp_path):
        config.set_logging_config(log_dir=str(tmp_path / 'logs'), min_log_level='info')

        logger = configure_logging(config)
        logger.info('payment accepted')

        assert logger.level == logging.INFO
        assert (tmp_path / 'logs' / 'mpesa.log').read_text().count('payment accepted') == 1

    def test_rotating_file_and_console(self, config, tmp_path):
        config.set_logging_config(
            log_dir=str(tmp_path), log_to_console=True, max_file_size=1024, max_files=2
        )

        logger = configure_logging(config)
        handler_types = sorted(type(handler).__name__ for handler in logger.handlers)

        assert handler_types == ['RotatingFileHandler', 'StreamHandler']

    def test_rotation_without_max_files(self, config, tmp_path):
        config.set_logging_config(log_dir=str(tmp_path), max_file_size=200)

        logger = configure_logging(config)
        for number in range(50):
            logger.info(f"line {number:02d} " + "x" * 40)

        assert (tmp_path / 'mpesa.log.1').exists()
        assert (tmp_path / 'mpesa.log').stat().st_size <= 200

    def test_reconfiguring_replaces_handlers(self, config, tmp_path):
        config.set_logging_config(log_dir=str(tmp_path))

        configure_logging(config)
        logger = configure_logging(config)

        assert len(logger.handlers) == 1

    def test_unknown_level(self):
        with pytest.raises(ConfigurationError):
            get_log_level('verbose')
