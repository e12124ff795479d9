"""
Configuration management for the M-Pesa SDK.
"""

import os
import tempfile

from .constants import (
    BASE_URLS, Environment, DEFAULT_TIMEOUT, MAX_RETRIES,
    DEFAULT_RETRY_DELAY, DEFAULT_CACHE_TTL, DEFAULT_LOGGING_CONFIG
)
from .exceptions import ConfigurationError

TRUE_VALUES = ('1', 'true', 'yes', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'off', '')

# Maps MPESA_* keys to attribute names
CONFIG_KEYS = {
    'MPESA_ENVIRONMENT': 'environment',
    'MPESA_BASE_URL': 'base_url',
    'MPESA_CONSUMER_KEY': 'consumer_key',
    'MPESA_CONSUMER_SECRET': 'consumer_secret',
    'MPESA_PASSKEY': 'passkey',
    'MPESA_SHORTCODE': 'shortcode',
    'MPESA_LOG_DIR': 'log_dir',
    'MPESA_LOG_TO_FILE': 'log_to_file',
    'MPESA_LOG_TO_CONSOLE': 'log_to_console',
    'MPESA_MIN_LOG_LEVEL': 'min_log_level',
}


def _to_bool(value, name):
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean value. Got: {value}")


def _to_int(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer. Got: {value}")


class MpesaConfig:
    """
    Connection settings for the M-Pesa API.

    Values are passed in explicitly; use ``load_config_from_env`` or
    ``load_config_from_settings`` to build one from ambient configuration.
    Every ``set_*`` method returns the instance so calls can be chained.
    """

    def __init__(
        self,
        consumer_key='',
        consumer_secret='',
        passkey='',
        shortcode='',
        environment=Environment.SANDBOX.value,
        base_url=None,
        **options
    ):
        self._consumer_key = consumer_key or ''
        self._consumer_secret = consumer_secret or ''
        self._passkey = passkey or ''
        self._shortcode = shortcode or ''
        self._environment = str(environment or Environment.SANDBOX.value).lower()
        self._base_url = base_url or BASE_URLS.get(
            self._environment, BASE_URLS[Environment.SANDBOX.value]
        )

        self._verify_ssl = True
        self._request_timeout = DEFAULT_TIMEOUT
        self._max_retries = MAX_RETRIES
        self._retry_delay = DEFAULT_RETRY_DELAY
        self._auto_authenticate = True

        self._use_cache = False
        self._cache_dir = os.path.join(tempfile.gettempdir(), 'mpesa-sdk-cache')
        self._cache_ttl = DEFAULT_CACHE_TTL

        self.set_logging_config()

        if options:
            self.set_options(**options)

    def __repr__(self):
        return (
            f"MpesaConfig(environment={self._environment!r}, "
            f"base_url={self._base_url!r}, shortcode={self._shortcode!r})"
        )

    @property
    def base_url(self):
        """Get M-Pesa API base URL."""
        return self._base_url

    def set_base_url(self, base_url):
        self._base_url = base_url
        return self

    @property
    def consumer_key(self):
        return self._consumer_key

    def set_consumer_key(self, consumer_key):
        self._consumer_key = consumer_key
        return self

    @property
    def consumer_secret(self):
        return self._consumer_secret

    def set_consumer_secret(self, consumer_secret):
        self._consumer_secret = consumer_secret
        return self

    @property
    def passkey(self):
        """Get the passkey used to generate STK push passwords."""
        return self._passkey

    def set_passkey(self, passkey):
        self._passkey = passkey
        return self

    @property
    def shortcode(self):
        """Get the business shortcode (till or paybill number)."""
        return self._shortcode

    def set_shortcode(self, shortcode):
        self._shortcode = str(shortcode)
        return self

    @property
    def environment(self):
        return self._environment

    @property
    def is_sandbox(self):
        return self._environment == Environment.SANDBOX.value

    def set_environment(self, environment):
        """
        Set the environment and switch the base URL to match it.

        Args:
            environment: 'sandbox' or 'production' (case-insensitive)

        Raises:
            ConfigurationError: If the environment is not recognised
        """
        environment = str(environment).lower()
        if environment not in BASE_URLS:
            raise ConfigurationError(
                "Environment must be either 'sandbox' or 'production'. "
                f"Got: {environment}"
            )
        self._environment = environment
        self._base_url = BASE_URLS[environment]
        return self

    @property
    def verify_ssl(self):
        return self._verify_ssl

    def set_verify_ssl(self, verify_ssl):
        self._verify_ssl = _to_bool(verify_ssl, 'verify_ssl')
        return self

    @property
    def request_timeout(self):
        """Get request timeout in seconds."""
        return self._request_timeout

    def set_request_timeout(self, timeout):
        self._request_timeout = _to_int(timeout, 'request_timeout')
        return self

    @property
    def max_retries(self):
        return self._max_retries

    def set_max_retries(self, max_retries):
        self._max_retries = _to_int(max_retries, 'max_retries')
        return self

    @property
    def retry_delay(self):
        """Get the base retry delay in milliseconds."""
        return self._retry_delay

    def set_retry_delay(self, retry_delay):
        self._retry_delay = _to_int(retry_delay, 'retry_delay')
        return self

    def set_retry_config(self, max_retries, retry_delay):
        self.set_max_retries(max_retries)
        self.set_retry_delay(retry_delay)
        return self

    def get_retry_config(self):
        return {
            'max_retries': self._max_retries,
            'retry_delay': self._retry_delay,
        }

    @property
    def auto_authenticate(self):
        """Whether a token is fetched on demand when none is cached."""
        return self._auto_authenticate

    def set_auto_authenticate(self, auto_authenticate):
        self._auto_authenticate = _to_bool(auto_authenticate, 'auto_authenticate')
        return self

    def set_caching(self, use_cache, cache_dir=None, cache_ttl=None):
        """
        Enable or disable caching and optionally change its directory and TTL.
        The directory is created when caching is enabled.
        """
        self._use_cache = _to_bool(use_cache, 'use_cache')
        if cache_dir is not None:
            self._cache_dir = cache_dir
        if cache_ttl is not None:
            self._cache_ttl = _to_int(cache_ttl, 'cache_ttl')

        if self._use_cache:
            os.makedirs(self._cache_dir, exist_ok=True)
        return self

    def get_caching_config(self):
        return {
            'enabled': self._use_cache,
            'directory': self._cache_dir,
            'ttl': self._cache_ttl,
        }

    def set_logging_config(self, **logging_options):
        """
        Set logging options. Keys that are not given fall back to their
        defaults independently of each other.
        """
        unknown = set(logging_options) - set(DEFAULT_LOGGING_CONFIG)
        if unknown:
            raise ConfigurationError(
                f"Unknown logging option(s): {', '.join(sorted(unknown))}"
            )
        merged = dict(DEFAULT_LOGGING_CONFIG)
        merged.update(logging_options)

        self._log_dir = merged['log_dir']
        self._log_to_file = _to_bool(merged['log_to_file'], 'log_to_file')
        self._log_to_console = _to_bool(merged['log_to_console'], 'log_to_console')
        self._min_log_level = str(merged['min_log_level']).lower()
        self._log_format = merged['log_format']
        self._max_file_size = merged['max_file_size']
        self._max_files = merged['max_files']
        return self

    def get_logging_config(self):
        return {
            'log_dir': self._log_dir,
            'log_to_file': self._log_to_file,
            'log_to_console': self._log_to_console,
            'min_log_level': self._min_log_level,
            'log_format': self._log_format,
            'max_file_size': self._max_file_size,
            'max_files': self._max_files,
        }

    def set_options(self, **options):
        """
        Set several options at once. Each key is dispatched to the matching
        ``set_<key>`` method; keys without a setter are ignored.
        """
        for key, value in options.items():
            setter = getattr(self, f"set_{key}", None)
            if callable(setter):
                setter(value)
        return self

    def get(self, key, default=None):
        """
        Get a configuration value by ``MPESA_*`` key or attribute name.

        Args:
            key: e.g. 'MPESA_SHORTCODE', 'SHORTCODE' or 'shortcode'
            default: Returned when the value is unset
        """
        env_key = key.upper()
        if not env_key.startswith('MPESA_'):
            env_key = f"MPESA_{env_key}"
        attribute = CONFIG_KEYS.get(env_key, env_key[len('MPESA_'):].lower())
        value = getattr(self, f"_{attribute}", None)
        return default if value is None else value

    def validate(self):
        """
        Validate that required settings are present and sane.

        Raises:
            ConfigurationError: If validation fails
        """
        if not self._consumer_key:
            raise ConfigurationError("Consumer key is required")

        if not self._consumer_secret:
            raise ConfigurationError("Consumer secret is required")

        if self._environment not in BASE_URLS:
            raise ConfigurationError(
                "Environment must be either 'sandbox' or 'production'"
            )

        if self._request_timeout < 1:
            raise ConfigurationError("Request timeout must be at least 1 second")

        if self._max_retries < 0:
            raise ConfigurationError("Maximum retries cannot be negative")

        if self._retry_delay < 0:
            raise ConfigurationError("Retry delay cannot be negative")

        if self._use_cache:
            if self._cache_ttl < 0:
                raise ConfigurationError("Cache TTL cannot be negative")
            if not os.path.isdir(self._cache_dir) or not os.access(self._cache_dir, os.W_OK):
                raise ConfigurationError(
                    f"Cache directory is not writable: {self._cache_dir}"
                )


ENV_OPTIONS = {
    'MPESA_REQUEST_TIMEOUT': 'request_timeout',
    'MPESA_MAX_RETRIES': 'max_retries',
    'MPESA_RETRY_DELAY': 'retry_delay',
    'MPESA_VERIFY_SSL': 'verify_ssl',
}

LOGGING_KEYS = {
    'MPESA_LOG_DIR': 'log_dir',
    'MPESA_LOG_TO_FILE': 'log_to_file',
    'MPESA_LOG_TO_CONSOLE': 'log_to_console',
    'MPESA_MIN_LOG_LEVEL': 'min_log_level',
}


def _build_config(lookup):
    config = MpesaConfig(
        consumer_key=lookup('MPESA_CONSUMER_KEY', ''),
        consumer_secret=lookup('MPESA_CONSUMER_SECRET', ''),
        passkey=lookup('MPESA_PASSKEY', ''),
        shortcode=lookup('MPESA_SHORTCODE', ''),
        environment=lookup('MPESA_ENVIRONMENT', Environment.SANDBOX.value),
        base_url=lookup('MPESA_BASE_URL', None),
    )

    options = {}
    for key, option in ENV_OPTIONS.items():
        value = lookup(key, None)
        if value is not None:
            options[option] = value
    config.set_options(**options)

    logging_options = {}
    for key, option in LOGGING_KEYS.items():
        value = lookup(key, None)
        if value is not None:
            logging_options[option] = value
    config.set_logging_config(**logging_options)

    return config


def load_config_from_env(environ=None):
    """
    Build a config from ``MPESA_*`` environment variables.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)
    """
    environ = os.environ if environ is None else environ
    return _build_config(lambda key, default: environ.get(key, default))


def load_config_from_settings():
    """Build a config from ``MPESA_*`` attributes of the Django settings."""
    from django.conf import settings

    return _build_config(lambda key, default: getattr(settings, key, default))
