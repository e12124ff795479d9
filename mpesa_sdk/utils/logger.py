"""
Logging configuration for the M-Pesa SDK.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from ..exceptions import ConfigurationError

SDK_LOGGER_NAME = 'mpesa_sdk'
LOG_FILE_NAME = 'mpesa.log'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
}


def get_log_level(name: str) -> int:
    """
    Map a level name to a logging level.

    Raises:
        ConfigurationError: If the level name is unknown
    """
    level = LOG_LEVELS.get(str(name).lower())
    if level is None:
        raise ConfigurationError(
            f"Invalid log level: {name}. Supported levels: {', '.join(LOG_LEVELS)}"
        )
    return level


def configure_logging(config) -> logging.Logger:
    """
    Apply the logging options of a config to the SDK logger.

    Handlers previously installed by this function are replaced, so it is
    safe to call again after the config changes.

    Args:
        config: MpesaConfig instance

    Returns:
        The configured 'mpesa_sdk' logger
    """
    options = config.get_logging_config()
    level = get_log_level(options['min_log_level'])
    formatter = logging.Formatter(options['log_format'] or DEFAULT_FORMAT)

    logger = logging.getLogger(SDK_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, '_mpesa_sdk_handler', False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)

    handlers = []
    if options['log_to_file']:
        log_dir = options['log_dir']
        os.makedirs(log_dir, exist_ok=True)
        path = os.path.join(log_dir, LOG_FILE_NAME)
        if options['max_file_size']:
            handlers.append(RotatingFileHandler(
                path,
                maxBytes=int(options['max_file_size']),
                backupCount=max(int(options['max_files'] or 1), 1)
            ))
        else:
            handlers.append(logging.FileHandler(path))

    if options['log_to_console']:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler._mpesa_sdk_handler = True
        logger.addHandler(handler)

    return logger
