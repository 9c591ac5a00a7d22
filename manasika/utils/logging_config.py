"""
Centralized logging configuration for the journal and companion services.
"""

import logging
import sys
from typing import Optional

from .config import AppConfig

# Third-party loggers that are too chatty at the application level
NOISY_LOGGERS = ('botocore', 'boto3', 'urllib3')


def _level(config: Optional[AppConfig]) -> int:
    if config is None:
        from .config import config as default_config
        config = default_config
    return getattr(logging, config.log_level.upper(), logging.INFO)


def setup_logging(config: Optional[AppConfig] = None) -> None:
    """
    Setup centralized logging configuration.

    Logs go to stderr so that stdout stays free for the stdio MCP transport.

    Args:
        config: AppConfig instance, uses default if None
    """
    level = _level(config)

    logging.basicConfig(level=level,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                        handlers=[logging.StreamHandler(sys.stderr)])

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str, config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Get a logger with proper configuration.

    Args:
        name: Logger name (usually __name__)
        config: AppConfig instance, uses default if None

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level(config))
    return logger
