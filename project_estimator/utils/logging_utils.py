"""Logging configuration."""

import logging
from typing import Any, Dict, Optional

PACKAGE_LOGGER = 'project_estimator'


def configure_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Configure the package logger from the 'logging' config section.

    Args:
        config: Full engine configuration

    Returns:
        Configured package logger
    """
    log_config = (config or {}).get('logging', {})
    level = log_config.get('level', 'INFO')
    fmt = log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Replace our own handler on reconfiguration instead of stacking another
    for handler in list(logger.handlers):
        if getattr(handler, '_project_estimator', False):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(fmt))
    console_handler._project_estimator = True
    logger.addHandler(console_handler)

    return logger
