"""Utility functions."""

from .config import get_default_config, load_config
from .datetime_utils import get_working_days, is_working_day, next_working_day
from .logging_utils import configure_logging

__all__ = [
    'configure_logging',
    'get_default_config',
    'get_working_days',
    'is_working_day',
    'load_config',
    'next_working_day',
]
