"""Shared utilities for compogen."""

from .rng_manager import RNGManager
from .validation import ConfigurationError, InternalError, ValidationError

__all__ = [
    'RNGManager',
    'ValidationError',
    'ConfigurationError',
    'InternalError',
]
