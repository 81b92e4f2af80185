"""Concrete representations shipped with compogen."""

from .arrays import (
    BooleanStaticLength,
    DoubleStaticLength,
    LongStaticLength,
    StaticLength,
    StaticLengthInstance,
)

__all__ = [
    'StaticLength',
    'StaticLengthInstance',
    'BooleanStaticLength',
    'LongStaticLength',
    'DoubleStaticLength',
]
