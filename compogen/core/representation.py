"""Representation/Instance abstraction.

A Representation is an immutable type descriptor (for example "boolean array
of length 8"). An Instance is one concrete value of a Representation and keeps
a lookup-only reference back to it.

Concrete representations are frozen dataclasses, so equality is structural
within one concrete kind and always false across kinds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from compogen.utils.validation import ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmStep


class Representation(ABC):
    """Immutable value type; a factory for random instances."""

    @abstractmethod
    def instantiate_random(self, step: AlgorithmStep) -> Instance:
        """Create a random instance using the random source of ``step``."""

    def is_equal(self, other: object) -> bool:
        return isinstance(other, Representation) and self == other


class Instance(ABC):
    """Concrete value conforming to a Representation.

    Subclasses validate their payload against the representation when they
    are constructed and never change afterwards.
    """

    def __init__(self, representation: Representation) -> None:
        if representation is None:
            raise ValidationError("null_argument", "representation cannot be None")
        if not isinstance(representation, Representation):
            raise ValidationError(
                "invalid_representation",
                "representation must be a Representation",
                got=type(representation).__name__,
            )
        self._representation = representation

    @property
    def representation(self) -> Representation:
        return self._representation

    def conforms_to(self, representation: Representation) -> bool:
        return self._representation == representation


__all__ = ["Representation", "Instance"]
