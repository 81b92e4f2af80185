"""Fixed-length arrays of booleans, integers or floats."""

from __future__ import annotations

import random
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Iterable

from compogen.core.representation import Instance, Representation
from compogen.distributions import Distribution, LinearDistribution
from compogen.utils.validation import ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmStep


@dataclass(frozen=True)
class StaticLength(Representation):
    """Array representation; two arrays are equal iff same kind and length."""

    length: int
    is_integral: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if not isinstance(self.length, int) or self.length <= 0:
            raise ValidationError("invalid_length", "length has to be >= 1", length=self.length)

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        """Convert one raw gene into this representation's value type."""

    @abstractmethod
    def random_value(self, rng: random.Random) -> Any:
        ...

    @abstractmethod
    def apply_bounds(self, value: float) -> Any:
        """Clamp/convert the result of arithmetic on genes back into range."""

    def from_values(self, values: Iterable[Any]) -> StaticLengthInstance:
        return StaticLengthInstance(self, values)

    def instantiate_random(self, step: AlgorithmStep) -> StaticLengthInstance:
        rng = step.random
        return StaticLengthInstance(self, [self.random_value(rng) for _ in range(self.length)])


@dataclass(frozen=True)
class BooleanStaticLength(StaticLength):
    is_integral: ClassVar[bool] = True

    def coerce(self, value: Any) -> bool:
        return bool(value)

    def random_value(self, rng: random.Random) -> bool:
        return rng.random() < 0.5

    def apply_bounds(self, value: float) -> bool:
        return value > 0


@dataclass(frozen=True)
class LongStaticLength(StaticLength):
    distribution: Distribution = field(default=LinearDistribution(-(2 ** 31), 2 ** 31), compare=False)
    is_integral: ClassVar[bool] = True

    def coerce(self, value: Any) -> int:
        return int(value)

    def random_value(self, rng: random.Random) -> int:
        return self.distribution.random_int(rng)

    def apply_bounds(self, value: float) -> int:
        return int(value)


@dataclass(frozen=True)
class DoubleStaticLength(StaticLength):
    distribution: Distribution = field(default=LinearDistribution(0.0, 1.0), compare=False)

    def coerce(self, value: Any) -> float:
        return float(value)

    def random_value(self, rng: random.Random) -> float:
        return self.distribution.random_float(rng)

    def apply_bounds(self, value: float) -> float:
        return float(value)


class StaticLengthInstance(Instance):
    """Immutable array value; its length is checked against the representation."""

    def __init__(self, representation: StaticLength, values: Iterable[Any]) -> None:
        super().__init__(representation)
        if not isinstance(representation, StaticLength):
            raise ValidationError("invalid_representation", "representation must be a StaticLength array")
        self._values = tuple(representation.coerce(v) for v in values)
        if len(self._values) != representation.length:
            raise ValidationError(
                "invalid_length",
                "length of array not as expected",
                expected=representation.length,
                got=len(self._values),
            )

    @property
    def values(self) -> tuple[Any, ...]:
        return self._values

    def value(self, index: int) -> Any:
        if index < 0 or index >= len(self._values):
            raise ValidationError("index_out_of_bounds", "index out of bounds", index=index, length=len(self._values))
        return self._values[index]

    def as_floats(self) -> list[float]:
        return [float(v) for v in self._values]

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StaticLengthInstance):
            return NotImplemented
        return self.representation == other.representation and self._values == other._values

    def __hash__(self) -> int:
        return hash((self.representation, self._values))

    def __repr__(self) -> str:
        rep = self.representation
        if isinstance(rep, BooleanStaticLength):
            body = "".join("1" if v else "0" for v in self._values)
        else:
            body = ", ".join(repr(v) for v in self._values)
        return f"{type(rep).__name__}[{body}]"


__all__ = [
    "StaticLength",
    "StaticLengthInstance",
    "BooleanStaticLength",
    "LongStaticLength",
    "DoubleStaticLength",
]
