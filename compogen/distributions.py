"""Random value distributions used by array representations.

A distribution is called with the shared ``random.Random`` of the current
step and returns one value; it keeps no random state of its own.
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from compogen.utils.validation import ValidationError


class Distribution(ABC):
    @abstractmethod
    def random_float(self, rng: random.Random) -> float:
        ...

    def random_int(self, rng: random.Random) -> int:
        return int(math.floor(self.random_float(rng)))


@dataclass(frozen=True)
class LinearDistribution(Distribution):
    """Uniform values in ``[low, high)``."""

    low: float = 0.0
    high: float = 1.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.low) and math.isfinite(self.high)):
            raise ValidationError("invalid_bounds", "bounds have to be finite", low=self.low, high=self.high)
        if self.low > self.high:
            raise ValidationError("invalid_bounds", "low has to be smaller or equal than high", low=self.low, high=self.high)

    def random_float(self, rng: random.Random) -> float:
        return rng.random() * (self.high - self.low) + self.low

    def random_int(self, rng: random.Random) -> int:
        low, high = int(self.low), int(self.high)
        if high <= low:
            return low
        return rng.randrange(low, high)


@dataclass(frozen=True)
class GaussianDistribution(Distribution):
    mean: float = 0.0
    sigma: float = 1.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.mean) or not math.isfinite(self.sigma) or self.sigma < 0:
            raise ValidationError("invalid_parameters", "mean has to be finite and sigma finite and >= 0",
                                  mean=self.mean, sigma=self.sigma)

    def random_float(self, rng: random.Random) -> float:
        return rng.gauss(self.mean, self.sigma)

    def random_int(self, rng: random.Random) -> int:
        return int(round(self.random_float(rng)))


__all__ = ["Distribution", "LinearDistribution", "GaussianDistribution"]
