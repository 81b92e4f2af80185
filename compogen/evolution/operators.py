"""Mutation, recombination, fitness and geno-to-pheno operators for arrays.

All operators apply to ``StaticLength`` representations and draw every
random number from ``step.random``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from compogen.core.operators import FitnessOp, GenoToPhenoOp, MutationOp, RecombinationOp
from compogen.representations.arrays import StaticLength, StaticLengthInstance
from compogen.utils.validation import ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmStep
    from compogen.core.representation import Instance, Representation


_MAX_REDRAWS = 16


class OnePointMutation(MutationOp):
    """Replace one random gene by a fresh random value.

    Integral kinds redraw (at most 16 times) until the value changes.
    """

    def mutate(self, instance: Instance, step: AlgorithmStep) -> StaticLengthInstance:
        representation: StaticLength = instance.representation
        rng = step.random
        values = list(instance.values)
        index = rng.randrange(len(values))
        new_value = values[index]
        if representation.is_integral:
            for _ in range(_MAX_REDRAWS):
                if new_value != values[index]:
                    break
                new_value = representation.random_value(rng)
        else:
            new_value = representation.random_value(rng)
        values[index] = new_value
        return representation.from_values(values)

    def is_compatible(self, representation: Representation) -> bool:
        return isinstance(representation, StaticLength)


class KPointCrossover(RecombinationOp):
    """Classic k-point crossover of two parents into one child."""

    def __init__(self, k: int = 1) -> None:
        if k <= 0:
            raise ValidationError("invalid_k", "k has to be >= 1", k=k)
        self.k = k

    def recombine(self, inputs: Sequence[Instance], step: AlgorithmStep, output_size: int) -> list[Instance]:
        if len(inputs) == 1:
            return [inputs[0]]
        representation: StaticLength = inputs[0].representation
        rng = step.random
        points = sorted(rng.randrange(representation.length) for _ in range(self.k))
        values = []
        second = False
        cursor = 0
        for idx in range(representation.length):
            while cursor < len(points) and points[cursor] == idx:
                second = not second
                cursor += 1
            values.append(inputs[1 if second else 0].value(idx))
        return [representation.from_values(values)]

    def is_input_size_compatible(self, size: int) -> bool:
        return size in (1, 2)

    def is_output_size_compatible(self, size: int) -> bool:
        return size == 1

    def is_compatible(self, representation: Representation) -> bool:
        return isinstance(representation, StaticLength)


class UniformCrossover(RecombinationOp):
    """Every gene is copied from a uniformly drawn parent."""

    def recombine(self, inputs: Sequence[Instance], step: AlgorithmStep, output_size: int) -> list[Instance]:
        representation: StaticLength = inputs[0].representation
        rng = step.random
        values = [inputs[rng.randrange(len(inputs))].value(idx) for idx in range(representation.length)]
        return [representation.from_values(values)]

    def is_input_size_compatible(self, size: int) -> bool:
        return size >= 1

    def is_output_size_compatible(self, size: int) -> bool:
        return size == 1

    def is_compatible(self, representation: Representation) -> bool:
        return isinstance(representation, StaticLength)


class ArithmeticRecombination(RecombinationOp):
    """Per-gene interpolation of two parents.

    Args:
        max_factor: Largest interpolation factor, >= 0.5
        percent_reachable: Share of ``[0.5, max_factor]`` the factor may take
        difference_factor: Weight of the per-gene factor against the global one
    """

    def __init__(self, max_factor: float, percent_reachable: float = 1.0, difference_factor: float = 0.5) -> None:
        if not math.isfinite(max_factor) or max_factor < 0.5:
            raise ValidationError("invalid_parameter", "max_factor has to be >= 0.5", max_factor=max_factor)
        if not math.isfinite(percent_reachable) or not 0.0 <= percent_reachable <= 1.0:
            raise ValidationError("invalid_parameter", "percent_reachable has to be in [0, 1]",
                                  percent_reachable=percent_reachable)
        if not math.isfinite(difference_factor) or not 0.0 <= difference_factor <= 1.0:
            raise ValidationError("invalid_parameter", "difference_factor has to be in [0, 1]",
                                  difference_factor=difference_factor)
        self.max_factor = max_factor
        self.percent_reachable = percent_reachable
        self.difference_factor = difference_factor

    def _random_factor(self, rng) -> float:
        span = self.max_factor - 0.5
        return rng.random() * span * self.percent_reachable + 0.5 + span * (1.0 - self.percent_reachable)

    def recombine(self, inputs: Sequence[Instance], step: AlgorithmStep, output_size: int) -> list[Instance]:
        left, right = inputs[0], inputs[1]
        representation: StaticLength = left.representation
        rng = step.random
        global_factor = self._random_factor(rng)
        values = []
        for idx in range(representation.length):
            local_factor = self._random_factor(rng)
            factor = local_factor * self.difference_factor + global_factor * (1.0 - self.difference_factor)
            # parent order must not matter
            if rng.random() < 0.5:
                factor = 1.0 - factor
            mixed = float(left.value(idx)) * factor + float(right.value(idx)) * (1.0 - factor)
            values.append(representation.apply_bounds(mixed))
        return [representation.from_values(values)]

    def is_input_size_compatible(self, size: int) -> bool:
        return size == 2

    def is_output_size_compatible(self, size: int) -> bool:
        return size == 1

    def is_compatible(self, representation: Representation) -> bool:
        return isinstance(representation, StaticLength)


class AverageFitness(FitnessOp):
    """Mean gene value (booleans count as 0/1)."""

    def fitness(self, instance: Instance, step: AlgorithmStep) -> float:
        values = instance.as_floats()
        return sum(values) / len(values)

    def is_compatible(self, representation: Representation) -> bool:
        return isinstance(representation, StaticLength)


class GenoToPhenoIdentity(GenoToPhenoOp):
    def geno_to_pheno(self, instance: Instance, step: AlgorithmStep) -> Instance:
        return instance

    def is_geno_pheno_compatible(self, genotype: Representation, phenotype: Representation) -> bool:
        return genotype == phenotype

    def is_compatible(self, representation: Representation) -> bool:
        return True


__all__ = [
    "OnePointMutation",
    "KPointCrossover",
    "UniformCrossover",
    "ArithmeticRecombination",
    "AverageFitness",
    "GenoToPhenoIdentity",
]
