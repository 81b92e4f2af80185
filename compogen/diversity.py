"""Population diversity measures.

A Diversity optionally subsamples the population (``percent_population``)
before computing a single scalar. HierarchicalDiversity reuses the matching
and reduction engine: children matched to the same sub-operator are gathered
across the whole population and each sub-operator measures its group.
"""

from __future__ import annotations

import math
from collections import Counter
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from compogen.core.operators import Operator
from compogen.hierarchical.matching import HierarchicalType, ReductionType
from compogen.hierarchical.operators import HierarchicalReductionOp
from compogen.representations.arrays import StaticLength
from compogen.utils.validation import ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmStep
    from compogen.core.representation import Instance, Representation


def _check_percent(percent_population: float) -> float:
    if not math.isfinite(percent_population) or not 0.0 < percent_population <= 1.0:
        raise ValidationError(
            "invalid_percent_population",
            "percent_population has to be in (0, 1]",
            percent_population=percent_population,
        )
    return float(percent_population)


class Distance(ABC):
    @abstractmethod
    def distance(self, first: Instance, second: Instance) -> float:
        ...

    @abstractmethod
    def is_compatible(self, representation: Representation) -> bool:
        ...


class StandardDistance(Distance):
    """Mean absolute per-gene difference of two arrays."""

    def distance(self, first: Instance, second: Instance) -> float:
        left, right = first.as_floats(), second.as_floats()
        return sum(abs(a - b) for a, b in zip(left, right)) / len(left)

    def is_compatible(self, representation: Representation) -> bool:
        return isinstance(representation, StaticLength)

    def __repr__(self) -> str:
        return "StandardDistance()"


class Diversity(Operator):
    """Base of diversity measures.

    Args:
        percent_population: Share of the population that is measured, in (0, 1]
    """

    def __init__(self, percent_population: float = 1.0) -> None:
        self.percent_population = _check_percent(percent_population)

    def diversity(self, population: Sequence[Instance], step: AlgorithmStep) -> float:
        members = list(population)
        limit = self.percent_population * len(members)
        while len(members) > limit:
            members.pop(step.random.randrange(len(members)))
        return self.calculate(members, step)

    @abstractmethod
    def calculate(self, members: list[Instance], step: AlgorithmStep) -> float:
        ...


class AverageDiversity(Diversity):
    """Sum of pairwise distances divided by n * (n - 1); 0 for n <= 1."""

    def __init__(self, distance: Distance | None = None, percent_population: float = 1.0) -> None:
        super().__init__(percent_population)
        self.distance = distance if distance is not None else StandardDistance()

    def calculate(self, members: list[Instance], step: AlgorithmStep) -> float:
        n = len(members)
        if n <= 1:
            return 0.0
        total = 0.0
        for i in range(n):
            for j in range(i + 1, n):
                total += self.distance.distance(members[i], members[j])
        return total / (n * (n - 1))

    def is_compatible(self, representation: Representation) -> bool:
        return self.distance.is_compatible(representation)


class ShannonEntropyDiversity(Diversity):
    """Per-gene Shannon entropy of the value frequencies, averaged over the genes.

    Every distinct value counts as its own symbol; 0.01 and 0.02 differ as
    much as 0.01 and 1000.0.
    """

    def calculate(self, members: list[Instance], step: AlgorithmStep) -> float:
        if not members:
            return 0.0
        columns = list(zip(*(member.as_floats() for member in members)))
        total = 0.0
        for column in columns:
            for count in Counter(column).values():
                share = count / len(members)
                total -= share * math.log(share)
        return total / len(columns)

    def is_compatible(self, representation: Representation) -> bool:
        return isinstance(representation, StaticLength)


class HierarchicalDiversity(HierarchicalReductionOp, Diversity):
    """Diversity of composite genotypes from per-sub-operator diversities."""

    def __init__(
        self,
        reduction_type: ReductionType,
        *sub_operators: Diversity,
        hierarchical_type: HierarchicalType = HierarchicalType.EXACT_MATCH,
        percent_population: float = 1.0,
    ) -> None:
        super().__init__(reduction_type, *sub_operators, hierarchical_type=hierarchical_type)
        self.percent_population = _check_percent(percent_population)

    def operator_compatible(self, operator: Diversity, representation: Representation) -> bool:
        return operator.is_compatible(representation)

    def calculate(self, members: list[Instance], step: AlgorithmStep) -> float:
        return self.reduce_many(members, step)

    def calculate_sub_result(self, operator: Diversity, children: list[Instance], step: AlgorithmStep) -> float:
        return operator.diversity(children, step)


__all__ = [
    "Distance",
    "StandardDistance",
    "Diversity",
    "AverageDiversity",
    "ShannonEntropyDiversity",
    "HierarchicalDiversity",
]
