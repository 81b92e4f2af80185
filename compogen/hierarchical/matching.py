"""Child-to-operator matching policies and the reduction algebra.

``match_children`` pairs the children of a hierarchical representation with
sub-operator indices. The result maps child index -> candidate operator
indices, or is ``None`` when the policy cannot match every child:

- EXACT_MATCH: child i pairs with operator i; counts must agree
- USE_FIRST_MATCH: first compatible operator in declaration order
- USE_RANDOM_MATCH: every compatible operator; one is drawn per child at
  apply time

``ReductionType`` collapses one scalar per operator slot into a single value
and decides which operator slots are ignored during matching.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

from compogen.utils.validation import InternalError, ValidationError

OpT = TypeVar("OpT")
ReprT = TypeVar("ReprT")

MatchMap = dict[int, list[int]]


class HierarchicalType(enum.Enum):
    EXACT_MATCH = "exact_match"
    USE_FIRST_MATCH = "use_first_match"
    USE_RANDOM_MATCH = "use_random_match"


def _normalize_probs(probabilities: Sequence[float]) -> list[float]:
    total = sum(probabilities)
    if total > 0:
        return [p / total for p in probabilities]
    if probabilities:
        return [1.0 / len(probabilities) for _ in probabilities]
    return []


def match_children(
    hierarchical_type: HierarchicalType,
    sub_operators: Sequence[OpT],
    children: Sequence[ReprT],
    operator_compatible: Callable[[OpT, ReprT], bool],
    ignore: Sequence[bool] | None = None,
) -> MatchMap | None:
    """Compute the child -> operator-candidates map for one policy.

    Args:
        hierarchical_type: Matching policy
        sub_operators: Operators in declaration order
        children: Child representations in order
        operator_compatible: Predicate deciding whether an operator fits a child
        ignore: Optional mask over ``sub_operators``; masked operators are
            never candidates and, for EXACT_MATCH, their child is left unmatched

    Returns:
        Mapping of child index to candidate operator indices, or None if the
        policy cannot match.
    """
    if ignore is None:
        ignore = [False] * len(sub_operators)
    elif len(ignore) != len(sub_operators):
        raise ValidationError(
            "ignore_mask_length",
            "ignore mask must have one entry per sub-operator",
            expected=len(sub_operators),
            got=len(ignore),
        )

    result: MatchMap = {}

    if hierarchical_type is HierarchicalType.EXACT_MATCH:
        if len(sub_operators) != len(children):
            return None
        for idx, (op, child) in enumerate(zip(sub_operators, children)):
            if ignore[idx]:
                continue
            if not operator_compatible(op, child):
                return None
            result[idx] = [idx]
        return result

    if hierarchical_type is HierarchicalType.USE_FIRST_MATCH:
        for c_idx, child in enumerate(children):
            for o_idx, op in enumerate(sub_operators):
                if ignore[o_idx]:
                    continue
                if operator_compatible(op, child):
                    result[c_idx] = [o_idx]
                    break
            if c_idx not in result:
                return None
        return result

    if hierarchical_type is HierarchicalType.USE_RANDOM_MATCH:
        for c_idx, child in enumerate(children):
            candidates = [
                o_idx
                for o_idx, op in enumerate(sub_operators)
                if not ignore[o_idx] and operator_compatible(op, child)
            ]
            if not candidates:
                return None
            result[c_idx] = candidates
        return result

    raise InternalError(f"unhandled hierarchical type: {hierarchical_type}")


class ReductionKind(enum.Enum):
    AVERAGE = "average"
    INDIVIDUAL_WEIGHTS = "individual_weights"
    JUST_ONE = "just_one"


@dataclass(frozen=True)
class ReductionType:
    """Reduction of per-operator scalars into one value.

    Build instances with ``average()``, ``individual_weights(*weights)`` or
    ``just_one(index)``. Weights are normalized to sum to 1.
    """

    kind: ReductionKind
    weights: tuple[float, ...] | None = None
    index: int = -1

    @classmethod
    def average(cls) -> ReductionType:
        return cls(ReductionKind.AVERAGE)

    @classmethod
    def individual_weights(cls, *weights: float) -> ReductionType:
        if not weights:
            raise ValidationError("invalid_weights", "there needs to be at least one weight")
        for w in weights:
            if not math.isfinite(w) or w < 0.0:
                raise ValidationError("invalid_weights", "every weight has to be finite and >= 0", weight=w)
        if sum(weights) <= 0:
            raise ValidationError("invalid_weights", "the sum of all weights has to be > 0")
        return cls(ReductionKind.INDIVIDUAL_WEIGHTS, tuple(_normalize_probs(weights)))

    @classmethod
    def just_one(cls, index: int) -> ReductionType:
        if index < 0:
            raise ValidationError("invalid_index", "index has to be >= 0", index=index)
        return cls(ReductionKind.JUST_ONE, index=index)

    def is_compatible(self, operator_count: int) -> bool:
        if self.kind is ReductionKind.INDIVIDUAL_WEIGHTS and len(self.weights) != operator_count:
            return False
        if self.kind is ReductionKind.JUST_ONE and self.index >= operator_count:
            return False
        return True

    def ignore_mask(self, operator_count: int) -> list[bool]:
        """Operator slots that take no part in matching."""
        if self.kind is ReductionKind.INDIVIDUAL_WEIGHTS:
            return [w == 0 for w in self.weights[:operator_count]]
        if self.kind is ReductionKind.JUST_ONE:
            return [idx != self.index for idx in range(operator_count)]
        return [False] * operator_count

    def reduce(self, values: Sequence[float]) -> float:
        if self.kind is ReductionKind.AVERAGE:
            return sum(values) / len(values)
        if self.kind is ReductionKind.INDIVIDUAL_WEIGHTS:
            return sum(v * w for v, w in zip(values, self.weights) if w != 0)
        if self.kind is ReductionKind.JUST_ONE:
            return values[self.index]
        raise InternalError(f"unhandled reduction kind: {self.kind}")


__all__ = [
    "HierarchicalType",
    "MatchMap",
    "match_children",
    "ReductionKind",
    "ReductionType",
]
