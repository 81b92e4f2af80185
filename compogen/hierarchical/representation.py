"""Tree-shaped composite representations.

``And`` always holds one instance per declared child, in order. ``Or`` holds
exactly one instance of a child drawn with the configured probabilities and
remembers which child index it belongs to.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

from compogen.core.representation import Instance, Representation
from compogen.hierarchical.matching import MatchMap, _normalize_probs
from compogen.utils.validation import ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmStep


def _check_children(children: Sequence, kind: str) -> tuple:
    if not children:
        raise ValidationError("empty_children", f"there has to be at least one {kind}")
    for idx, child in enumerate(children):
        if child is None:
            raise ValidationError("null_argument", f"{kind} No. {idx} cannot be None", index=idx)
    return tuple(children)


def _pick(candidates: list[int], step: AlgorithmStep) -> int:
    if len(candidates) == 1:
        return candidates[0]
    return candidates[step.random.randrange(len(candidates))]


@dataclass(frozen=True, init=False)
class Hierarchical(Representation):
    """Composite representation over an ordered, fixed-length child tuple."""

    children: tuple[Representation, ...]

    def __init__(self, *children: Representation) -> None:
        object.__setattr__(self, "children", _check_children(children, "child"))
        for idx, child in enumerate(self.children):
            if not isinstance(child, Representation):
                raise ValidationError("invalid_child", "children must be representations", index=idx)

    @abstractmethod
    def instantiate_from_children(self, *children: Instance) -> HierarchicalInstance:
        ...


class HierarchicalInstance(Instance):
    """Instance of a Hierarchical representation."""

    def __init__(self, representation: Hierarchical, children: Sequence[Instance]) -> None:
        super().__init__(representation)
        self._children = _check_children(children, "child instance")

    @property
    def children(self) -> list[Instance]:
        """A fresh list; mutating it does not affect the instance."""
        return list(self._children)

    @abstractmethod
    def matched_operators(self, index_to_ops: MatchMap, step: AlgorithmStep) -> list[int | None]:
        """Resolve one operator index per held child (None = unmatched)."""

    @abstractmethod
    def indices_of_children(self) -> list[int]:
        """Positions of the held children within the representation's children."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HierarchicalInstance):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.representation == other.representation
            and self.indices_of_children() == other.indices_of_children()
            and self._children == other._children
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._children))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(c) for c in self._children)})"


@dataclass(frozen=True, init=False)
class And(Hierarchical):
    """All children are present."""

    def instantiate_random(self, step: AlgorithmStep) -> AndInstance:
        return AndInstance(self, [child.instantiate_random(step) for child in self.children])

    def instantiate_from_children(self, *children: Instance) -> AndInstance:
        return AndInstance(self, children)


class AndInstance(HierarchicalInstance):
    def __init__(self, representation: And, children: Sequence[Instance]) -> None:
        super().__init__(representation, children)
        if len(self._children) != len(representation.children):
            raise ValidationError(
                "invalid_length",
                "number of children not as expected",
                expected=len(representation.children),
                got=len(self._children),
            )
        for idx, (child, declared) in enumerate(zip(self._children, representation.children)):
            if child.representation != declared:
                raise ValidationError("incompatible_child", f"child No. {idx} is not compatible with parent", index=idx)

    def matched_operators(self, index_to_ops: MatchMap, step: AlgorithmStep) -> list[int | None]:
        matched: list[int | None] = []
        for idx in range(len(self._children)):
            candidates = index_to_ops.get(idx)
            matched.append(_pick(candidates, step) if candidates else None)
        return matched

    def indices_of_children(self) -> list[int]:
        return list(range(len(self._children)))


@dataclass(frozen=True, init=False)
class Or(Hierarchical):
    """Exactly one child, chosen with the (normalized) probabilities.

    Args:
        *children: Distinct child representations
        probabilities: One positive weight per child; uniform when omitted
    """

    probabilities: tuple[float, ...] = field(default=())
    _cumulative: tuple[float, ...] = field(default=(), repr=False, compare=False)

    def __init__(self, *children: Representation, probabilities: Sequence[float] | None = None) -> None:
        super().__init__(*children)
        for i in range(len(self.children)):
            for j in range(i + 1, len(self.children)):
                if self.children[i] == self.children[j]:
                    raise ValidationError("duplicate_child", "two equal children are not allowed", first=i, second=j)
        if probabilities is None:
            probabilities = [1.0] * len(self.children)
        if len(probabilities) != len(self.children):
            raise ValidationError(
                "invalid_probabilities",
                "children and probabilities have to have the same length",
                children=len(self.children),
                probabilities=len(probabilities),
            )
        for p in probabilities:
            if not math.isfinite(p) or p <= 0:
                raise ValidationError("invalid_probabilities", "a probability is NaN, infinite or <= 0", probability=p)
        normalized = _normalize_probs(probabilities)
        cumulative: list[float] = []
        running = 0.0
        for p in normalized:
            running += p
            cumulative.append(running)
        object.__setattr__(self, "probabilities", tuple(normalized))
        object.__setattr__(self, "_cumulative", tuple(cumulative))

    def choose_index(self, value: float) -> int:
        """Index of the first child whose cumulative probability is >= value."""
        for idx, bound in enumerate(self._cumulative):
            if value <= bound:
                return idx
        return len(self._cumulative) - 1

    def instantiate_random(self, step: AlgorithmStep) -> OrInstance:
        idx = self.choose_index(step.random.random())
        return OrInstance(self, self.children[idx].instantiate_random(step))

    def instantiate_from_children(self, *children: Instance) -> OrInstance:
        if len(children) != 1:
            raise ValidationError("invalid_length", "an Or instance holds exactly one child", got=len(children))
        return OrInstance(self, children[0])


class OrInstance(HierarchicalInstance):
    def __init__(self, representation: Or, chosen: Instance) -> None:
        super().__init__(representation, [chosen])
        for idx, declared in enumerate(representation.children):
            if chosen.representation == declared:
                self._index = idx
                break
        else:
            raise ValidationError("incompatible_child", "chosen instance is not compatible with parent")

    @property
    def chosen_index(self) -> int:
        return self._index

    @property
    def chosen(self) -> Instance:
        return self._children[0]

    def matched_operators(self, index_to_ops: MatchMap, step: AlgorithmStep) -> list[int | None]:
        candidates = index_to_ops.get(self._index)
        return [_pick(candidates, step) if candidates else None]

    def indices_of_children(self) -> list[int]:
        return [self._index]


__all__ = [
    "Hierarchical",
    "HierarchicalInstance",
    "And",
    "AndInstance",
    "Or",
    "OrInstance",
]
