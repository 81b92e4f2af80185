"""Operators that recurse over hierarchical representations.

A hierarchical operator wraps sub-operators and a matching policy. For a
given hierarchical representation it computes which sub-operator applies to
which child (see ``match_children``), then:

- HierarchicalRecombinationOp recombines position-aligned children of all
  parents with the matched sub-operator and reassembles the children
- HierarchicalRandomMutationOp mutates one random child position
- HierarchicalGenoToPhenoOp maps every child through its matched sub-operator
- HierarchicalReductionOp subclasses compute one scalar per matched operator
  slot and reduce them with a ReductionType
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Sequence

from compogen.core.operators import FitnessOp, GenoToPhenoOp, MutationOp, Operator, RecombinationOp
from compogen.hierarchical.matching import HierarchicalType, MatchMap, ReductionType, match_children
from compogen.hierarchical.representation import Hierarchical, HierarchicalInstance, Or
from compogen.utils.validation import ConfigurationError, ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmPass, AlgorithmStep
    from compogen.core.representation import Instance, Representation


class HierarchicalOp(Operator):
    """Base of every operator that dispatches to sub-operators per child.

    Args:
        *sub_operators: At least one operator, in declaration order
        hierarchical_type: Matching policy, EXACT_MATCH by default
    """

    def __init__(self, *sub_operators: Operator, hierarchical_type: HierarchicalType = HierarchicalType.EXACT_MATCH) -> None:
        if hierarchical_type is None:
            raise ValidationError("null_argument", "hierarchical_type cannot be None")
        if not sub_operators:
            raise ValidationError("empty_sub_operators", "there has to be at least one sub-operator")
        for idx, op in enumerate(sub_operators):
            if op is None:
                raise ValidationError("null_argument", "a None sub-operator is not allowed", index=idx)
        self.hierarchical_type = hierarchical_type
        self._sub_operators: tuple[Operator, ...] = tuple(sub_operators)

    @property
    def sub_operators(self) -> tuple[Operator, ...]:
        return self._sub_operators

    @abstractmethod
    def operator_compatible(self, operator: Operator, representation: Representation) -> bool:
        """Capability-specific check of one sub-operator against one child."""

    def ignore_mask(self) -> list[bool] | None:
        return None

    def index_to_operators(self, representation: Hierarchical) -> MatchMap | None:
        return match_children(
            self.hierarchical_type,
            self._sub_operators,
            representation.children,
            self.operator_compatible,
            self.ignore_mask(),
        )

    def _require_match(self, representation: Representation) -> MatchMap:
        index_to_ops = self.index_to_operators(representation) if isinstance(representation, Hierarchical) else None
        if index_to_ops is None:
            raise ConfigurationError(
                "incompatible_combination",
                f"{type(self).__name__} cannot match the children of the representation",
                representation=representation,
            )
        return index_to_ops

    def is_compatible(self, representation: Representation) -> bool:
        if not isinstance(representation, Hierarchical):
            return False
        return self.index_to_operators(representation) is not None

    def is_pass_compatible(self, algorithm_pass: AlgorithmPass) -> bool:
        return all(op.is_pass_compatible(algorithm_pass) for op in self._sub_operators)

    def __repr__(self) -> str:
        subs = ", ".join(repr(op) for op in self._sub_operators)
        return f"{type(self).__name__}({subs}, hierarchical_type={self.hierarchical_type.name})"


class HierarchicalReductionOp(HierarchicalOp):
    """Matching plus reduction; the sub-result computation is left to subclasses.

    Children matched to the same operator slot are gathered into one group;
    ``calculate_sub_result`` turns a group into a scalar. Slots without a
    group contribute 0.0.
    """

    def __init__(
        self,
        reduction_type: ReductionType,
        *sub_operators: Operator,
        hierarchical_type: HierarchicalType = HierarchicalType.EXACT_MATCH,
    ) -> None:
        super().__init__(*sub_operators, hierarchical_type=hierarchical_type)
        if reduction_type is None:
            raise ValidationError("null_argument", "reduction_type cannot be None")
        if not reduction_type.is_compatible(len(self._sub_operators)):
            raise ValidationError(
                "incompatible_reduction",
                "reduction type is not compatible with the number of sub-operators",
                operators=len(self._sub_operators),
            )
        self.reduction_type = reduction_type

    def ignore_mask(self) -> list[bool]:
        return self.reduction_type.ignore_mask(len(self._sub_operators))

    def group_children(self, instances: Sequence[HierarchicalInstance], step: AlgorithmStep) -> list[list[Instance]]:
        """Collect, per operator slot, every child matched to it across ``instances``."""
        groups: list[list[Instance]] = [[] for _ in self._sub_operators]
        for instance in instances:
            index_to_ops = self._require_match(instance.representation)
            matched = instance.matched_operators(index_to_ops, step)
            for child, op_idx in zip(instance.children, matched):
                if op_idx is not None:
                    groups[op_idx].append(child)
        return groups

    def reduce_many(self, instances: Sequence[HierarchicalInstance], step: AlgorithmStep) -> float:
        groups = self.group_children(instances, step)
        values = [0.0] * len(self._sub_operators)
        for op_idx, group in enumerate(groups):
            if group:
                values[op_idx] = self.calculate_sub_result(self._sub_operators[op_idx], group, step)
        return self.reduction_type.reduce(values)

    def reduce(self, instance: HierarchicalInstance, step: AlgorithmStep) -> float:
        return self.reduce_many([instance], step)

    @abstractmethod
    def calculate_sub_result(self, operator: Operator, children: list[Instance], step: AlgorithmStep) -> float:
        ...

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]}, reduction_type={self.reduction_type!r})"


class HierarchicalAverageFitness(HierarchicalReductionOp, FitnessOp):
    """Fitness of a composite instance from the fitness of its children.

    Each operator slot scores the mean fitness of the children matched to it;
    children sharing a slot are averaged, none of them replaces another.
    """

    def operator_compatible(self, operator: FitnessOp, representation: Representation) -> bool:
        return operator.is_compatible(representation)

    def fitness(self, instance: Instance, step: AlgorithmStep) -> float:
        return self.reduce(instance, step)

    def calculate_sub_result(self, operator: FitnessOp, children: list[Instance], step: AlgorithmStep) -> float:
        return sum(operator.fitness(child, step) for child in children) / len(children)


class HierarchicalGenoToPhenoOp(HierarchicalOp, GenoToPhenoOp):
    """Maps every child through its matched geno-to-pheno sub-operator.

    Args:
        *sub_operators: Geno-to-pheno operators
        hierarchical_type: Matching policy
        phenotype: Target hierarchical phenotype; when omitted the mapped
            children are reassembled into the genotype's representation,
            so only a phenotype equal to the genotype is compatible
    """

    def __init__(
        self,
        *sub_operators: GenoToPhenoOp,
        hierarchical_type: HierarchicalType = HierarchicalType.EXACT_MATCH,
        phenotype: Hierarchical | None = None,
    ) -> None:
        super().__init__(*sub_operators, hierarchical_type=hierarchical_type)
        self.phenotype = phenotype

    def operator_compatible(self, operator: GenoToPhenoOp, representation: Representation) -> bool:
        return operator.is_compatible(representation)

    def geno_to_pheno(self, instance: Instance, step: AlgorithmStep) -> Instance:
        index_to_ops = self._require_match(instance.representation)
        matched = instance.matched_operators(index_to_ops, step)
        children = instance.children
        mapped = [
            child if op_idx is None else self._sub_operators[op_idx].geno_to_pheno(child, step)
            for child, op_idx in zip(children, matched)
        ]
        if all(new is old for new, old in zip(mapped, children)) and self.phenotype is None:
            return instance
        target = self.phenotype if self.phenotype is not None else instance.representation
        return target.instantiate_from_children(*mapped)

    def is_geno_pheno_compatible(self, genotype: Representation, phenotype: Representation) -> bool:
        if not (isinstance(genotype, Hierarchical) and isinstance(phenotype, Hierarchical)):
            return False
        if type(genotype) is not type(phenotype) or len(genotype.children) != len(phenotype.children):
            return False
        if self.phenotype is None and phenotype != genotype:
            return False
        if self.phenotype is not None and self.phenotype != phenotype:
            return False
        index_to_ops = self.index_to_operators(genotype)
        if index_to_ops is None:
            return False
        for child_idx, candidates in index_to_ops.items():
            for op_idx in candidates:
                if not self._sub_operators[op_idx].is_geno_pheno_compatible(
                    genotype.children[child_idx], phenotype.children[child_idx]
                ):
                    return False
        return True


class HierarchicalRecombinationOp(HierarchicalOp, RecombinationOp):
    """Recombines composite parents child position by child position.

    For Or representations whose parents hold different branches there are no
    aligned children; the offspring are then copies of randomly drawn parents.
    """

    def operator_compatible(self, operator: RecombinationOp, representation: Representation) -> bool:
        return operator.is_compatible(representation)

    def recombine(self, inputs: Sequence[Instance], step: AlgorithmStep, output_size: int) -> list[Instance]:
        if not inputs:
            raise ValidationError("empty_input", "recombination needs at least one parent")
        representation = inputs[0].representation
        for parent in inputs[1:]:
            if parent.representation != representation:
                raise ValidationError("mixed_representations", "all parents must share one representation")
        index_to_ops = self._require_match(representation)

        if isinstance(representation, Or) and len({p.chosen_index for p in inputs}) > 1:
            return [inputs[step.random.randrange(len(inputs))] for _ in range(output_size)]

        matched = inputs[0].matched_operators(index_to_ops, step)
        # [child position][parent]
        aligned = list(zip(*(parent.children for parent in inputs)))
        # [offspring][child position]
        offspring: list[list[Instance]] = [[] for _ in range(output_size)]
        for position, op_idx in enumerate(matched):
            if op_idx is None:
                produced = [aligned[position][step.random.randrange(len(inputs))] for _ in range(output_size)]
            else:
                produced = self._sub_operators[op_idx].recombine(list(aligned[position]), step, output_size)
            if len(produced) != output_size:
                raise ValidationError(
                    "invalid_output_size",
                    "sub-operator returned an unexpected number of children",
                    expected=output_size,
                    got=len(produced),
                )
            for out_idx, child in enumerate(produced):
                offspring[out_idx].append(child)
        return [representation.instantiate_from_children(*children) for children in offspring]

    def is_input_size_compatible(self, size: int) -> bool:
        return all(op.is_input_size_compatible(size) for op in self._sub_operators)

    def is_output_size_compatible(self, size: int) -> bool:
        return all(op.is_output_size_compatible(size) for op in self._sub_operators)


class HierarchicalRandomMutationOp(HierarchicalOp, MutationOp):
    """Mutates one uniformly drawn child position with its matched sub-operator."""

    def operator_compatible(self, operator: MutationOp, representation: Representation) -> bool:
        return operator.is_compatible(representation)

    def mutate(self, instance: Instance, step: AlgorithmStep) -> Instance:
        index_to_ops = self._require_match(instance.representation)
        matched = instance.matched_operators(index_to_ops, step)
        children = instance.children
        position = step.random.randrange(len(children))
        op_idx = matched[position]
        if op_idx is not None:
            children[position] = self._sub_operators[op_idx].mutate(children[position], step)
        return instance.representation.instantiate_from_children(*children)


__all__ = [
    "HierarchicalOp",
    "HierarchicalReductionOp",
    "HierarchicalAverageFitness",
    "HierarchicalGenoToPhenoOp",
    "HierarchicalRecombinationOp",
    "HierarchicalRandomMutationOp",
]
