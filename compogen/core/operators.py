"""Capability-typed operator taxonomy.

Every operator answers two compatibility questions before a run starts:

- ``is_compatible(representation)``: does the operator structurally fit the
  representation it will be applied to?
- ``is_pass_compatible(algorithm_pass)``: does it accept the run parameters?
  Most operators accept any pass.

Operators hold parameters only; all randomness comes from the step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmPass, AlgorithmStep
    from compogen.core.representation import Instance, Representation


class Operator(ABC):
    """Common compatibility contract of all operator kinds."""

    @abstractmethod
    def is_compatible(self, representation: Representation) -> bool:
        ...

    def is_pass_compatible(self, algorithm_pass: AlgorithmPass) -> bool:
        return True

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items() if not k.startswith("_"))
        return f"{type(self).__name__}({params})"


class MutationOp(Operator):
    @abstractmethod
    def mutate(self, instance: Instance, step: AlgorithmStep) -> Instance:
        ...


class RecombinationOp(Operator):
    """Combines ``len(inputs)`` parents into ``output_size`` children."""

    @abstractmethod
    def recombine(self, inputs: Sequence[Instance], step: AlgorithmStep, output_size: int) -> list[Instance]:
        ...

    @abstractmethod
    def is_input_size_compatible(self, size: int) -> bool:
        ...

    @abstractmethod
    def is_output_size_compatible(self, size: int) -> bool:
        ...


class FitnessOp(Operator):
    @abstractmethod
    def fitness(self, instance: Instance, step: AlgorithmStep) -> float:
        ...


class GenoToPhenoOp(Operator):
    @abstractmethod
    def geno_to_pheno(self, instance: Instance, step: AlgorithmStep) -> Instance:
        ...

    @abstractmethod
    def is_geno_pheno_compatible(self, genotype: Representation, phenotype: Representation) -> bool:
        ...


__all__ = [
    "Operator",
    "MutationOp",
    "RecombinationOp",
    "FitnessOp",
    "GenoToPhenoOp",
]
