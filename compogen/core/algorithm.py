"""Algorithm configuration, step state machine and population orchestrator.

An AlgorithmPass is the immutable description of one run plus the random
source shared by every step derived from it. An AlgorithmStep is one point in
the generation sequence; ``next()`` returns a new step and never mutates the
receiver.

GeneticAlgorithm owns the population and drives the run:

1. resolve unset representations/operators to defaults and check arities
2. run every logger's compatibility check, build the initial step, start loggers
3. ``_do_step`` builds the generation, the population is sorted by descending
   fitness, then every logger receives ``log_generation``
4. repeat while the step reports a successor, then notify loggers again
"""

from __future__ import annotations

import itertools
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from compogen.core.operators import FitnessOp, GenoToPhenoOp, MutationOp, RecombinationOp
from compogen.core.representation import Instance, Representation
from compogen.utils.validation import ConfigurationError, ValidationError, require

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.logger import Logger


class AlgorithmPass(ABC):
    """Immutable run parameters owning one shared random source."""

    @abstractmethod
    def create_initial(self) -> AlgorithmStep:
        ...


class AlgorithmStep(ABC):
    """One position in the generation sequence of a pass."""

    @abstractmethod
    def has_next(self) -> bool:
        ...

    @abstractmethod
    def next(self) -> AlgorithmStep:
        ...

    @property
    @abstractmethod
    def parent(self) -> AlgorithmPass:
        ...

    @property
    @abstractmethod
    def random(self) -> random.Random:
        ...


@dataclass(frozen=True)
class Individual:
    """Genotype, derived phenotype and fitness score.

    Populations are ordered by descending fitness; ``sorted`` keeps ties in
    list order.
    """

    genotype: Instance
    phenotype: Instance
    fitness: float

    @staticmethod
    def sort_key(individual: Individual) -> float:
        return -individual.fitness


_algorithm_names = itertools.count()


class GeneticAlgorithm(ABC):
    """Base orchestrator; subclasses define what a single generation does.

    Representations, operators, the static pass and static loggers are set
    through properties and methods that validate compatibility eagerly. None
    of them may be changed while ``is_running`` is true.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name if name is not None else f"A{next(_algorithm_names)}"
        self._genotype: Representation | None = None
        self._phenotype: Representation | None = None
        self._recombination: RecombinationOp | None = None
        self._mutation: MutationOp | None = None
        self._geno_to_pheno: GenoToPhenoOp | None = None
        self._fitness: FitnessOp | None = None
        self._static_pass: AlgorithmPass | None = None
        self._static_loggers: list[Logger] = []
        self._is_running = False
        self._current_generation = 0
        self._population: list[Individual] = []

    # ---------- guarded configuration ----------

    def _ensure_not_running(self, what: str) -> None:
        if self._is_running:
            raise ConfigurationError(
                "algorithm_running",
                f"cannot change {what} while the algorithm is running",
                algorithm=self.name,
            )

    @staticmethod
    def _ensure_set(value, what: str) -> None:
        require(value, what)

    @staticmethod
    def _incompatible(message: str, **details) -> ConfigurationError:
        return ConfigurationError("incompatible_combination", message, **details)

    @property
    def genotype(self) -> Representation | None:
        return self._genotype

    @genotype.setter
    def genotype(self, representation: Representation) -> None:
        self._ensure_not_running("genotype")
        self._ensure_set(representation, "genotype")
        if self._recombination is not None and not self._recombination.is_compatible(representation):
            raise self._incompatible("genotype is not compatible with the recombination operator")
        if self._mutation is not None and not self._mutation.is_compatible(representation):
            raise self._incompatible("genotype is not compatible with the mutation operator")
        if self._geno_to_pheno is not None:
            if not self._geno_to_pheno.is_compatible(representation):
                raise self._incompatible("genotype is not compatible with the geno-to-pheno operator")
            if self._phenotype is not None and not self._geno_to_pheno.is_geno_pheno_compatible(representation, self._phenotype):
                raise self._incompatible("genotype/phenotype combination is not compatible with the geno-to-pheno operator")
        self._genotype = representation

    @property
    def phenotype(self) -> Representation | None:
        return self._phenotype

    @phenotype.setter
    def phenotype(self, representation: Representation) -> None:
        self._ensure_not_running("phenotype")
        self._ensure_set(representation, "phenotype")
        if (self._geno_to_pheno is not None and self._genotype is not None
                and not self._geno_to_pheno.is_geno_pheno_compatible(self._genotype, representation)):
            raise self._incompatible("genotype/phenotype combination is not compatible with the geno-to-pheno operator")
        if self._fitness is not None and not self._fitness.is_compatible(representation):
            raise self._incompatible("phenotype is not compatible with the fitness operator")
        self._phenotype = representation

    @property
    def recombination(self) -> RecombinationOp | None:
        return self._recombination

    @recombination.setter
    def recombination(self, operator: RecombinationOp) -> None:
        self._ensure_not_running("recombination operator")
        self._ensure_set(operator, "recombination operator")
        if self._genotype is not None and not operator.is_compatible(self._genotype):
            raise self._incompatible("genotype is not compatible with the recombination operator")
        self._recombination = operator

    @property
    def mutation(self) -> MutationOp | None:
        return self._mutation

    @mutation.setter
    def mutation(self, operator: MutationOp) -> None:
        self._ensure_not_running("mutation operator")
        self._ensure_set(operator, "mutation operator")
        if self._genotype is not None and not operator.is_compatible(self._genotype):
            raise self._incompatible("genotype is not compatible with the mutation operator")
        self._mutation = operator

    @property
    def geno_to_pheno(self) -> GenoToPhenoOp | None:
        return self._geno_to_pheno

    @geno_to_pheno.setter
    def geno_to_pheno(self, operator: GenoToPhenoOp) -> None:
        self._ensure_not_running("geno-to-pheno operator")
        self._ensure_set(operator, "geno-to-pheno operator")
        if self._genotype is not None:
            if not operator.is_compatible(self._genotype):
                raise self._incompatible("genotype is not compatible with the geno-to-pheno operator")
            if self._phenotype is not None and not operator.is_geno_pheno_compatible(self._genotype, self._phenotype):
                raise self._incompatible("genotype/phenotype combination is not compatible with the geno-to-pheno operator")
        self._geno_to_pheno = operator

    @property
    def fitness(self) -> FitnessOp | None:
        return self._fitness

    @fitness.setter
    def fitness(self, operator: FitnessOp) -> None:
        self._ensure_not_running("fitness operator")
        self._ensure_set(operator, "fitness operator")
        if self._phenotype is not None and not operator.is_compatible(self._phenotype):
            raise self._incompatible("phenotype is not compatible with the fitness operator")
        self._fitness = operator

    @property
    def static_pass(self) -> AlgorithmPass | None:
        return self._static_pass

    @static_pass.setter
    def static_pass(self, algorithm_pass: AlgorithmPass | None) -> None:
        self._ensure_not_running("static pass")
        if algorithm_pass is not None and not self._is_pass_compatible(algorithm_pass):
            raise self._incompatible("pass is not compatible with this algorithm", algorithm=self.name)
        self._static_pass = algorithm_pass

    @property
    def static_loggers(self) -> tuple[Logger, ...]:
        return tuple(self._static_loggers)

    def add_logger(self, logger: Logger) -> None:
        self._ensure_not_running("static loggers")
        self._ensure_set(logger, "logger")
        self._static_loggers.append(logger)

    def remove_logger(self, logger: Logger) -> None:
        self._ensure_not_running("static loggers")
        self._ensure_set(logger, "logger")
        if logger not in self._static_loggers:
            raise ConfigurationError("unknown_logger", "logger is not registered on this algorithm", algorithm=self.name)
        self._static_loggers.remove(logger)

    # ---------- runtime state ----------

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def current_generation(self) -> int:
        return self._current_generation

    @property
    def population(self) -> tuple[Individual, ...]:
        return tuple(self._population)

    def make_individual(self, genotype: Instance, step: AlgorithmStep) -> Individual:
        """Derive phenotype and fitness for ``genotype``."""
        phenotype = self._geno_to_pheno.geno_to_pheno(genotype, step)
        return Individual(genotype, phenotype, float(self._fitness.fitness(phenotype, step)))

    def _initialize(self, algorithm_pass: AlgorithmPass) -> None:
        from compogen.evolution.operators import (
            AverageFitness,
            GenoToPhenoIdentity,
            KPointCrossover,
            OnePointMutation,
        )
        from compogen.representations.arrays import BooleanStaticLength

        if self._genotype is None:
            self.genotype = BooleanStaticLength(256)
        if self._phenotype is None:
            self.phenotype = self._genotype
        if self._recombination is None:
            self.recombination = KPointCrossover(1)
        if self._mutation is None:
            self.mutation = OnePointMutation()
        if self._geno_to_pheno is None:
            self.geno_to_pheno = GenoToPhenoIdentity()
        if self._fitness is None:
            self.fitness = AverageFitness()

        for size in self._recombination_input_sizes():
            if not self._recombination.is_input_size_compatible(size):
                raise ConfigurationError(
                    "incompatible_input_size",
                    "recombination operator does not accept the requested input size",
                    size=size,
                )
        for size in self._recombination_output_sizes():
            if not self._recombination.is_output_size_compatible(size):
                raise ConfigurationError(
                    "incompatible_output_size",
                    "recombination operator does not produce the requested output size",
                    size=size,
                )

        if not self._is_pass_compatible(algorithm_pass):
            raise self._incompatible("pass is not compatible with this algorithm", algorithm=self.name)
        operators = (self._recombination, self._mutation, self._geno_to_pheno, self._fitness)
        for operator in operators:
            if not operator.is_pass_compatible(algorithm_pass):
                raise self._incompatible("operator does not accept the pass", operator=type(operator).__name__)

    def run(self, algorithm_pass: AlgorithmPass | None = None, *loggers: Logger) -> tuple[Individual, ...]:
        """Run until the step machine reaches its generation bound.

        Args:
            algorithm_pass: Pass to run; falls back to the static pass, then to
                the algorithm's standard pass.
            *loggers: Extra loggers used for this run only, after the static
                loggers.

        Returns:
            The final population, sorted by descending fitness.
        """
        self._ensure_not_running("the run")
        if algorithm_pass is None:
            algorithm_pass = self._static_pass if self._static_pass is not None else self._standard_pass()
        for logger in loggers:
            if logger is None:
                raise ValidationError("null_argument", "loggers cannot contain None")
        all_loggers = [*self._static_loggers, *loggers]

        self._initialize(algorithm_pass)
        for logger in all_loggers:
            logger.compatibility_check(self, algorithm_pass)

        self._is_running = True
        self._current_generation = 0
        self._population = []
        started: list[Logger] = []
        step = None
        try:
            step = algorithm_pass.create_initial()
            for logger in all_loggers:
                logger.start_algorithm(self, step)
                started.append(logger)
            logging.debug("Algorithm %s started", self.name)

            self._run_generation(step, all_loggers)
            while step.has_next():
                self._current_generation += 1
                step = step.next()
                self._run_generation(step, all_loggers)
        finally:
            self._is_running = False
            # every started logger is closed, also when a generation raised
            for logger in started:
                logger.end_algorithm(self, step)
        logging.debug("Algorithm %s finished after %d generations", self.name, self._current_generation + 1)
        return self.population

    def _run_generation(self, step: AlgorithmStep, loggers: Iterable[Logger]) -> None:
        self._do_step(step)
        self._population.sort(key=Individual.sort_key)
        logging.debug(
            "Algorithm %s generation %d: best fitness %.6g",
            self.name,
            self._current_generation,
            self._population[0].fitness if self._population else float("nan"),
        )
        for logger in loggers:
            logger.log_generation(self, step)

    # ---------- generational policy ----------

    @abstractmethod
    def _do_step(self, step: AlgorithmStep) -> None:
        """Build the individuals of one generation into ``self._population``."""

    @abstractmethod
    def _standard_pass(self) -> AlgorithmPass:
        ...

    @abstractmethod
    def _is_pass_compatible(self, algorithm_pass: AlgorithmPass) -> bool:
        ...

    @abstractmethod
    def _recombination_input_sizes(self) -> tuple[int, ...]:
        ...

    @abstractmethod
    def _recombination_output_sizes(self) -> tuple[int, ...]:
        ...

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, genotype={self._genotype!r}, "
            f"phenotype={self._phenotype!r}, recombination={self._recombination!r}, "
            f"mutation={self._mutation!r}, geno_to_pheno={self._geno_to_pheno!r}, "
            f"fitness={self._fitness!r})"
        )


__all__ = ["AlgorithmPass", "AlgorithmStep", "Individual", "GeneticAlgorithm"]
