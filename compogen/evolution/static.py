"""Static (steady-size) generational policy.

Generation 0 fills the population with random genotypes. Every later
generation keeps the best ``retained_population`` individuals and refills the
remaining slots by mutating or recombining randomly drawn retained parents.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Any

from compogen.config import PASS_KEYS, PRESET_STANDARD
from compogen.core.algorithm import AlgorithmPass, AlgorithmStep, GeneticAlgorithm
from compogen.utils.rng_manager import RNGManager
from compogen.utils.validation import ConfigurationError


@dataclass(frozen=True)
class StaticAlgorithmPass(AlgorithmPass):
    """Run parameters of a StaticGeneticAlgorithm.

    Args:
        population: Number of individuals, >= 1
        retained_population: Survivors per generation, 1 <= retained <= population
        generations: Number of generations, >= 1
        mutation_probability: Chance of mutating instead of recombining, in [0, 1]
        seed: Seed of the pass's random source; OS entropy when None
    """

    population: int
    retained_population: int
    generations: int
    mutation_probability: float
    seed: int | None = None
    rng_manager: RNGManager = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.population < 1:
            raise ConfigurationError("invalid_population", "population has to be >= 1", population=self.population)
        if not 1 <= self.retained_population <= self.population:
            raise ConfigurationError(
                "invalid_retained_population",
                "retained population has to be in [1, population]",
                retained_population=self.retained_population,
                population=self.population,
            )
        if self.generations < 1:
            raise ConfigurationError("invalid_generations", "generations has to be >= 1", generations=self.generations)
        if not math.isfinite(self.mutation_probability) or not 0.0 <= self.mutation_probability <= 1.0:
            raise ConfigurationError(
                "invalid_mutation_probability",
                "mutation probability has to be in [0, 1]",
                mutation_probability=self.mutation_probability,
            )
        object.__setattr__(self, "rng_manager", RNGManager(seed=self.seed))

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> StaticAlgorithmPass:
        unknown = sorted(set(config) - set(PASS_KEYS))
        if unknown:
            raise ConfigurationError("unknown_config_keys", "unknown pass configuration keys", keys=unknown)
        seed = config.get("seed")
        return cls(
            population=int(config.get("population", PRESET_STANDARD["population"])),
            retained_population=int(config.get("retained_population", PRESET_STANDARD["retained_population"])),
            generations=int(config.get("generations", PRESET_STANDARD["generations"])),
            mutation_probability=float(config.get("mutation_probability", PRESET_STANDARD["mutation_probability"])),
            seed=int(seed) if seed is not None else None,
        )

    def create_initial(self) -> StaticAlgorithmStep:
        return StaticAlgorithmStep(self)


class StaticAlgorithmStep(AlgorithmStep):
    """Generation index plus an optional sub-step index within the generation."""

    def __init__(self, parent: StaticAlgorithmPass, generation: int = 0, operation_step: int = -1) -> None:
        self._parent = parent
        self.generation = generation
        self.operation_step = operation_step

    @property
    def parent(self) -> StaticAlgorithmPass:
        return self._parent

    @property
    def random(self) -> random.Random:
        return self._parent.rng_manager.rng

    def has_next(self) -> bool:
        return self.generation < self._parent.generations - 1

    def next(self) -> StaticAlgorithmStep:
        return StaticAlgorithmStep(self._parent, self.generation + 1)

    def sub_step(self, operation_step: int) -> StaticAlgorithmStep:
        return StaticAlgorithmStep(self._parent, self.generation, operation_step)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StaticAlgorithmStep):
            return NotImplemented
        return (self._parent is other._parent and self.generation == other.generation
                and self.operation_step == other.operation_step)

    def __hash__(self) -> int:
        return hash((id(self._parent), self.generation, self.operation_step))

    def __repr__(self) -> str:
        return f"StaticAlgorithmStep(generation={self.generation}, operation_step={self.operation_step})"


class StaticGeneticAlgorithm(GeneticAlgorithm):
    """Keeps the population size fixed; survivors are the top-ranked individuals."""

    def _do_step(self, step: StaticAlgorithmStep) -> None:
        algorithm_pass = step.parent
        if step.generation == 0:
            self._population = []
            for idx in range(algorithm_pass.population):
                sub = step.sub_step(idx)
                genotype = self._genotype.instantiate_random(sub)
                self._population.append(self.make_individual(genotype, sub))
            return

        retained = algorithm_pass.retained_population
        parents = self._population[:retained]
        probability = algorithm_pass.mutation_probability
        rng = step.random
        for idx in range(algorithm_pass.population - retained):
            sub = step.sub_step(idx)
            if probability == 1.0 or rng.random() < probability:
                parent = parents[rng.randrange(retained)]
                genotype = self._mutation.mutate(parent.genotype, sub)
            else:
                pair = [parents[rng.randrange(retained)].genotype for _ in range(2)]
                genotype = self._recombination.recombine(pair, sub, 1)[0]
            self._population[retained + idx] = self.make_individual(genotype, sub)

    def _standard_pass(self) -> StaticAlgorithmPass:
        return StaticAlgorithmPass.from_config(PRESET_STANDARD)

    def _is_pass_compatible(self, algorithm_pass: AlgorithmPass) -> bool:
        return isinstance(algorithm_pass, StaticAlgorithmPass)

    def _recombination_input_sizes(self) -> tuple[int, ...]:
        return (2,)

    def _recombination_output_sizes(self) -> tuple[int, ...]:
        return (1,)


__all__ = ["StaticAlgorithmPass", "StaticAlgorithmStep", "StaticGeneticAlgorithm"]
