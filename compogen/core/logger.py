"""Logger collaborators notified by a running GeneticAlgorithm.

Call order for one run: ``compatibility_check`` and ``start_algorithm`` once,
``log_generation`` after every sorted generation, ``end_algorithm`` once.
A logger shared by several algorithms opens its session (``starting``) when
the first of them starts and closes it (``ending``) when the last one ends.
"""

from __future__ import annotations

import enum
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from compogen.utils.validation import ConfigurationError, InternalError, ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from compogen.core.algorithm import AlgorithmPass, AlgorithmStep, GeneticAlgorithm
    from compogen.diversity import Diversity


class LogType(enum.Enum):
    START_ALGORITHM = "start_algorithm"
    END_ALGORITHM = "end_algorithm"
    GENERATION = "generation"


class Logger(ABC):
    """Base class of run observers."""

    def __init__(self) -> None:
        self._started: list[GeneticAlgorithm] = []

    def start_algorithm(self, algorithm: GeneticAlgorithm, step: AlgorithmStep) -> None:
        if not self._started:
            self.starting()
        self._started.append(algorithm)
        self.log(LogType.START_ALGORITHM, algorithm, step)

    def end_algorithm(self, algorithm: GeneticAlgorithm, step: AlgorithmStep) -> None:
        self.log(LogType.END_ALGORITHM, algorithm, step)
        if algorithm in self._started:
            self._started.remove(algorithm)
        if not self._started:
            self.ending()

    def log_generation(self, algorithm: GeneticAlgorithm, step: AlgorithmStep) -> None:
        self.log(LogType.GENERATION, algorithm, step)

    def compatibility_check(self, algorithm: GeneticAlgorithm, algorithm_pass: AlgorithmPass) -> None:
        """Raise ConfigurationError if this logger cannot observe the run."""

    @abstractmethod
    def log(self, log_type: LogType, algorithm: GeneticAlgorithm, step: AlgorithmStep) -> None:
        ...

    def starting(self) -> None:
        pass

    def ending(self) -> None:
        pass


class TextLogger(Logger):
    """Writes run progress through the standard logging module.

    Args:
        logger: Target logger; defaults to ``logging.getLogger("compogen.run")``
        log_just_in_time: Emit entries immediately; otherwise buffer them and
            flush when the logging session ends
        population_log: Number of best individuals listed per generation;
            ``None`` lists all of them
        log_time: Prefix entries with the elapsed milliseconds
        level: Logging level used for every entry
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        log_just_in_time: bool = True,
        population_log: int | None = 3,
        log_time: bool = True,
        level: int = logging.INFO,
    ) -> None:
        super().__init__()
        if population_log is not None and population_log < 0:
            raise ValidationError("invalid_population_log", "population_log has to be >= 0", population_log=population_log)
        self.logger = logger or logging.getLogger("compogen.run")
        self.log_just_in_time = log_just_in_time
        self.population_log = population_log
        self.log_time = log_time
        self.level = level
        self._entries: list[str] = []
        self._start_time = time.perf_counter()

    def starting(self) -> None:
        self._start_time = time.perf_counter()
        self._entries = []

    def ending(self) -> None:
        if not self.log_just_in_time:
            for entry in self._entries:
                self.logger.log(self.level, entry)
            self._entries = []

    def log(self, log_type: LogType, algorithm: GeneticAlgorithm, step: AlgorithmStep) -> None:
        if log_type is LogType.START_ALGORITHM:
            self._add_entry(f"Started algorithm '{algorithm.name}': {algorithm!r}")
        elif log_type is LogType.END_ALGORITHM:
            self._add_entry(f"Finished algorithm '{algorithm.name}'")
        elif log_type is LogType.GENERATION:
            lines = [f"Generation '{algorithm.current_generation}' of algorithm '{algorithm.name}':"]
            population = algorithm.population
            shown = population if self.population_log is None else population[: self.population_log]
            for idx, individual in enumerate(shown):
                lines.append(f"    I{idx}: fitness={individual.fitness:.6g} genotype={individual.genotype!r}")
            self._add_entry("\n".join(lines))
        else:
            raise InternalError(f"unhandled log type: {log_type}")

    def _add_entry(self, entry: str) -> None:
        if self.log_time:
            elapsed_ms = int((time.perf_counter() - self._start_time) * 1000)
            entry = f"[{elapsed_ms} ms]  {entry}"
        if self.log_just_in_time:
            self.logger.log(self.level, entry)
        else:
            self._entries.append(entry)


@dataclass
class RunHistory:
    """Per-generation metrics and the ordered log events of observed runs."""

    events: list[tuple[str, str, int]] = field(default_factory=list)
    metrics: list[dict[str, Any]] = field(default_factory=list)

    def add_event(self, log_type: LogType, algorithm_name: str, generation: int) -> None:
        self.events.append((log_type.value, algorithm_name, generation))

    def add_metrics(self, metrics: dict[str, Any]) -> None:
        self.metrics.append(dict(metrics))

    def count(self, log_type: LogType) -> int:
        return sum(1 for kind, _, _ in self.events if kind == log_type.value)


class HistoryLogger(Logger):
    """Records fitness statistics (and optionally genotype diversity) per generation."""

    def __init__(self, diversity: Diversity | None = None) -> None:
        super().__init__()
        self.diversity = diversity
        self.history = RunHistory()

    def compatibility_check(self, algorithm: GeneticAlgorithm, algorithm_pass: AlgorithmPass) -> None:
        if self.diversity is None:
            return
        if not self.diversity.is_compatible(algorithm.genotype):
            raise ConfigurationError(
                "incompatible_combination",
                "diversity operator is not compatible with the genotype",
                algorithm=algorithm.name,
            )
        if not self.diversity.is_pass_compatible(algorithm_pass):
            raise ConfigurationError("incompatible_combination", "diversity operator does not accept the pass")

    def log(self, log_type: LogType, algorithm: GeneticAlgorithm, step: AlgorithmStep) -> None:
        self.history.add_event(log_type, algorithm.name, algorithm.current_generation)
        if log_type is not LogType.GENERATION:
            return
        fitnesses = [ind.fitness for ind in algorithm.population]
        metrics: dict[str, Any] = {
            "algorithm": algorithm.name,
            "generation": algorithm.current_generation,
            "population": len(fitnesses),
            "best": fitnesses[0] if fitnesses else None,
            "worst": fitnesses[-1] if fitnesses else None,
            "average": sum(fitnesses) / len(fitnesses) if fitnesses else None,
        }
        if self.diversity is not None:
            genotypes = [ind.genotype for ind in algorithm.population]
            metrics["diversity"] = self.diversity.diversity(genotypes, step)
        self.history.add_metrics(metrics)


__all__ = ["LogType", "Logger", "TextLogger", "RunHistory", "HistoryLogger"]
