import pytest

from compogen.core.algorithm import AlgorithmPass, Individual
from compogen.core.logger import Logger, LogType
from compogen.core.operators import FitnessOp, RecombinationOp
from compogen.evolution.operators import KPointCrossover, OnePointMutation, UniformCrossover
from compogen.evolution.static import StaticAlgorithmPass, StaticGeneticAlgorithm
from compogen.hierarchical.representation import And
from compogen.representations.arrays import BooleanStaticLength, DoubleStaticLength
from compogen.utils.validation import ConfigurationError, ValidationError


class _RecordingLogger(Logger):
    def __init__(self):
        super().__init__()
        self.calls = []
        self.snapshots = []

    def log(self, log_type, algorithm, step):
        self.calls.append(log_type)
        if log_type is LogType.GENERATION:
            self.snapshots.append([ind.fitness for ind in algorithm.population])


class _SpyRecombination(RecombinationOp):
    def __init__(self):
        self.calls = 0
        self._inner = KPointCrossover(1)

    def recombine(self, inputs, step, output_size):
        self.calls += 1
        return self._inner.recombine(inputs, step, output_size)

    def is_input_size_compatible(self, size):
        return size == 2

    def is_output_size_compatible(self, size):
        return size == 1

    def is_compatible(self, representation):
        return True


class _OnlyThreeParents(_SpyRecombination):
    def is_input_size_compatible(self, size):
        return size == 3


class _FailingFitness(FitnessOp):
    def fitness(self, instance, step):
        raise RuntimeError("boom")

    def is_compatible(self, representation):
        return True


class _OtherPass(AlgorithmPass):
    def create_initial(self):
        raise AssertionError("never used")


def _algorithm(genotype=None):
    ga = StaticGeneticAlgorithm()
    ga.genotype = genotype or BooleanStaticLength(8)
    return ga


def _pass(population=10, retained=3, generations=5, mutation=0.3, seed=42):
    return StaticAlgorithmPass(population, retained, generations, mutation, seed=seed)


def test_population_size_and_order_after_every_generation():
    logger = _RecordingLogger()
    population = _algorithm().run(_pass(), logger)
    assert len(logger.snapshots) == 5
    for fitnesses in logger.snapshots:
        assert len(fitnesses) == 10
        assert all(fitnesses[i] >= fitnesses[i + 1] for i in range(len(fitnesses) - 1))
    assert len(population) == 10
    assert all(isinstance(ind, Individual) for ind in population)


def test_logger_call_order():
    logger = _RecordingLogger()
    _algorithm().run(_pass(generations=3), logger)
    assert logger.calls == [
        LogType.START_ALGORITHM,
        LogType.GENERATION,
        LogType.GENERATION,
        LogType.GENERATION,
        LogType.END_ALGORITHM,
    ]


def test_same_seed_gives_same_run():
    first = [ind.fitness for ind in _algorithm().run(_pass(seed=5))]
    second = [ind.fitness for ind in _algorithm().run(_pass(seed=5))]
    assert first == second


def test_retained_individuals_survive():
    logger = _RecordingLogger()
    _algorithm().run(_pass(population=6, retained=6, generations=3), logger)
    assert logger.snapshots[0] == logger.snapshots[1] == logger.snapshots[2]


def test_mutation_probability_one_never_recombines():
    spy = _SpyRecombination()
    ga = _algorithm()
    ga.recombination = spy
    ga.run(_pass(mutation=1.0))
    assert spy.calls == 0


def test_mutation_probability_zero_always_recombines():
    spy = _SpyRecombination()
    ga = _algorithm()
    ga.recombination = spy
    ga.run(_pass(population=10, retained=3, generations=4, mutation=0.0))
    assert spy.calls == 3 * 7


def test_defaults_are_resolved_on_run():
    ga = StaticGeneticAlgorithm()
    ga.run(_pass(population=4, retained=2, generations=2))
    assert ga.genotype == BooleanStaticLength(256)
    assert ga.phenotype == ga.genotype
    assert isinstance(ga.recombination, KPointCrossover)
    assert isinstance(ga.mutation, OnePointMutation)


def test_static_pass_used_when_no_pass_given():
    ga = _algorithm()
    ga.static_pass = _pass(population=5, retained=2, generations=2)
    assert len(ga.run()) == 5


def test_static_and_dynamic_loggers_both_notified():
    static, dynamic = _RecordingLogger(), _RecordingLogger()
    ga = _algorithm()
    ga.add_logger(static)
    ga.run(_pass(generations=2), dynamic)
    assert static.calls == dynamic.calls
    assert len(static.calls) == 4
    ga.remove_logger(static)
    assert ga.static_loggers == ()


def test_remove_unknown_logger_fails():
    with pytest.raises(ConfigurationError) as exc:
        _algorithm().remove_logger(_RecordingLogger())
    assert exc.value.error_type == "unknown_logger"


def test_none_logger_rejected():
    ga = _algorithm()
    with pytest.raises(ValidationError):
        ga.run(_pass(), None)
    with pytest.raises(ValidationError):
        ga.add_logger(None)
    assert not ga.is_running


def test_setters_fail_while_running():
    errors = []

    class _Meddler(Logger):
        def log(self, log_type, algorithm, step):
            if log_type is LogType.GENERATION:
                for attempt in (
                    lambda: setattr(algorithm, "mutation", OnePointMutation()),
                    lambda: setattr(algorithm, "genotype", BooleanStaticLength(8)),
                    lambda: algorithm.add_logger(_RecordingLogger()),
                ):
                    try:
                        attempt()
                    except ConfigurationError as err:
                        errors.append(err.error_type)

    ga = _algorithm()
    ga.run(_pass(generations=1), _Meddler())
    assert errors == ["algorithm_running"] * 3
    assert not ga.is_running


def test_running_flag_reset_when_operator_raises():
    ga = _algorithm()
    ga.fitness = _FailingFitness()
    with pytest.raises(RuntimeError):
        ga.run(_pass())
    assert not ga.is_running


def test_incompatible_genotype_rejected_at_set_time():
    ga = StaticGeneticAlgorithm()
    ga.mutation = OnePointMutation()
    with pytest.raises(ConfigurationError) as exc:
        ga.genotype = And(BooleanStaticLength(4))
    assert exc.value.error_type == "incompatible_combination"
    assert ga.genotype is None


def test_incompatible_operator_rejected_at_set_time():
    ga = _algorithm(And(BooleanStaticLength(4)))
    with pytest.raises(ConfigurationError):
        ga.recombination = UniformCrossover()


def test_none_operator_rejected():
    with pytest.raises(ValidationError) as exc:
        _algorithm().mutation = None
    assert exc.value.error_type == "null_argument"


def test_unsupported_input_size_fails_before_first_generation():
    logger = _RecordingLogger()
    ga = _algorithm()
    ga.recombination = _OnlyThreeParents()
    with pytest.raises(ConfigurationError) as exc:
        ga.run(_pass(), logger)
    assert exc.value.error_type == "incompatible_input_size"
    assert logger.calls == []


def test_foreign_pass_rejected():
    ga = _algorithm()
    with pytest.raises(ConfigurationError):
        ga.static_pass = _OtherPass()
    with pytest.raises(ConfigurationError):
        ga.run(_OtherPass())


def test_phenotype_must_match_fitness():
    ga = _algorithm(DoubleStaticLength(3))
    ga.run(_pass(population=3, retained=1, generations=2))
    assert ga.phenotype == DoubleStaticLength(3)
    with pytest.raises(ConfigurationError):
        ga.phenotype = And(DoubleStaticLength(3))


def test_default_names_are_distinct():
    first, second = StaticGeneticAlgorithm(), StaticGeneticAlgorithm()
    assert first.name.startswith("A") and second.name.startswith("A")
    assert first.name != second.name
    assert StaticGeneticAlgorithm(name="custom").name == "custom"


def test_current_generation_tracks_steps():
    ga = _algorithm()
    ga.run(_pass(generations=4))
    assert ga.current_generation == 3
