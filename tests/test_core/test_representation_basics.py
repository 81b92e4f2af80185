import pytest

from compogen.core.representation import Representation
from compogen.distributions import GaussianDistribution, LinearDistribution
from compogen.evolution.static import StaticAlgorithmPass
from compogen.representations.arrays import (
    BooleanStaticLength,
    DoubleStaticLength,
    LongStaticLength,
    StaticLengthInstance,
)
from compogen.utils.rng_manager import RNGManager
from compogen.utils.validation import ConfigurationError, ValidationError


def _step(seed=3):
    return StaticAlgorithmPass(4, 2, 2, 0.0, seed=seed).create_initial()


def test_equality_is_structural_within_one_kind():
    assert BooleanStaticLength(4) == BooleanStaticLength(4)
    assert hash(BooleanStaticLength(4)) == hash(BooleanStaticLength(4))
    assert BooleanStaticLength(4) != BooleanStaticLength(5)


def test_equality_is_false_across_kinds():
    assert BooleanStaticLength(4) != LongStaticLength(4)
    assert LongStaticLength(4) != DoubleStaticLength(4)
    assert not BooleanStaticLength(4).is_equal(DoubleStaticLength(4))


def test_distribution_does_not_take_part_in_equality():
    assert DoubleStaticLength(3, LinearDistribution(0.0, 5.0)) == DoubleStaticLength(3)


def test_invalid_length_rejected():
    with pytest.raises(ValidationError) as exc:
        BooleanStaticLength(0)
    assert exc.value.error_type == "invalid_length"


def test_instance_with_wrong_length_fails_at_construction():
    with pytest.raises(ValidationError) as exc:
        BooleanStaticLength(4).from_values([True, False])
    assert exc.value.error_type == "invalid_length"
    assert exc.value.details == {"expected": 4, "got": 2}


def test_instance_requires_representation():
    with pytest.raises(ValidationError):
        StaticLengthInstance(None, [1, 2])


def test_value_index_checked():
    inst = LongStaticLength(3).from_values([1, 2, 3])
    assert inst.value(2) == 3
    with pytest.raises(ValidationError) as exc:
        inst.value(3)
    assert exc.value.error_type == "index_out_of_bounds"


def test_values_are_coerced_and_immutable():
    inst = BooleanStaticLength(3).from_values([1, 0, 2])
    assert inst.values == (True, False, True)
    assert inst.as_floats() == [1.0, 0.0, 1.0]
    assert repr(inst) == "BooleanStaticLength[101]"
    assert inst == BooleanStaticLength(3).from_values([True, False, True])


def test_instantiate_random_conforms():
    rep = DoubleStaticLength(5)
    inst = rep.instantiate_random(_step())
    assert inst.representation == rep
    assert inst.conforms_to(rep)
    assert len(inst) == 5
    assert all(0.0 <= v < 1.0 for v in inst.values)


def test_long_values_follow_distribution():
    rep = LongStaticLength(50, LinearDistribution(-3, 3))
    inst = rep.instantiate_random(_step())
    assert all(-3 <= v < 3 for v in inst.values)


def test_distribution_validation():
    with pytest.raises(ValidationError):
        LinearDistribution(2.0, 1.0)
    with pytest.raises(ValidationError):
        GaussianDistribution(0.0, -1.0)


def test_representation_is_abstract():
    with pytest.raises(TypeError):
        Representation()


def test_rng_manager_is_reproducible():
    a, b = RNGManager(seed=11), RNGManager(seed=11)
    assert [a.rng.random() for _ in range(5)] == [b.rng.random() for _ in range(5)]
    state = a.get_state()
    first = a.rng.random()
    a.set_state(state)
    assert a.rng.random() == first
    assert repr(a) == "RNGManager(seed=11)"


def test_error_string_contains_type_and_details():
    err = ConfigurationError("incompatible_combination", "nope", size=3)
    assert isinstance(err, ValidationError)
    assert isinstance(err, ValueError)
    assert str(err) == "[incompatible_combination] nope (size=3)"
