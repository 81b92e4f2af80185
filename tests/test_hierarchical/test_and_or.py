import pytest

from compogen.evolution.static import StaticAlgorithmPass
from compogen.hierarchical.representation import And, AndInstance, Or, OrInstance
from compogen.representations.arrays import BooleanStaticLength, DoubleStaticLength, LongStaticLength
from compogen.utils.validation import ValidationError

B4 = BooleanStaticLength(4)
L4 = LongStaticLength(4)
D2 = DoubleStaticLength(2)


def _step(seed=1):
    return StaticAlgorithmPass(4, 2, 2, 0.0, seed=seed).create_initial()


def test_and_instantiates_every_child():
    rep = And(B4, L4, D2)
    inst = rep.instantiate_random(_step())
    assert isinstance(inst, AndInstance)
    assert [c.representation for c in inst.children] == [B4, L4, D2]
    assert inst.indices_of_children() == [0, 1, 2]


def test_and_round_trip_through_children():
    rep = And(B4, D2)
    inst = rep.instantiate_random(_step())
    rebuilt = rep.instantiate_from_children(*inst.children)
    assert rebuilt == inst
    assert rebuilt is not inst


def test_children_list_is_a_copy():
    inst = And(B4, D2).instantiate_random(_step())
    children = inst.children
    children.clear()
    assert len(inst.children) == 2


def test_and_instance_checks_children():
    rep = And(B4, D2)
    with pytest.raises(ValidationError) as exc:
        rep.instantiate_from_children(B4.from_values([0, 0, 0, 0]))
    assert exc.value.error_type == "invalid_length"
    with pytest.raises(ValidationError) as exc:
        rep.instantiate_from_children(D2.from_values([0, 0]), B4.from_values([0, 0, 0, 0]))
    assert exc.value.error_type == "incompatible_child"


def test_hierarchical_needs_children():
    with pytest.raises(ValidationError):
        And()
    with pytest.raises(ValidationError):
        Or(B4, None)


def test_structural_equality():
    assert And(B4, D2) == And(BooleanStaticLength(4), DoubleStaticLength(2))
    assert hash(And(B4, D2)) == hash(And(B4, D2))
    assert And(B4, D2) != And(D2, B4)
    assert And(B4, D2) != Or(B4, D2)
    assert And(And(B4), D2) == And(And(B4), D2)


def test_or_defaults_to_uniform_probabilities():
    assert Or(B4, L4, D2).probabilities == pytest.approx((1 / 3, 1 / 3, 1 / 3))
    assert Or(B4, L4, probabilities=[1, 3]).probabilities == pytest.approx((0.25, 0.75))


def test_or_rejects_duplicate_children():
    with pytest.raises(ValidationError) as exc:
        Or(B4, L4, BooleanStaticLength(4))
    assert exc.value.error_type == "duplicate_child"


@pytest.mark.parametrize("probabilities", [[1.0], [1.0, 0.0], [1.0, -2.0], [float("nan"), 1.0]])
def test_or_rejects_bad_probabilities(probabilities):
    with pytest.raises(ValidationError):
        Or(B4, L4, probabilities=probabilities)


def test_or_choose_index_uses_cumulative_bounds():
    rep = Or(B4, L4, probabilities=[0.25, 0.75])
    assert rep.choose_index(0.0) == 0
    assert rep.choose_index(0.25) == 0
    assert rep.choose_index(0.2500001) == 1
    assert rep.choose_index(1.0) == 1
    assert rep.choose_index(1.5) == 1


def test_or_choice_ratio_follows_probabilities():
    rep = Or(B4, L4, probabilities=[0.25, 0.75])
    step = _step(seed=2024)
    chosen = [rep.instantiate_random(step).chosen_index for _ in range(10_000)]
    ratio = chosen.count(0) / len(chosen)
    assert 0.22 < ratio < 0.28


def test_or_instance_knows_its_branch():
    rep = Or(B4, D2)
    inst = rep.instantiate_from_children(D2.from_values([0.5, 0.5]))
    assert isinstance(inst, OrInstance)
    assert inst.chosen_index == 1
    assert inst.indices_of_children() == [1]
    assert inst.chosen.representation == D2


def test_or_instance_checks_children():
    rep = Or(B4, D2)
    with pytest.raises(ValidationError):
        rep.instantiate_from_children(L4.from_values([1, 2, 3, 4]))
    with pytest.raises(ValidationError):
        rep.instantiate_from_children(B4.from_values([0, 0, 0, 0]), D2.from_values([0, 0]))


def test_instances_of_different_branches_differ():
    rep = Or(B4, D2)
    first = rep.instantiate_from_children(B4.from_values([1, 1, 1, 1]))
    second = rep.instantiate_from_children(B4.from_values([1, 1, 1, 1]))
    third = rep.instantiate_from_children(D2.from_values([1, 1]))
    assert first == second
    assert first != third
