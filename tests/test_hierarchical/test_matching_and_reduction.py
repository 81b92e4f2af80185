import math

import pytest

from compogen.hierarchical.matching import HierarchicalType, ReductionKind, ReductionType, match_children
from compogen.utils.validation import ValidationError


def _same(op, child):
    return op == child


def test_exact_match_pairs_by_position():
    result = match_children(HierarchicalType.EXACT_MATCH, ["a", "b"], ["a", "b"], _same)
    assert result == {0: [0], 1: [1]}


def test_exact_match_fails_on_count_mismatch():
    assert match_children(HierarchicalType.EXACT_MATCH, ["a"], ["a", "a"], _same) is None
    assert match_children(HierarchicalType.EXACT_MATCH, ["a", "a"], ["a"], _same) is None


def test_exact_match_fails_on_incompatible_pair():
    assert match_children(HierarchicalType.EXACT_MATCH, ["b", "a"], ["a", "b"], _same) is None


def test_exact_match_skips_ignored_operators():
    result = match_children(HierarchicalType.EXACT_MATCH, ["x", "b"], ["a", "b"], _same, [True, False])
    assert result == {1: [1]}


def test_first_match_uses_declaration_order():
    result = match_children(HierarchicalType.USE_FIRST_MATCH, ["x", "a", "a"], ["a"], _same)
    assert result == {0: [1]}


def test_first_match_fails_without_candidate():
    assert match_children(HierarchicalType.USE_FIRST_MATCH, ["x"], ["a"], _same) is None


def test_random_match_keeps_every_candidate():
    result = match_children(HierarchicalType.USE_RANDOM_MATCH, ["a", "b", "a"], ["a", "b"], _same)
    assert result == {0: [0, 2], 1: [1]}


def test_random_match_respects_ignore_mask():
    result = match_children(HierarchicalType.USE_RANDOM_MATCH, ["a", "b", "a"], ["a"], _same, [True, False, False])
    assert result == {0: [2]}
    assert match_children(HierarchicalType.USE_RANDOM_MATCH, ["a", "b"], ["a"], _same, [True, False]) is None


def test_ignore_mask_length_checked():
    with pytest.raises(ValidationError):
        match_children(HierarchicalType.EXACT_MATCH, ["a"], ["a"], _same, [False, False])


def test_average_reduction():
    reduction = ReductionType.average()
    assert reduction.kind is ReductionKind.AVERAGE
    assert reduction.reduce([1.0, 2.0, 3.0]) == pytest.approx(2.0)
    assert reduction.ignore_mask(3) == [False, False, False]
    assert reduction.is_compatible(7)


def test_weights_are_normalized():
    reduction = ReductionType.individual_weights(1.0, 3.0)
    assert reduction.weights == pytest.approx((0.25, 0.75))
    assert reduction.reduce([2.0, 4.0]) == pytest.approx(3.5)
    assert reduction.is_compatible(2)
    assert not reduction.is_compatible(3)


def test_zero_weight_ignores_operator_and_its_value():
    reduction = ReductionType.individual_weights(0.0, 2.0)
    assert reduction.ignore_mask(2) == [True, False]
    assert reduction.reduce([math.nan, 5.0]) == pytest.approx(5.0)


def test_just_one_ignores_all_others():
    reduction = ReductionType.just_one(1)
    assert reduction.ignore_mask(3) == [True, False, True]
    assert reduction.reduce([math.nan, 4.0, math.inf]) == 4.0
    assert reduction.is_compatible(2)
    assert not reduction.is_compatible(1)


@pytest.mark.parametrize("weights", [(), (-1.0, 2.0), (0.0, 0.0), (math.nan,), (math.inf, 1.0)])
def test_invalid_weights_rejected(weights):
    with pytest.raises(ValidationError):
        ReductionType.individual_weights(*weights)


def test_negative_index_rejected():
    with pytest.raises(ValidationError):
        ReductionType.just_one(-1)
