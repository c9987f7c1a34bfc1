"""
Tests for the composite score, tier boundaries and score explanations.
"""

import pytest

from app.models.priority import FACTORS, PriorityMetrics, Tier, WeightSet
from app.services.priority_scoring import (
    calculate_score,
    classify_tier,
    describe_score,
    score_breakdown,
)

WEIGHTS = WeightSet(
    severity=5,
    people_impact=3,
    urgency=4,
    location_criticality=2,
    wait_time=3,
    recurrence=1,
)

METRICS = PriorityMetrics(
    severity=5,
    people_impact=3,
    urgency=5,
    location_criticality=1,
    wait_time=5,
    recurrence=0,
)


def test_worked_example_scores_71_and_is_critical():
    score = calculate_score(METRICS, WEIGHTS)
    assert score == 71
    assert classify_tier(score) == Tier.CRITICAL


def test_score_range_extremes():
    all_five = PriorityMetrics(**{f: 5 for f in FACTORS})
    max_weights = WeightSet(**{f: 5 for f in FACTORS})
    zero_weights = WeightSet(**{f: 0 for f in FACTORS})

    assert calculate_score(all_five, max_weights) == 150
    assert calculate_score(all_five, zero_weights) == 0


@pytest.mark.parametrize("score, tier", [
    (150, Tier.CRITICAL),
    (40, Tier.CRITICAL),
    (39, Tier.HIGH),
    (30, Tier.HIGH),
    (29, Tier.MEDIUM),
    (20, Tier.MEDIUM),
    (19, Tier.LOW),
    (0, Tier.LOW),
])
def test_tier_boundaries_are_exact(score, tier):
    assert classify_tier(score) == tier


def test_breakdown_sums_to_score():
    breakdown = score_breakdown(METRICS, WEIGHTS)

    assert [item.factor for item in breakdown] == list(FACTORS)
    assert sum(item.contribution for item in breakdown) == 71
    assert breakdown[0].metric == 5 and breakdown[0].weight == 5 and breakdown[0].contribution == 25


def test_describe_score_lists_only_contributing_factors():
    reason = describe_score(score_breakdown(METRICS, WEIGHTS))

    assert reason.startswith("severity 5x5 (+25)")
    assert "recurrence" not in reason


def test_describe_score_without_contributions():
    zero_weights = WeightSet(**{f: 0 for f in FACTORS})
    assert describe_score(score_breakdown(METRICS, zero_weights)) == "no weighted factors"


@pytest.mark.parametrize("factor", FACTORS)
def test_raising_one_weight_never_lowers_a_score(factor):
    base = WEIGHTS.as_dict()
    if base[factor] == 5:
        base[factor] = 4
    lower = WeightSet(**base)
    higher = WeightSet(**{**base, factor: base[factor] + 1})

    for metrics in (METRICS, PriorityMetrics(**{f: 0 for f in FACTORS})):
        assert calculate_score(metrics, higher) >= calculate_score(metrics, lower)


@pytest.mark.parametrize("factor", FACTORS)
def test_raising_one_weight_keeps_order_when_that_metric_is_equal(factor):
    first = PriorityMetrics(**{**{f: 1 for f in FACTORS}, "severity": 4, factor: 3})
    second = PriorityMetrics(**{**{f: 2 for f in FACTORS}, factor: 3})
    base = {f: 2 for f in FACTORS}

    before = calculate_score(first, WeightSet(**base)) - calculate_score(second, WeightSet(**base))
    raised = WeightSet(**{**base, factor: 5})
    after = calculate_score(first, raised) - calculate_score(second, raised)

    assert before == after
