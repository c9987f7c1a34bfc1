"""
Priority Scoring Service - composite score and tier for one request.

DESIGN PRINCIPLES:
- Score is SYSTEM-DERIVED from metrics and the current weights, NOT user-editable
- Score is a plain integer sum: no rounding, no clamping
- Score range: 0-150 (six factors, metric and weight both capped at 5)
- Tier boundaries are FIXED so cross-period reports stay comparable
"""

from typing import List

from app.models.priority import (
    FACTORS,
    FactorContribution,
    PriorityMetrics,
    Tier,
    WeightSet,
)

# Lower bound (inclusive) of each tier, highest first
TIER_THRESHOLDS = (
    (40, Tier.CRITICAL),
    (30, Tier.HIGH),
    (20, Tier.MEDIUM),
)


def calculate_score(metrics: PriorityMetrics, weights: WeightSet) -> int:
    """score = sum(metric_f * weight_f) over the six factors."""
    return sum(getattr(metrics, factor) * getattr(weights, factor) for factor in FACTORS)


def classify_tier(score: int) -> Tier:
    """
    Map a composite score to its tier.

    critical: score >= 40
    high:     30 <= score < 40
    medium:   20 <= score < 30
    low:      score < 20
    """
    for lower_bound, tier in TIER_THRESHOLDS:
        if score >= lower_bound:
            return tier
    return Tier.LOW


def score_breakdown(metrics: PriorityMetrics, weights: WeightSet) -> List[FactorContribution]:
    """Per-factor contributions in display order; they sum to calculate_score()."""
    breakdown = []
    for factor in FACTORS:
        metric = getattr(metrics, factor)
        weight = getattr(weights, factor)
        breakdown.append(FactorContribution(
            factor=factor,
            metric=metric,
            weight=weight,
            contribution=metric * weight,
        ))
    return breakdown


def describe_score(breakdown: List[FactorContribution]) -> str:
    """Explainable one-line reason, e.g. 'severity 5x3 (+15) | urgency 5x2 (+10)'."""
    reasons = [
        f"{item.factor} {item.metric}x{item.weight} (+{item.contribution})"
        for item in breakdown
        if item.contribution > 0
    ]
    return " | ".join(reasons) if reasons else "no weighted factors"
