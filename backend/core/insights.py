"""
insights.py — Rule-based progress insight generation.

Reads the per-metric trends and the student's goal and produces three
sections: positives (one sentence per improving metric), negatives (one per
worsening metric) and recommendations (trend- and goal-triggered advice plus
general habits). Every section is padded to at least three entries with
fixed filler sentences and capped at five.

Zero AI dependency — every rule is a deterministic check.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from core.analyzer import MetricTrend
from core.goals import GoalPolarity, classify_goal
from core.metrics import Metric, Trend
from core.narrative import (
    FILLER_NEGATIVE,
    FILLER_POSITIVE,
    FILLER_RECOMMENDATION,
    RECOMMENDATIONS,
    narrate_decline,
    narrate_improvement,
)

MIN_ITEMS = 3
MAX_ITEMS = 5


@dataclass
class Insights:
    positives: List[str] = field(default_factory=list)
    negatives: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "positives": list(self.positives),
            "negatives": list(self.negatives),
            "recommendations": list(self.recommendations),
        }


def _pad_and_cap(items: List[str], filler: str) -> List[str]:
    items = list(items)
    while len(items) < MIN_ITEMS:
        items.append(filler)
    return items[:MAX_ITEMS]


# ── Recommendations ─────────────────────────────────────────────────

def _trend_recommendations(metrics: Mapping[Metric, MetricTrend]) -> List[str]:
    """Advice triggered by specific worsening metrics."""
    recs: List[str] = []
    triggers = (
        (Metric.BODY_FAT, "body_fat_worsening"),
        (Metric.MUSCLE_MASS, "muscle_mass_worsening"),
        (Metric.RESTING_HR, "resting_hr_worsening"),
    )
    for metric, key in triggers:
        trend = metrics.get(metric)
        if trend is not None and trend.trend is Trend.WORSENING:
            recs.extend(RECOMMENDATIONS[key])
    return recs


def _goal_recommendations(goal: str) -> List[str]:
    polarity = classify_goal(goal)
    if polarity is GoalPolarity.LOSS:
        return list(RECOMMENDATIONS["goal_loss"])
    if polarity is GoalPolarity.GAIN:
        return list(RECOMMENDATIONS["goal_gain"])
    return []


def generate_recommendations(metrics: Mapping[Metric, MetricTrend], goal: str) -> List[str]:
    """Uncapped recommendation list: trend rules, then goal, then general."""
    recs = _trend_recommendations(metrics)
    recs.extend(_goal_recommendations(goal))
    recs.extend(RECOMMENDATIONS["general"])
    return recs


# ── Public API ──────────────────────────────────────────────────────

def generate_insights(metrics: Mapping[Metric, MetricTrend], goal: str) -> Insights:
    """
    Build the insight bundle for one analysis.

    Metrics are visited in mapping order, so positives and negatives follow
    the analysis order (weight, BMI, body fat, ...).
    """
    positives: List[str] = []
    negatives: List[str] = []

    for trend in metrics.values():
        if trend.trend is Trend.IMPROVING:
            positives.append(narrate_improvement(trend))
        elif trend.trend is Trend.WORSENING:
            negatives.append(narrate_decline(trend))

    return Insights(
        positives=_pad_and_cap(positives, FILLER_POSITIVE),
        negatives=_pad_and_cap(negatives, FILLER_NEGATIVE),
        recommendations=_pad_and_cap(generate_recommendations(metrics, goal), FILLER_RECOMMENDATION),
    )
