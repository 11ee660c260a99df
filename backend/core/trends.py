"""
trends.py — Qualitative trend classification.

Turns a delta (current minus previous) into improving / worsening / stable /
unknown according to the metric's policy direction. The cascade and its
thresholds are fixed policy:

- lower/higher-is-better metrics: |delta| < 0.01 is stable, otherwise the
  sign decides.
- weight: |delta| < 0.5 is stable; a loss or gain goal decides the sign;
  without a recognised goal only a swing above 3 kg is flagged (worsening).
- BMI: see ``classify_bmi_trend``.
"""

from typing import Optional, Union

from core.goals import GoalPolarity, classify_goal
from core.metrics import (
    BMI_IN_RANGE_STABLE_DELTA,
    BMI_NORMAL_MAX,
    BMI_NORMAL_MIN,
    BMI_STABLE_DELTA,
    STABLE_DELTA,
    WEIGHT_ATTENTION_DELTA,
    WEIGHT_STABLE_DELTA,
    Direction,
    Metric,
    Trend,
    policy_for,
)


def _weight_trend(delta: float, goal: Optional[str]) -> Trend:
    if abs(delta) < WEIGHT_STABLE_DELTA:
        return Trend.STABLE

    polarity = classify_goal(goal)
    if polarity is GoalPolarity.LOSS:
        return Trend.IMPROVING if delta < 0 else Trend.WORSENING
    if polarity is GoalPolarity.GAIN:
        return Trend.IMPROVING if delta > 0 else Trend.WORSENING

    # Large unexplained swings need attention.
    if abs(delta) > WEIGHT_ATTENTION_DELTA:
        return Trend.WORSENING
    return Trend.STABLE


def classify_bmi_trend(current_bmi: float, delta: float) -> Trend:
    """
    BMI trend relative to the normal range [18.5, 24.9].

    Outside the range, moving toward it is improving and moving away is
    worsening. Inside the range small moves are stable and any move of 0.5 or
    more is worsening, including one that re-centres the value.
    """
    if abs(delta) <= BMI_STABLE_DELTA:
        return Trend.STABLE

    if current_bmi < BMI_NORMAL_MIN:
        return Trend.IMPROVING if delta > 0 else Trend.WORSENING
    if current_bmi > BMI_NORMAL_MAX:
        return Trend.IMPROVING if delta < 0 else Trend.WORSENING

    return Trend.STABLE if abs(delta) < BMI_IN_RANGE_STABLE_DELTA else Trend.WORSENING


def classify_trend(
    metric: Union[Metric, str],
    delta: float,
    goal: Optional[str] = None,
    current_value: Optional[float] = None,
) -> Trend:
    """
    Classify one metric's delta.

    ``goal`` only matters for weight; ``current_value`` only for BMI, which
    yields UNKNOWN without it. Names outside the tracked set are UNKNOWN.
    """
    policy = policy_for(metric)
    if policy is None:
        return Trend.UNKNOWN

    if policy.direction is Direction.DERIVED:
        if current_value is None:
            return Trend.UNKNOWN
        return classify_bmi_trend(current_value, delta)

    if abs(delta) < STABLE_DELTA:
        return Trend.STABLE

    if policy.direction is Direction.LOWER_IS_BETTER:
        return Trend.IMPROVING if delta < 0 else Trend.WORSENING
    if policy.direction is Direction.HIGHER_IS_BETTER:
        return Trend.IMPROVING if delta > 0 else Trend.WORSENING
    if policy.direction is Direction.GOAL_AWARE:
        return _weight_trend(delta, goal)

    return Trend.UNKNOWN
