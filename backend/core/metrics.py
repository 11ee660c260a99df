"""
metrics.py — Tracked metrics and their trend policies.

Each tracked metric carries a policy record: which assessment field feeds it,
which direction counts as progress, and how it is labelled in charts and
reports. Trend classification dispatches on ``Direction``, never on the
metric's name.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union


class Trend(str, Enum):
    IMPROVING = "improving"
    WORSENING = "worsening"
    STABLE = "stable"
    UNKNOWN = "unknown"


class Direction(str, Enum):
    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"
    GOAL_AWARE = "goal_aware"
    DERIVED = "derived"


class Metric(str, Enum):
    WEIGHT = "weight"
    BMI = "bmi"
    BODY_FAT = "body_fat"
    MUSCLE_MASS = "muscle_mass"
    WAIST_CIRC = "waist_circ"
    HIP_CIRC = "hip_circ"
    RESTING_HR = "resting_hr"


@dataclass(frozen=True)
class MetricPolicy:
    metric: Metric
    direction: Direction
    label: str
    unit: str
    field: Optional[str] = None  # assessment attribute; None for derived metrics


# ── Policy constants ────────────────────────────────────────────────

STABLE_DELTA = 0.01
WEIGHT_STABLE_DELTA = 0.5
WEIGHT_ATTENTION_DELTA = 3.0
BMI_STABLE_DELTA = 0.1
BMI_IN_RANGE_STABLE_DELTA = 0.5
BMI_NORMAL_MIN = 18.5
BMI_NORMAL_MAX = 24.9


METRIC_POLICIES: Dict[Metric, MetricPolicy] = {
    Metric.WEIGHT: MetricPolicy(Metric.WEIGHT, Direction.GOAL_AWARE, "Peso", "kg", "current_weight"),
    Metric.BMI: MetricPolicy(Metric.BMI, Direction.DERIVED, "IMC", "pts"),
    Metric.BODY_FAT: MetricPolicy(
        Metric.BODY_FAT, Direction.LOWER_IS_BETTER, "Gordura corporal", "%", "body_fat_percentage"
    ),
    Metric.MUSCLE_MASS: MetricPolicy(
        Metric.MUSCLE_MASS, Direction.HIGHER_IS_BETTER, "Massa muscular", "%", "lean_mass"
    ),
    Metric.WAIST_CIRC: MetricPolicy(
        Metric.WAIST_CIRC, Direction.LOWER_IS_BETTER, "Circunferência da cintura", "cm", "waist_circ"
    ),
    Metric.HIP_CIRC: MetricPolicy(
        Metric.HIP_CIRC, Direction.LOWER_IS_BETTER, "Circunferência do quadril", "cm", "hip_circ"
    ),
    Metric.RESTING_HR: MetricPolicy(
        Metric.RESTING_HR, Direction.LOWER_IS_BETTER, "FC de repouso", "bpm", "resting_heart_rate"
    ),
}

# Analysis order; also the order insights are emitted in.
TRACKED_METRICS = tuple(METRIC_POLICIES)

# camelCase names used by the trainer app.
METRIC_ALIASES: Dict[str, Metric] = {
    "bodyFat": Metric.BODY_FAT,
    "muscleMass": Metric.MUSCLE_MASS,
    "waistCirc": Metric.WAIST_CIRC,
    "hipCirc": Metric.HIP_CIRC,
    "restingHR": Metric.RESTING_HR,
}


def policy_for(metric: Union[Metric, str]) -> Optional[MetricPolicy]:
    """Look up a policy by enum member, value or alias; None for untracked names."""
    if isinstance(metric, Metric):
        return METRIC_POLICIES[metric]
    if metric in METRIC_ALIASES:
        return METRIC_POLICIES[METRIC_ALIASES[metric]]
    try:
        return METRIC_POLICIES[Metric(metric)]
    except ValueError:
        return None
