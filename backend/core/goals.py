"""
goals.py — Goal polarity from a student's free-text goal.

Students describe their objective in free Portuguese text ("quero emagrecer",
"ganhar massa muscular"). The only thing the analytics need from it is the
direction the student wants body weight to move. Matching is plain substring
search on the lower-cased goal, in this order:

    LOSS   any of "emagre", "perder peso", "diminuir peso",
           or both "peso" and "perder"
    GAIN   any of "ganhar peso", "aumentar peso",
           or "massa" together with "ganhar" or "aumentar"
    NONE   anything else

Loss is checked first, so a goal mentioning both wins as LOSS.
"""

from enum import Enum
from typing import Optional, Tuple

DEFAULT_GOAL = "Melhora geral da saúde"


class GoalPolarity(str, Enum):
    LOSS = "loss"
    GAIN = "gain"
    NONE = "none"


# Each entry is a group of substrings that must all be present.
LOSS_KEYWORDS: Tuple[Tuple[str, ...], ...] = (
    ("emagre",),
    ("perder peso",),
    ("diminuir peso",),
    ("peso", "perder"),
)

GAIN_KEYWORDS: Tuple[Tuple[str, ...], ...] = (
    ("ganhar peso",),
    ("aumentar peso",),
    ("massa", "ganhar"),
    ("massa", "aumentar"),
)


def _matches(text: str, table: Tuple[Tuple[str, ...], ...]) -> bool:
    return any(all(word in text for word in group) for group in table)


def classify_goal(goal: Optional[str]) -> GoalPolarity:
    """Map a free-text goal onto LOSS / GAIN / NONE."""
    text = (goal or "").lower()
    if _matches(text, LOSS_KEYWORDS):
        return GoalPolarity.LOSS
    if _matches(text, GAIN_KEYWORDS):
        return GoalPolarity.GAIN
    return GoalPolarity.NONE
