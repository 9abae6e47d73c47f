from __future__ import annotations

import math
from typing import Dict, Optional

from .models import ActivityLevel, Goal, UserProfile


ACTIVITY_MULTIPLIERS: Dict[str, float] = {
    ActivityLevel.SEDENTARY.value: 1.2,
    ActivityLevel.LIGHT.value: 1.375,
    ActivityLevel.MODERATE.value: 1.55,
    ActivityLevel.VERY_ACTIVE.value: 1.725,
    "very": 1.725,  # older clients send the short form
    ActivityLevel.EXTREME.value: 1.9,
}
DEFAULT_MULTIPLIER = ACTIVITY_MULTIPLIERS[ActivityLevel.SEDENTARY.value]

GOAL_ADJUSTMENTS: Dict[str, int] = {
    Goal.LOSE_WEIGHT.value: -500,
    Goal.GAIN_MUSCLE.value: 300,
    Goal.MAINTAIN.value: 0,
}


def basal_metabolic_rate(weight_kg: float, height_cm: float, age: int) -> float:
    """Mifflin-St Jeor BMR using the +5 constant."""
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + 5


def activity_multiplier(level: Optional[str]) -> float:
    return ACTIVITY_MULTIPLIERS.get((level or "").strip().lower(), DEFAULT_MULTIPLIER)


def goal_adjustment(goal: Optional[str]) -> int:
    return GOAL_ADJUSTMENTS.get((goal or "").strip().lower(), 0)


def estimate_calories(profile: UserProfile) -> Optional[int]:
    """Estimated daily calorie target, or None when the profile lacks
    a positive age, weight and height.

    No plausibility bound is applied to the result.
    """
    age, weight, height = profile.age, profile.weight_kg, profile.height_cm
    if not age or not weight or not height or age <= 0 or weight <= 0 or height <= 0:
        return None

    tdee = basal_metabolic_rate(weight, height, age) * activity_multiplier(profile.activity_level)
    # Half-up rounding, not Python's banker's rounding
    return int(math.floor(tdee + goal_adjustment(profile.goal) + 0.5))
