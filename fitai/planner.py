from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, Iterable, Optional

from . import catalog
from .gateway import GenerationError, GenerationGateway, parse_structured
from .models import MealPlan, UserProfile, WorkoutPlan


logger = logging.getLogger(__name__)


MEAL_PLAN_SYSTEM_PROMPT = """You are an expert nutritionist. Generate healthy and personalized meal plans.
Respond ONLY with a valid JSON that contains:
{
  "meals": {
    "breakfast": {"name": "Name", "foods": [{"name": "Food", "calories": X, "protein": X, "carbs": X, "fat": X}], "totalCalories": X},
    "lunch": {...},
    "dinner": {...},
    "snacks": [{"name": "Food", "calories": X, "protein": X, "carbs": X, "fat": X}]
  },
  "totalCalories": X,
  "recommendations": ["Recommendation 1", "Recommendation 2", "Recommendation 3"]
}"""

WORKOUT_PLAN_SYSTEM_PROMPT = """You are an expert personal trainer. Generate personalized workout plans.
Respond ONLY with a valid JSON that contains:
{
  "exercises": [
    {
      "name": "Exercise name",
      "sets": X,
      "reps": X,
      "duration": X,
      "rest": X,
      "instructions": ["Instruction 1", "Instruction 2"]
    }
  ],
  "duration": X,
  "focus": "workout_type",
  "difficulty": "beginner/intermediate/advanced",
  "recommendations": ["Recommendation 1", "Recommendation 2", "Recommendation 3"]
}
"duration" of an exercise is in seconds (0 for rep-based exercises), "rest" is in seconds,
the top-level "duration" is the whole session in minutes."""


class PlanComposer:
    """Builds meal and workout plans, generated when possible and static otherwise.

    Neither entry point raises because of the generation path: unconfigured,
    failing or malformed generation all degrade to the static catalog.
    """

    def __init__(self, gateway: GenerationGateway) -> None:
        self.gateway = gateway

    def compose_meal_plan(
        self,
        profile: UserProfile,
        date: dt.date,
        preferences: Optional[Dict[str, Any]] = None,
        restrictions: Optional[Iterable[str]] = None,
        target_calories: int = 2000,
    ) -> MealPlan:
        if self.gateway.is_configured:
            prompt = self._meal_prompt(profile, date, preferences or {}, list(restrictions or []), target_calories)
            try:
                text = self.gateway.complete(user_prompt=prompt, system_prompt=MEAL_PLAN_SYSTEM_PROMPT)
                return parse_structured(text, MealPlan)
            except GenerationError as e:
                logger.warning("Meal plan generation failed, using fallback: %s", e)
        return catalog.fallback_meal_plan()

    def compose_workout_plan(
        self,
        profile: UserProfile,
        date: dt.date,
        focus: str = catalog.WORKOUT_FOCUS,
        duration_minutes: int = catalog.WORKOUT_DURATION_MINUTES,
        equipment: Optional[Iterable[str]] = None,
    ) -> WorkoutPlan:
        if self.gateway.is_configured:
            prompt = self._workout_prompt(profile, date, focus, duration_minutes, list(equipment or []))
            try:
                text = self.gateway.complete(user_prompt=prompt, system_prompt=WORKOUT_PLAN_SYSTEM_PROMPT)
                return parse_structured(text, WorkoutPlan)
            except GenerationError as e:
                logger.warning("Workout plan generation failed, using fallback: %s", e)
        return catalog.fallback_workout_plan()

    # --- internals ---
    def _describe_user(self, profile: UserProfile) -> str:
        return (
            f"{profile.name or 'User'}, {profile.age if profile.age is not None else 'unknown'} years old, "
            f"{profile.weight_kg if profile.weight_kg is not None else 'unknown'}kg, "
            f"{profile.height_cm if profile.height_cm is not None else 'unknown'}cm"
        )

    def _meal_prompt(
        self,
        profile: UserProfile,
        date: dt.date,
        preferences: Dict[str, Any],
        restrictions: list,
        target_calories: int,
    ) -> str:
        prefs = ", ".join(f"{k}: {v}" for k, v in preferences.items()) or "None"
        return (
            f"Generate a meal plan for {date.strftime('%a %b %d %Y')} with these characteristics:\n"
            f"- User: {self._describe_user(profile)}\n"
            f"- Goal: {profile.goal or 'maintain'}\n"
            f"- Activity level: {profile.activity_level or 'moderate'}\n"
            f"- Target calories: {target_calories}\n"
            f"- Restrictions: {', '.join(restrictions) or 'None'}\n"
            f"- Preferences: {prefs}\n\n"
            f"Make sure the total calories are close to {target_calories} and that it's healthy and varied."
        )

    def _workout_prompt(
        self,
        profile: UserProfile,
        date: dt.date,
        focus: str,
        duration_minutes: int,
        equipment: list,
    ) -> str:
        return (
            f"Generate a workout plan for {date.strftime('%a %b %d %Y')} with these characteristics:\n"
            f"- User: {self._describe_user(profile)}\n"
            f"- Goal: {profile.goal or 'maintain'}\n"
            f"- Activity level: {profile.activity_level or 'moderate'}\n"
            f"- Focus: {focus}\n"
            f"- Duration: {duration_minutes} minutes\n"
            f"- Available equipment: {', '.join(equipment) or 'bodyweight'}\n\n"
            "Make sure it's appropriate for the user's level and includes warm-up and cool-down."
        )
