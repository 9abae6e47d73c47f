from __future__ import annotations

import logging

from . import catalog
from .calories import estimate_calories
from .gateway import GenerationError, GenerationGateway, parse_structured
from .models import GeneratedRecommendations, RecommendationSet, UserProfile


logger = logging.getLogger(__name__)

DEFAULT_GOAL = "fitness"
DEFAULT_ACTIVITY_LEVEL = "moderate"
DEFAULT_CALORIES = 2000

RECOMMENDATIONS_SYSTEM_PROMPT = """You are an expert in fitness and nutrition. Generate personalized recommendations.
Respond ONLY with a valid JSON that contains:
{
  "recommendations": ["Recommendation 1", "Recommendation 2", "Recommendation 3", "Recommendation 4", "Recommendation 5"],
  "goal": "user_goal",
  "activityLevel": "activity_level",
  "estimatedCalories": X
}"""


def _or_unspecified(value) -> str:
    return "Not specified" if value is None else str(value)


class RecommendationEngine:
    def __init__(self, gateway: GenerationGateway) -> None:
        self.gateway = gateway

    def recommend(self, profile: UserProfile) -> RecommendationSet:
        """Always returns a populated set; generation problems fall back silently."""
        if self.gateway.is_configured:
            try:
                text = self.gateway.complete(
                    user_prompt=self._prompt(profile), system_prompt=RECOMMENDATIONS_SYSTEM_PROMPT
                )
                generated = parse_structured(text, GeneratedRecommendations)
                return self._from_generated(profile, generated)
            except GenerationError as e:
                logger.warning("Recommendation generation failed, using fallback: %s", e)
        return self.fallback(profile)

    def fallback(self, profile: UserProfile) -> RecommendationSet:
        return RecommendationSet(
            recommendations=catalog.wellness_recommendations(),
            goal=profile.goal or DEFAULT_GOAL,
            activity_level=profile.activity_level or DEFAULT_ACTIVITY_LEVEL,
            estimated_calories=self._local_estimate(profile),
        )

    def _local_estimate(self, profile: UserProfile) -> int:
        estimate = estimate_calories(profile)
        if estimate is None or estimate <= 0:
            return DEFAULT_CALORIES
        return estimate

    def _from_generated(self, profile: UserProfile, generated: GeneratedRecommendations) -> RecommendationSet:
        calories = generated.estimated_calories
        if calories is None or calories <= 0:
            calories = self._local_estimate(profile)
        return RecommendationSet(
            recommendations=generated.recommendations,
            goal=generated.goal or profile.goal or DEFAULT_GOAL,
            activity_level=generated.activity_level or profile.activity_level or DEFAULT_ACTIVITY_LEVEL,
            estimated_calories=calories,
        )

    def _prompt(self, profile: UserProfile) -> str:
        return (
            "Generate fitness recommendations for a user with these characteristics:\n"
            f"- Age: {_or_unspecified(profile.age)}\n"
            f"- Weight: {_or_unspecified(profile.weight_kg)} kg\n"
            f"- Height: {_or_unspecified(profile.height_cm)} cm\n"
            f"- Goal: {profile.goal or DEFAULT_GOAL}\n"
            f"- Activity level: {profile.activity_level or DEFAULT_ACTIVITY_LEVEL}\n\n"
            "Generate 5 specific and practical recommendations that are relevant for this profile."
        )
