from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import numpy as np

from .gateway import GenerationError, GenerationGateway, parse_structured
from .models import GeneratedExercise, GeneratedFood
from .store import CatalogStore


logger = logging.getLogger(__name__)

MUSCLE_GROUPS = ["chest", "back", "shoulders", "arms", "legs", "core"]
EQUIPMENT = ["bodyweight", "dumbbells", "barbell", "resistance_bands", "kettlebell"]
DIFFICULTIES = ["beginner", "intermediate", "advanced"]
FOOD_CATEGORIES = ["protein", "grains", "vegetables", "fruits", "dairy", "nuts_seeds"]

EXERCISE_SYSTEM_PROMPT = """Generate exercise info in JSON. Only respond with valid JSON:
{
  "name": "Exercise Name",
  "description": "Brief description",
  "instructions": ["Step 1", "Step 2", "Step 3"]
}"""

FOOD_SYSTEM_PROMPT = """Generate food info in JSON. Only respond with valid JSON:
{
  "name": "Food Name",
  "description": "Brief description",
  "calories_per_100g": number,
  "protein_g": number,
  "carbs_g": number,
  "fat_g": number,
  "fiber_g": number
}"""


@dataclass
class SeedResult:
    success: bool
    name: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CatalogSeeder:
    """Grows the exercise/food tables with one generated record at a time."""

    def __init__(
        self,
        gateway: GenerationGateway,
        store: CatalogStore,
        rng: Optional[np.random.Generator] = None,
        max_tokens: int = 200,
        temperature: float = 0.7,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_tokens = max_tokens
        self.temperature = temperature

    def _pick(self, options: list) -> str:
        return options[int(self.rng.integers(len(options)))]

    def generate_exercise(self) -> SeedResult:
        if not self.gateway.is_configured:
            logger.info("OpenAI not configured, skipping AI exercise generation")
            return SeedResult(success=False, error="OpenAI not configured")

        muscle_group = self._pick(MUSCLE_GROUPS)
        equipment = self._pick(EQUIPMENT)
        difficulty = self._pick(DIFFICULTIES)
        prompt = (
            f"Create a {difficulty} {muscle_group} exercise using {equipment}. "
            "Make it practical and effective."
        )
        try:
            text = self.gateway.complete(
                user_prompt=prompt,
                system_prompt=EXERCISE_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            exercise = parse_structured(text, GeneratedExercise)
        except GenerationError as e:
            logger.error("Error generating AI exercise: %s", e)
            return SeedResult(success=False, error=str(e))

        self.store.insert_exercise({
            "name": exercise.name,
            "description": exercise.description,
            "muscle_group": muscle_group,
            "equipment": equipment,
            "difficulty_level": difficulty,
            "category": "strength",
            "instructions": exercise.instructions,
        })
        logger.info("Generated AI exercise: %s", exercise.name)
        return SeedResult(success=True, name=exercise.name)

    def generate_food(self) -> SeedResult:
        if not self.gateway.is_configured:
            logger.info("OpenAI not configured, skipping AI food generation")
            return SeedResult(success=False, error="OpenAI not configured")

        category = self._pick(FOOD_CATEGORIES)
        prompt = f"Create a {category} food with realistic nutritional values per 100g."
        try:
            text = self.gateway.complete(
                user_prompt=prompt,
                system_prompt=FOOD_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            food = parse_structured(text, GeneratedFood)
        except GenerationError as e:
            logger.error("Error generating AI food: %s", e)
            return SeedResult(success=False, error=str(e))

        row = food.model_dump()
        row["category"] = category
        self.store.insert_food(row)
        logger.info("Generated AI food: %s", food.name)
        return SeedResult(success=True, name=food.name)

    def generate_all(self) -> Dict[str, Any]:
        logger.info("Generating both exercise and food")
        exercise = self.generate_exercise()
        food = self.generate_food()
        return {
            "exercise": exercise.to_dict(),
            "food": food.to_dict(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def populate_if_empty(self) -> Dict[str, Optional[SeedResult]]:
        results: Dict[str, Optional[SeedResult]] = {"exercise": None, "food": None}
        if not self.store.has_exercises():
            logger.info("No exercises found, generating initial AI exercise")
            results["exercise"] = self.generate_exercise()
        if not self.store.has_foods():
            logger.info("No foods found, generating initial AI food")
            results["food"] = self.generate_food()
        return results
