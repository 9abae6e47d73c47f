import datetime as dt
from enum import Enum
from typing import List, Optional, Dict, Any, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


class Goal(str, Enum):
    LOSE_WEIGHT = "lose_weight"
    GAIN_MUSCLE = "gain_muscle"
    MAINTAIN = "maintain"
    IMPROVE_FITNESS = "improve_fitness"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    VERY_ACTIVE = "very_active"
    EXTREME = "extreme"


Difficulty = Literal["beginner", "intermediate", "advanced"]


class UserProfile(BaseModel):
    """Biometric/goal profile for one request.

    Every field is optional so anonymous and partial profiles can be
    represented; the estimator decides what it can compute from them.
    Goal and activity level are free strings: values outside the
    ``Goal``/``ActivityLevel`` vocabularies are tolerated, not rejected.
    """

    name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    weight_kg: Optional[float] = Field(default=None, gt=0)
    height_cm: Optional[float] = Field(default=None, gt=0)
    goal: Optional[str] = Field(default=None, description="lose_weight | gain_muscle | maintain | improve_fitness")
    activity_level: Optional[str] = Field(default=None, description="sedentary | light | moderate | very_active | extreme")
    dietary_restrictions: List[str] = Field(default_factory=list)


class NutrientItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    calories: float = Field(ge=0)
    protein_g: float = Field(default=0, ge=0, alias="protein")
    carbs_g: float = Field(default=0, ge=0, alias="carbs")
    fat_g: float = Field(default=0, ge=0, alias="fat")


class Meal(BaseModel):
    # Supplied totals are ignored; the total is always derived from the items
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    label: str = Field(alias="name")
    items: List[NutrientItem] = Field(default_factory=list, alias="foods")

    @computed_field(alias="totalCalories")
    @property
    def total_calories(self) -> float:
        return sum(item.calories for item in self.items)


MEAL_SLOTS = ("breakfast", "lunch", "dinner")
SNACK_SLOT = "snacks"


class MealPlan(BaseModel):
    """A day of meals.

    ``meals`` holds exactly ``breakfast``, ``lunch`` and ``dinner`` as
    ``Meal`` objects plus ``snacks`` as a plain list of foods; anything
    else (missing slots, extra slots, a slot of the wrong kind) fails
    validation.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    meals: Dict[str, Union[Meal, List[NutrientItem]]]
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("meals")
    @classmethod
    def _check_slots(cls, meals: Dict[str, Any]) -> Dict[str, Any]:
        expected = set(MEAL_SLOTS) | {SNACK_SLOT}
        if set(meals) != expected:
            raise ValueError(f"meals must have exactly {sorted(expected)}, got {sorted(meals)}")
        for slot in MEAL_SLOTS:
            if not isinstance(meals[slot], Meal):
                raise ValueError(f"'{slot}' must be a meal with a name and foods")
        if not isinstance(meals[SNACK_SLOT], list):
            raise ValueError(f"'{SNACK_SLOT}' must be a list of foods")
        return meals

    @computed_field(alias="totalCalories")
    @property
    def total_calories(self) -> float:
        total = sum(self.meals[slot].total_calories for slot in MEAL_SLOTS)
        return total + sum(item.calories for item in self.meals[SNACK_SLOT])


class WorkoutExercise(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    sets: int = Field(ge=1)
    reps: int = Field(default=0, ge=0)
    duration_seconds: int = Field(default=0, ge=0, alias="duration")
    rest_seconds: int = Field(default=0, ge=0, alias="rest")
    instructions: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _reps_or_duration(self) -> "WorkoutExercise":
        if self.reps == 0 and self.duration_seconds == 0:
            raise ValueError(f"exercise '{self.name}' needs reps or a duration")
        return self


class WorkoutPlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exercises: List[WorkoutExercise] = Field(min_length=1)
    duration_minutes: int = Field(gt=0, alias="duration")
    focus: str
    difficulty: Difficulty
    recommendations: List[str] = Field(default_factory=list)


class RecommendationSet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recommendations: List[str] = Field(min_length=1, max_length=10)
    goal: str
    activity_level: str = Field(alias="activityLevel")
    estimated_calories: int = Field(gt=0, alias="estimatedCalories")


class GeneratedRecommendations(BaseModel):
    """Shape the LLM is asked to return for recommendations."""

    model_config = ConfigDict(populate_by_name=True)

    recommendations: List[str] = Field(min_length=1, max_length=10)
    goal: Optional[str] = None
    activity_level: Optional[str] = Field(default=None, alias="activityLevel")
    estimated_calories: Optional[int] = Field(default=None, alias="estimatedCalories")


class GeneratedExercise(BaseModel):
    name: str = Field(min_length=1, description="Exercise name")
    description: str = Field(default="", description="Brief description of the exercise")
    instructions: List[str] = Field(default_factory=list, description="Step-by-step instructions")


class GeneratedFood(BaseModel):
    name: str = Field(min_length=1, description="Food name")
    description: str = Field(default="", description="Short description of the food")
    calories_per_100g: float = Field(ge=0)
    protein_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    fiber_g: float = Field(default=0, ge=0)


# --- request bodies ---
class MealPlanRequest(BaseModel):
    profile: UserProfile = Field(default_factory=UserProfile)
    date: dt.date
    preferences: Dict[str, Any] = Field(default_factory=dict)
    restrictions: Optional[List[str]] = Field(default=None, description="Defaults to the profile's dietary restrictions")
    target_calories: int = Field(default=2000, gt=0)


class WorkoutPlanRequest(BaseModel):
    profile: UserProfile = Field(default_factory=UserProfile)
    date: dt.date
    focus: str = "full_body"
    duration_minutes: int = Field(default=45, gt=0, le=240)
    equipment: List[str] = Field(default_factory=lambda: ["bodyweight"])
