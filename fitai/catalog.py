"""Hand-authored fallback content.

Everything here is plain immutable data; builders return fresh model
instances on every call so callers never share state.
"""
from __future__ import annotations

from typing import List, Tuple

from .models import Meal, MealPlan, NutrientItem, WorkoutExercise, WorkoutPlan


# (name, calories, protein_g, carbs_g, fat_g)
FoodRow = Tuple[str, float, float, float, float]

BREAKFAST: Tuple[str, Tuple[FoodRow, ...]] = ("Balanced Breakfast", (
    ("Oatmeal", 150, 6, 27, 3),
    ("Banana", 105, 1, 27, 0),
    ("Almonds", 164, 6, 6, 14),
))
LUNCH: Tuple[str, Tuple[FoodRow, ...]] = ("Protein Lunch", (
    ("Chicken Breast", 165, 31, 0, 3.6),
    ("Brown Rice", 216, 4.5, 45, 1.8),
    ("Broccoli", 55, 3.7, 11, 0.6),
))
DINNER: Tuple[str, Tuple[FoodRow, ...]] = ("Light Dinner", (
    ("Salmon", 208, 25, 0, 12),
    ("Quinoa", 222, 8, 39, 3.6),
    ("Spinach", 23, 2.9, 3.6, 0.4),
))
SNACKS: Tuple[FoodRow, ...] = (
    ("Greek Yogurt", 130, 20, 9, 0.5),
    ("Apple", 95, 0.5, 25, 0.3),
)

MEAL_RECOMMENDATIONS: Tuple[str, ...] = (
    "Drink at least 8 glasses of water per day",
    "Eat slowly and chew well",
    "Include protein in every meal",
    "Prioritize whole foods over processed ones",
)

# (name, sets, reps, duration_seconds, rest_seconds, instructions)
EXERCISES: Tuple[Tuple[str, int, int, int, int, Tuple[str, ...]], ...] = (
    ("Squats", 3, 12, 0, 60, (
        "Stand with feet shoulder-width apart",
        "Lower down as if sitting back",
        "Keep chest up and knees aligned",
        "Return to starting position",
    )),
    ("Push-ups", 3, 10, 0, 60, (
        "Get into plank position",
        "Lower body until chest touches the ground",
        "Push up to starting position",
        "Keep body straight throughout the movement",
    )),
    ("Plank", 3, 1, 30, 45, (
        "Get into plank position",
        "Keep body straight from head to toes",
        "Hold position for 30 seconds",
        "Breathe normally during the exercise",
    )),
)
WORKOUT_DURATION_MINUTES = 45
WORKOUT_FOCUS = "full_body"
WORKOUT_DIFFICULTY = "intermediate"

WORKOUT_RECOMMENDATIONS: Tuple[str, ...] = (
    "Warm up for 5-10 minutes before workout",
    "Maintain proper form in all exercises",
    "Rest between sets as needed",
    "Stretch after the workout",
)

WELLNESS_RECOMMENDATIONS: Tuple[str, ...] = (
    "Drink at least 8 glasses of water per day",
    "Eat 5-7 servings of fruits and vegetables daily",
    "Maintain a consistent sleep schedule",
    "Engage in regular physical activity",
    "Eat a balanced diet",
)


def _items(rows: Tuple[FoodRow, ...]) -> List[NutrientItem]:
    return [
        NutrientItem(name=name, calories=kcal, protein_g=protein, carbs_g=carbs, fat_g=fat)
        for name, kcal, protein, carbs, fat in rows
    ]


def fallback_meal_plan() -> MealPlan:
    meals = {
        "breakfast": Meal(label=BREAKFAST[0], items=_items(BREAKFAST[1])),
        "lunch": Meal(label=LUNCH[0], items=_items(LUNCH[1])),
        "dinner": Meal(label=DINNER[0], items=_items(DINNER[1])),
        "snacks": _items(SNACKS),
    }
    return MealPlan(meals=meals, recommendations=list(MEAL_RECOMMENDATIONS))


def fallback_workout_plan() -> WorkoutPlan:
    exercises = [
        WorkoutExercise(
            name=name,
            sets=sets,
            reps=reps,
            duration_seconds=duration,
            rest_seconds=rest,
            instructions=list(steps),
        )
        for name, sets, reps, duration, rest, steps in EXERCISES
    ]
    return WorkoutPlan(
        exercises=exercises,
        duration_minutes=WORKOUT_DURATION_MINUTES,
        focus=WORKOUT_FOCUS,
        difficulty=WORKOUT_DIFFICULTY,
        recommendations=list(WORKOUT_RECOMMENDATIONS),
    )


def wellness_recommendations() -> List[str]:
    return list(WELLNESS_RECOMMENDATIONS)
