import datetime as dt
import json

import pytest
from langchain_core.language_models import FakeListChatModel
from pydantic import ValidationError

from fitai.config import Settings
from fitai.gateway import GenerationGateway
from fitai.models import Meal, NutrientItem, UserProfile
from fitai.planner import PlanComposer


DATE = dt.date(2024, 5, 6)
PROFILE = UserProfile(name="Ana", age=30, weight_kg=62, height_cm=168, goal="lose_weight", activity_level="light")


class BrokenLLM:
    def invoke(self, messages, **kwargs):
        raise ConnectionError("connection reset")


def unconfigured_composer():
    return PlanComposer(GenerationGateway(Settings(openai_api_key="")))


def composer_with(*responses):
    return PlanComposer(GenerationGateway(Settings(), llm=FakeListChatModel(responses=list(responses))))


def assert_totals_consistent(plan):
    total = 0.0
    for slot in plan.meals.values():
        items = slot.items if isinstance(slot, Meal) else slot
        slot_total = sum(i.calories for i in items)
        if isinstance(slot, Meal):
            assert abs(slot.total_calories - slot_total) <= 1
        total += slot_total
    assert abs(plan.total_calories - total) <= 1


def test_fallback_meal_plan_when_unconfigured():
    plan = unconfigured_composer().compose_meal_plan(PROFILE, DATE, {}, [], 2500)
    assert plan.meals["breakfast"].total_calories == 419
    assert plan.meals["lunch"].total_calories == 436
    assert plan.meals["dinner"].total_calories == 453
    assert [i.name for i in plan.meals["snacks"]] == ["Greek Yogurt", "Apple"]
    assert plan.total_calories == 419 + 436 + 453 + 130 + 95
    assert len(plan.recommendations) == 4
    assert_totals_consistent(plan)


def test_fallback_meal_plan_is_deterministic():
    composer = unconfigured_composer()
    first = composer.compose_meal_plan(PROFILE, DATE, {"cuisine": "thai"}, ["vegan"], 1800)
    second = composer.compose_meal_plan(UserProfile(), DATE, {}, [], 3000)
    assert first.model_dump_json() == second.model_dump_json()


def test_generated_meal_plan_totals_are_recomputed():
    generated = {
        "meals": {
            "breakfast": {"name": "Eggs", "foods": [
                {"name": "Eggs", "calories": 150, "protein": 12, "carbs": 1, "fat": 10},
                {"name": "Toast", "calories": 80, "protein": 3, "carbs": 15, "fat": 1},
            ], "totalCalories": 999},
            "lunch": {"name": "Bowl", "foods": [
                {"name": "Rice", "calories": 200, "protein": 4, "carbs": 44, "fat": 0.5},
            ], "totalCalories": 200},
            "dinner": {"name": "Fish", "foods": [
                {"name": "Cod", "calories": 180, "protein": 40, "carbs": 0, "fat": 1.5},
            ], "totalCalories": 180},
            "snacks": [{"name": "Pear", "calories": 100, "protein": 0.6, "carbs": 27, "fat": 0.2}],
        },
        "totalCalories": 5000,
        "recommendations": ["Eat fish twice a week"],
    }
    plan = composer_with("```json\n" + json.dumps(generated) + "\n```").compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    assert plan.meals["breakfast"].label == "Eggs"
    assert plan.meals["breakfast"].total_calories == 230
    assert plan.total_calories == 710
    assert plan.recommendations == ["Eat fish twice a week"]
    assert_totals_consistent(plan)


def test_malformed_meal_plan_falls_back():
    plan = composer_with("Sure! Here is a great plan for you.").compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    assert plan.total_calories == 1533


def test_meal_plan_with_wrong_shape_falls_back():
    bad = json.dumps({"meals": {"breakfast": {"name": "x", "foods": [{"name": "y", "calories": -5}]}}})
    plan = composer_with(bad).compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    assert plan.total_calories == 1533


def test_meal_plan_without_slots_falls_back():
    plan = composer_with(json.dumps({"meals": {}})).compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    assert plan.total_calories == 1533
    assert set(plan.meals) == {"breakfast", "lunch", "dinner", "snacks"}


def test_meal_plan_with_unknown_slot_falls_back():
    plan = composer_with(json.dumps({"meals": {"brunch": []}})).compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    assert plan.total_calories == 1533
    assert "brunch" not in plan.meals


def test_meal_plan_with_slot_of_wrong_kind_falls_back():
    meal = {"name": "Oats", "foods": [{"name": "Oats", "calories": 300}]}
    generated = {"meals": {"breakfast": [{"name": "Oats", "calories": 300}], "lunch": meal, "dinner": meal, "snacks": []}}
    plan = composer_with(json.dumps(generated)).compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    assert plan.total_calories == 1533

    missing_snacks = {"meals": {"breakfast": meal, "lunch": meal, "dinner": meal}}
    plan = composer_with(json.dumps(missing_snacks)).compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    assert plan.total_calories == 1533


def test_meal_plan_cannot_be_reassigned():
    plan = unconfigured_composer().compose_meal_plan(PROFILE, DATE)
    with pytest.raises(ValidationError):
        plan.recommendations = []
    with pytest.raises(ValidationError):
        plan.meals["lunch"].label = "Feast"
    with pytest.raises(ValidationError):
        plan.meals["snacks"][0].calories = 9000


def test_totals_follow_the_items():
    plan = unconfigured_composer().compose_meal_plan(PROFILE, DATE)
    plan.meals["dinner"].items.append(NutrientItem(name="Bread", calories=120))
    assert plan.meals["dinner"].total_calories == 453 + 120
    assert plan.total_calories == 1533 + 120
    assert plan.model_dump(by_alias=True)["totalCalories"] == 1533 + 120
    assert_totals_consistent(plan)


def test_transport_failure_falls_back():
    composer = PlanComposer(GenerationGateway(Settings(), llm=BrokenLLM()))
    meal = composer.compose_meal_plan(PROFILE, DATE, {}, [], 1800)
    workout = composer.compose_workout_plan(PROFILE, DATE, "upper_body", 30, ["dumbbells"])
    assert meal.total_calories == 1533
    assert [e.name for e in workout.exercises] == ["Squats", "Push-ups", "Plank"]


def test_fallback_workout_plan_ignores_request():
    plan = unconfigured_composer().compose_workout_plan(PROFILE, DATE, "cardio", 90, ["barbell"])
    assert [e.name for e in plan.exercises] == ["Squats", "Push-ups", "Plank"]
    assert plan.duration_minutes == 45
    assert plan.difficulty == "intermediate"
    assert plan.focus == "full_body"
    plank = plan.exercises[2]
    assert plank.duration_seconds == 30
    assert plank.rest_seconds == 45


def test_generated_workout_plan_is_parsed():
    generated = {
        "exercises": [
            {"name": "Jumping Jacks", "sets": 2, "reps": 0, "duration": 60, "rest": 30, "instructions": ["Jump"]},
            {"name": "Lunges", "sets": 3, "reps": 10, "duration": 0, "rest": 60, "instructions": ["Step", "Lower"]},
        ],
        "duration": 30,
        "focus": "lower_body",
        "difficulty": "beginner",
        "recommendations": ["Hydrate"],
    }
    plan = composer_with(json.dumps(generated)).compose_workout_plan(PROFILE, DATE, "lower_body", 30, ["bodyweight"])
    assert plan.focus == "lower_body"
    assert plan.duration_minutes == 30
    assert plan.exercises[0].duration_seconds == 60
    assert plan.exercises[1].reps == 10


def test_generated_workout_without_reps_or_duration_falls_back():
    generated = {
        "exercises": [{"name": "Mystery", "sets": 3, "reps": 0, "duration": 0, "rest": 30, "instructions": []}],
        "duration": 20,
        "focus": "core",
        "difficulty": "beginner",
        "recommendations": [],
    }
    plan = composer_with(json.dumps(generated)).compose_workout_plan(PROFILE, DATE, "core", 20, [])
    assert plan.duration_minutes == 45
    assert len(plan.exercises) == 3


def test_generated_workout_without_exercises_falls_back():
    generated = {"exercises": [], "duration": 30, "focus": "core", "difficulty": "beginner", "recommendations": []}
    plan = composer_with(json.dumps(generated)).compose_workout_plan(PROFILE, DATE, "core", 30, [])
    assert plan.duration_minutes == 45
    assert [e.name for e in plan.exercises] == ["Squats", "Push-ups", "Plank"]


def test_prompts_embed_request_details():
    composer = unconfigured_composer()
    meal_prompt = composer._meal_prompt(PROFILE, DATE, {"cuisine": "thai"}, ["vegan", "nut_free"], 1800)
    assert "Mon May 06 2024" in meal_prompt
    assert "Target calories: 1800" in meal_prompt
    assert "vegan, nut_free" in meal_prompt
    assert "cuisine: thai" in meal_prompt
    workout_prompt = composer._workout_prompt(PROFILE, DATE, "upper_body", 30, ["dumbbells"])
    assert "Focus: upper_body" in workout_prompt
    assert "Duration: 30 minutes" in workout_prompt
    assert "dumbbells" in workout_prompt
