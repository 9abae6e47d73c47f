import os
import sys
import json
import datetime as dt
import requests
import streamlit as st
from typing import Any, Dict
from dotenv import load_dotenv
from pathlib import Path

load_dotenv()

# If BACKEND_URL is not set, run in local mode (call Python modules directly)
BACKEND_URL = os.getenv("BACKEND_URL", "").strip()
LOCAL_MODE = BACKEND_URL == ""

if LOCAL_MODE:
    # Ensure project root is on sys.path when running on Streamlit Cloud
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))
    # Load secrets into environment for SDKs that read os.environ
    try:
        for key in ("OPENAI_API_KEY", "OPENAI_MODEL", "AI_TIMEOUT_SECONDS"):
            if key in st.secrets:
                os.environ[key] = str(st.secrets[key]).strip()
    except Exception:
        pass
    # Lazy import to avoid errors if modules are missing during remote mode
    from fitai.config import Settings
    from fitai.gateway import GenerationGateway
    from fitai.models import UserProfile
    from fitai.planner import PlanComposer
    from fitai.recommendations import RecommendationEngine
    if "composer" not in st.session_state:
        gateway = GenerationGateway(Settings.from_env())
        st.session_state.composer = PlanComposer(gateway)
        st.session_state.engine = RecommendationEngine(gateway)


def call_backend(method: str, path: str, **kwargs) -> Dict[str, Any]:
    resp = requests.request(method, f"{BACKEND_URL}{path}", timeout=60, **kwargs)
    resp.raise_for_status()
    return resp.json()


st.set_page_config(page_title="FitAI", page_icon="💪", layout="wide")

st.title("💪 FitAI")
st.caption("Daily meal and workout plans tailored to your profile.")

with st.sidebar:
    st.header("Configuration")
    mode_label = "Local (in-app)" if LOCAL_MODE else f"Remote: {BACKEND_URL}"
    st.write(f"Mode: {mode_label}")
    if st.button("Health Check"):
        if LOCAL_MODE:
            st.success("Local mode OK: running planner in-process")
        else:
            try:
                st.success(f"API OK: {call_backend('GET', '/health')}")
            except requests.RequestException as e:
                st.error(f"API not reachable: {e}")

st.subheader("Tell us about you")
col1, col2, col3 = st.columns(3)
with col1:
    age = st.number_input("Age", min_value=13, max_value=100, value=25)
    weight = st.number_input("Weight (kg)", min_value=30.0, max_value=300.0, value=70.0, step=0.5)
with col2:
    height = st.number_input("Height (cm)", min_value=120.0, max_value=230.0, value=175.0, step=0.5)
    goal = st.selectbox("Primary Goal", ["lose_weight", "gain_muscle", "maintain", "improve_fitness"], index=2)
with col3:
    activity = st.selectbox("Activity Level", ["sedentary", "light", "moderate", "very_active", "extreme"], index=2)
    plan_date = st.date_input("Plan date", value=dt.date.today())

restrictions_text = st.text_input("Dietary restrictions (optional, comma-separated)", placeholder="e.g., vegetarian, gluten_free")
restrictions = [s.strip() for s in restrictions_text.split(",") if s.strip()]

profile_payload = {
    "age": int(age),
    "weight_kg": float(weight),
    "height_cm": float(height),
    "goal": goal,
    "activity_level": activity,
    "dietary_restrictions": restrictions,
}

tab_meal, tab_workout, tab_tips = st.tabs(["Meal plan", "Workout plan", "Recommendations"])

with tab_meal:
    target = st.number_input("Target calories", min_value=800, max_value=6000, value=2000, step=50)
    if st.button("Generate Meal Plan", type="primary"):
        try:
            with st.spinner("Generating your meal plan..."):
                if LOCAL_MODE:
                    plan = st.session_state.composer.compose_meal_plan(
                        UserProfile(**profile_payload), plan_date, restrictions=restrictions, target_calories=int(target)
                    )
                    data = plan.model_dump(by_alias=True)
                else:
                    data = call_backend("POST", "/ai/meal-plan", json={
                        "profile": profile_payload,
                        "date": plan_date.isoformat(),
                        "restrictions": restrictions,
                        "target_calories": int(target),
                    })
        except requests.HTTPError as e:
            st.error(f"Server error: {e.response.text}")
            st.stop()
        except requests.RequestException as e:
            st.error(f"Failed to generate meal plan: {e}")
            st.stop()

        st.success(f"Meal plan ready: {data.get('totalCalories', 0):.0f} kcal")
        for slot, meal in data.get("meals", {}).items():
            with st.expander(slot.title()):
                foods = meal.get("foods", []) if isinstance(meal, dict) else meal
                if isinstance(meal, dict):
                    st.markdown(f"**{meal.get('name')}** · {meal.get('totalCalories', 0):.0f} kcal")
                for food in foods:
                    st.write(
                        f"- {food.get('name')}: {food.get('calories')} kcal "
                        f"(P {food.get('protein')}g · C {food.get('carbs')}g · F {food.get('fat')}g)"
                    )
        for tip in data.get("recommendations", []):
            st.caption(f"• {tip}")
        st.download_button("Download Meal Plan (JSON)", data=json.dumps(data, indent=2),
                           file_name="meal_plan.json", mime="application/json")

with tab_workout:
    focus = st.selectbox("Focus", ["full_body", "upper_body", "lower_body", "core", "cardio"], index=0)
    duration = st.slider("Duration (min)", min_value=15, max_value=120, value=45, step=5)
    default_eq = ["bodyweight", "dumbbells", "barbell", "resistance_bands", "kettlebell"]
    equipment = st.multiselect("Equipment available", default_eq, default=["bodyweight"])
    if st.button("Generate Workout Plan", type="primary"):
        try:
            with st.spinner("Generating your workout..."):
                if LOCAL_MODE:
                    plan = st.session_state.composer.compose_workout_plan(
                        UserProfile(**profile_payload), plan_date, focus=focus,
                        duration_minutes=int(duration), equipment=equipment,
                    )
                    data = plan.model_dump(by_alias=True)
                else:
                    data = call_backend("POST", "/ai/workout-plan", json={
                        "profile": profile_payload,
                        "date": plan_date.isoformat(),
                        "focus": focus,
                        "duration_minutes": int(duration),
                        "equipment": equipment,
                    })
        except requests.HTTPError as e:
            st.error(f"Server error: {e.response.text}")
            st.stop()
        except requests.RequestException as e:
            st.error(f"Failed to generate workout plan: {e}")
            st.stop()

        st.success(f"{data.get('focus')} · {data.get('duration')} min · {data.get('difficulty')}")
        for ex in data.get("exercises", []):
            with st.expander(ex.get("name")):
                work = f"{ex.get('reps')} reps" if ex.get("reps") else f"{ex.get('duration')} s"
                st.markdown(f"**{ex.get('sets')} × {work}**, rest {ex.get('rest')} s")
                for step in ex.get("instructions", []):
                    st.write(f"- {step}")
        for tip in data.get("recommendations", []):
            st.caption(f"• {tip}")

with tab_tips:
    if st.button("Get Recommendations"):
        try:
            with st.spinner("Thinking..."):
                if LOCAL_MODE:
                    rec = st.session_state.engine.recommend(UserProfile(**profile_payload))
                    data = rec.model_dump(by_alias=True)
                else:
                    params = {k: v for k, v in profile_payload.items() if k != "dietary_restrictions"}
                    data = call_backend("GET", "/ai/recommendations", params=params)["recommendations"]
        except requests.RequestException as e:
            st.error(f"Failed to get recommendations: {e}")
            st.stop()
        st.metric("Estimated daily calories", data.get("estimatedCalories"))
        for tip in data.get("recommendations", []):
            st.write(f"- {tip}")

st.markdown("---")
st.caption("Tip: without an OpenAI key the app serves a fixed sample plan.")
