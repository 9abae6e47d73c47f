import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .calories import estimate_calories
from .config import Settings
from .gateway import GenerationGateway
from .models import MealPlan, MealPlanRequest, RecommendationSet, UserProfile, WorkoutPlan, WorkoutPlanRequest
from .planner import PlanComposer
from .recommendations import RecommendationEngine
from .scheduler import SeedScheduler
from .seeding import CatalogSeeder
from .store import CatalogStore


logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, gateway: Optional[GenerationGateway] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    gateway = gateway or GenerationGateway(settings)
    store = CatalogStore(settings.data_dir)
    seeder = CatalogSeeder(gateway, store, max_tokens=settings.seed_max_tokens, temperature=settings.temperature)
    seed_scheduler = SeedScheduler(seeder, settings.exercise_seed_cron, settings.food_seed_cron)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.enable_seed_scheduler:
            seed_scheduler.start()
        yield
        seed_scheduler.shutdown()

    app = FastAPI(title="FitAI API", version="0.1.0", lifespan=lifespan)

    # CORS (allow Streamlit on localhost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.gateway = gateway
    app.state.composer = PlanComposer(gateway)
    app.state.engine = RecommendationEngine(gateway)
    app.state.store = store
    app.state.seeder = seeder
    app.state.seed_scheduler = seed_scheduler

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/ai/meal-plan", response_model=MealPlan)
    def meal_plan(body: MealPlanRequest, request: Request):
        restrictions = body.restrictions if body.restrictions is not None else body.profile.dietary_restrictions
        try:
            return request.app.state.composer.compose_meal_plan(
                body.profile,
                body.date,
                preferences=body.preferences,
                restrictions=restrictions,
                target_calories=body.target_calories,
            )
        except Exception as e:
            logger.exception("Error generating meal plan")
            raise HTTPException(status_code=500, detail=f"Error generating meal plan: {e}")

    @app.post("/ai/workout-plan", response_model=WorkoutPlan)
    def workout_plan(body: WorkoutPlanRequest, request: Request):
        try:
            return request.app.state.composer.compose_workout_plan(
                body.profile,
                body.date,
                focus=body.focus,
                duration_minutes=body.duration_minutes,
                equipment=body.equipment,
            )
        except Exception as e:
            logger.exception("Error generating workout plan")
            raise HTTPException(status_code=500, detail=f"Error generating workout plan: {e}")

    def _profile_from_query(goal, activity_level, age, weight_kg, height_cm) -> UserProfile:
        return UserProfile(goal=goal, activity_level=activity_level, age=age, weight_kg=weight_kg, height_cm=height_cm)

    @app.get("/ai/recommendations")
    def recommendations(
        request: Request,
        goal: Optional[str] = None,
        activity_level: Optional[str] = None,
        age: Optional[int] = Query(default=None, ge=0),
        weight_kg: Optional[float] = Query(default=None, gt=0),
        height_cm: Optional[float] = Query(default=None, gt=0),
    ):
        profile = _profile_from_query(goal, activity_level, age, weight_kg, height_cm)
        result: RecommendationSet = request.app.state.engine.recommend(profile)
        return {
            "recommendations": result.model_dump(by_alias=True),
            "profile": profile.model_dump(exclude_none=True),
        }

    @app.get("/ai/calories")
    def calories(
        goal: Optional[str] = None,
        activity_level: Optional[str] = None,
        age: Optional[int] = Query(default=None, ge=0),
        weight_kg: Optional[float] = Query(default=None, gt=0),
        height_cm: Optional[float] = Query(default=None, gt=0),
    ):
        profile = _profile_from_query(goal, activity_level, age, weight_kg, height_cm)
        return {"estimated_calories": estimate_calories(profile)}

    @app.get("/ai/exercises")
    def exercises(
        request: Request,
        category: Optional[str] = None,
        muscle_group: Optional[str] = None,
        equipment: Optional[str] = None,
        difficulty: Optional[str] = None,
        search: Optional[str] = None,
    ):
        try:
            found = request.app.state.store.search_exercises(
                category=category, muscle_group=muscle_group, equipment=equipment,
                difficulty=difficulty, search=search,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error searching exercises: {e}")
        return {"exercises": found}

    @app.get("/ai/foods")
    def foods(
        request: Request,
        category: Optional[str] = None,
        search: Optional[str] = None,
        min_calories: Optional[float] = Query(default=None, ge=0),
        max_calories: Optional[float] = Query(default=None, ge=0),
    ):
        try:
            found = request.app.state.store.search_foods(
                category=category, search=search, min_calories=min_calories, max_calories=max_calories,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Error searching foods: {e}")
        return {"foods": found}

    # --- seeding triggers ---
    @app.post("/cron/populate-exercises")
    def populate_exercises(request: Request):
        return request.app.state.seeder.generate_exercise().to_dict()

    @app.post("/cron/populate-foods")
    def populate_foods(request: Request):
        return request.app.state.seeder.generate_food().to_dict()

    @app.post("/cron/populate-all")
    def populate_all(request: Request):
        return request.app.state.seeder.generate_all()

    @app.get("/cron/status")
    def cron_status(request: Request):
        cfg: Settings = request.app.state.settings
        sched: SeedScheduler = request.app.state.seed_scheduler
        return {
            "status": "active" if sched.running else "idle",
            "jobs": sched.describe(),
            "schedule": {"exercises": cfg.exercise_seed_cron, "foods": cfg.food_seed_cron},
            "ai_generation": {
                "configured": request.app.state.gateway.is_configured,
                "model": cfg.openai_model,
                "max_tokens": cfg.seed_max_tokens,
                "temperature": cfg.temperature,
            },
        }

    return app


app = create_app()
