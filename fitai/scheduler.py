from __future__ import annotations

import logging
from typing import Dict, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .seeding import CatalogSeeder


logger = logging.getLogger(__name__)

EXERCISE_JOB_ID = "seed_exercise"
FOOD_JOB_ID = "seed_food"
INITIAL_JOB_ID = "seed_initial"


class SeedScheduler:
    """Runs the catalog seeder on two daily cron schedules."""

    def __init__(
        self,
        seeder: CatalogSeeder,
        exercise_cron: str = "0 2 * * *",
        food_cron: str = "0 3 * * *",
    ) -> None:
        self.seeder = seeder
        self.exercise_cron = exercise_cron
        self.food_cron = food_cron
        self.scheduler = BackgroundScheduler(
            timezone="UTC",
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 3600},
        )
        self.scheduler.add_job(
            seeder.generate_exercise,
            trigger=CronTrigger.from_crontab(exercise_cron, timezone="UTC"),
            id=EXERCISE_JOB_ID,
            name="Daily AI exercise generation",
            replace_existing=True,
        )
        self.scheduler.add_job(
            seeder.generate_food,
            trigger=CronTrigger.from_crontab(food_cron, timezone="UTC"),
            id=FOOD_JOB_ID,
            name="Daily AI food generation",
            replace_existing=True,
        )

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self, populate: bool = True) -> None:
        if self.scheduler.running:
            logger.warning("Seed scheduler already running")
            return
        if populate:
            # One-off job; runs on the scheduler thread as soon as it starts
            self.scheduler.add_job(
                self.seeder.populate_if_empty,
                id=INITIAL_JOB_ID,
                name="Initial catalog population",
                replace_existing=True,
            )
        self.scheduler.start()
        logger.info("Seed scheduler started (exercises: %s, foods: %s)", self.exercise_cron, self.food_cron)

    def shutdown(self, wait: bool = False) -> None:
        if not self.scheduler.running:
            return
        self.scheduler.shutdown(wait=wait)
        logger.info("Seed scheduler stopped")

    def describe(self) -> List[Dict[str, Optional[str]]]:
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "trigger": str(job.trigger),
                "next_run_time": next_run.isoformat() if next_run else None,
            })
        return jobs
