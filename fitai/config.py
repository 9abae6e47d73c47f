import os
from dataclasses import dataclass

from dotenv import load_dotenv
load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout_seconds: float = 30.0
    seed_max_tokens: int = 200
    enable_seed_scheduler: bool = False
    exercise_seed_cron: str = "0 2 * * *"
    food_seed_cron: str = "0 3 * * *"
    data_dir: str = "data"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
            max_tokens=_env_int("AI_MAX_TOKENS", 1000),
            temperature=_env_float("AI_TEMPERATURE", 0.7),
            timeout_seconds=_env_float("AI_TIMEOUT_SECONDS", 30.0),
            seed_max_tokens=_env_int("SEED_MAX_TOKENS", 200),
            enable_seed_scheduler=_env_bool("ENABLE_SEED_SCHEDULER"),
            exercise_seed_cron=os.getenv("EXERCISE_SEED_CRON", "0 2 * * *"),
            food_seed_cron=os.getenv("FOOD_SEED_CRON", "0 3 * * *"),
            data_dir=os.getenv("DATA_DIR", "data"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def ai_configured(self) -> bool:
        return bool(self.openai_api_key)
