from functools import lru_cache
import json
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Section Planner API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    default_balancing_strategy: Literal["speed", "equitable"] = "speed"

    # Block number treated as the afternoon slot; every other block counts as morning.
    afternoon_block: int = Field(default=3, ge=1)
    morning_mismatch_penalty: int = Field(default=10, ge=0)
    afternoon_mismatch_penalty: int = Field(default=5, ge=0)

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()

    @model_validator(mode="after")
    def validate_penalties(self) -> "Settings":
        if self.morning_mismatch_penalty < self.afternoon_mismatch_penalty:
            raise ValueError("morning_mismatch_penalty must not be lower than afternoon_mismatch_penalty")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
