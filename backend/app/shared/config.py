from datetime import timedelta
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # backend/
(BASE_DIR / "_data").mkdir(exist_ok=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "dev"
    API_PREFIX: str = "/api"
    DATABASE_URL: str = "sqlite:///./_data/dev.db"
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"
    LOG_LEVEL: str = "INFO"

    LOCK_TTL_SECONDS: int = 300  # 5 min
    LOCK_OPERATION: str = "editing"
    SWEEP_INTERVAL_SECONDS: int = 60  # 0 = background sweeper off

    @field_validator("LOCK_TTL_SECONDS")
    @classmethod
    def _positive_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("LOCK_TTL_SECONDS must be positive")
        return v

    @field_validator("SWEEP_INTERVAL_SECONDS")
    @classmethod
    def _non_negative_interval(cls, v: int) -> int:
        if v < 0:
            raise ValueError("SWEEP_INTERVAL_SECONDS must be >= 0")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def lock_ttl(self) -> timedelta:
        return timedelta(seconds=self.LOCK_TTL_SECONDS)


settings = Settings()
