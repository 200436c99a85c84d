from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./shiftboard.db"
    # comma separated, e.g. "http://localhost:3000,https://app.example.com"
    BACKEND_CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    # scheduling engine
    SYNC_DEBOUNCE_SECONDS: float = 0.5
    SCHEDULE_API_URL: str = "http://localhost:8000/api"
    SCHEDULE_API_TIMEOUT: Optional[float] = None
    DEFAULT_TIMEZONE: str = "Europe/Istanbul"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("SYNC_DEBOUNCE_SECONDS")
    @classmethod
    def non_negative_debounce(cls, v: float) -> float:
        if v < 0:
            raise ValueError("SYNC_DEBOUNCE_SECONDS must be >= 0")
        return v

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
