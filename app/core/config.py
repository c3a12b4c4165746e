from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    PROJECT_NAME: str = "Clinical Signal Engine"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = ""  # local, dev, prod (from .env)

    # CORS (from .env, comma-separated)
    BACKEND_CORS_ORIGINS: List[str] = []

    # Logging & Sentry
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str | None = None

    # Rule tables (JSON overrides, empty to use built-in defaults)
    VITAL_PROFILES_PATH: str | None = None
    ALERT_RULES_PATH: str | None = None
    BILLING_CODES_PATH: str | None = None

    # Tier assigned to readings of a vital type with no profile: normal, elevated
    UNKNOWN_VITAL_TIER: Literal["normal", "elevated"] = "normal"

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )


settings = Settings()
