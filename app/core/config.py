from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Database: SQLite for local development
    DATABASE_URL: str = "sqlite+aiosqlite:///./carepay.db"

    # Labor-law thresholds (Code du travail / IDCC 3239).
    # Values depend on the applicable collective agreement, override via .env.
    DAILY_MAX_HOURS: float = 10.0
    DAILY_WARNING_HOURS: float = 8.0
    WEEKLY_MAX_HOURS: float = 48.0
    WEEKLY_WARNING_HOURS: float = 44.0
    MIN_DAILY_REST_HOURS: float = 11.0
    MIN_WEEKLY_REST_HOURS: float = 35.0
    BREAK_THRESHOLD_MINUTES: int = 360
    MIN_BREAK_MINUTES: int = 20
    GUARD_EFFECTIVE_MAX_HOURS: float = 12.0
    NIGHT_PRESENCE_MAX_HOURS: float = 12.0
    MAX_CONSECUTIVE_NIGHTS: int = 5
    GUARD_MAX_AMPLITUDE_HOURS: float = 24.0
    GUARD_CHAIN_GAP_HOURS: float = 2.0
    REQUALIFICATION_THRESHOLD: int = 4

    # Window of sibling shifts loaded around a candidate shift (days)
    VALIDATION_WINDOW_DAYS: int = 7

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
