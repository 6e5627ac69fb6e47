# app/core/config.py

from pathlib import Path
from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "CleverBudget API"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./clever_budget.db"

    # JWT / Security Configuration
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    # SendGrid Configuration (empty key disables email delivery)
    SENDGRID_API_KEY: str = ""
    EMAIL_FROM: EmailStr = "noreply@cleverbudget.app"
    EMAIL_FROM_NAME: str = "CleverBudget Team"

    # Background workers
    SCHEDULER_ENABLED: bool = True
    RECURRING_INTERVAL_SECONDS: int = 3600
    BUDGET_ALERT_INTERVAL_SECONDS: int = 21600
    WORKER_INITIAL_DELAY_SECONDS: int = 10
    WORKER_RETRY_DELAY_SECONDS: int = 300

    # Budget analytics
    BUDGET_HISTORY_MONTHS: int = 3

    @property
    def is_supabase(self) -> bool:
        """Check if we're using a Supabase/PgBouncer database"""
        return any(d in self.DATABASE_URL for d in [
            "supabase.co",
            "supabase.com",
            "pooler.supabase",
        ])

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def email_enabled(self) -> bool:
        return bool(self.SENDGRID_API_KEY)

# Create a global settings instance
settings = Settings()
