from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "DormGuard"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = False

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./dormguard.db"

    # Security settings (JWT signing is configured in app.constants.auth)
    login_rate_limit: str = "10/minute"

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Visitor policy
    advance_notice_hours: int = 12

    # Client cache
    api_base_url: str = "http://localhost:8000"
    poll_interval_seconds: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
