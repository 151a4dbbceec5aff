"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "SplitLab"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./splitlab.db"

    # Redis (only used when log_store_backend == "redis")
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "splitlab"

    # Experiment logs: "sql", "memory" or "redis"
    log_store_backend: str = "sql"

    # Experiment definitions file, re-read on every access
    experiments_config_path: str = "experiments.json"

    # Assignment cookies
    # Empty disables signing. Setting it later invalidates every unsigned
    # cookie already issued, so existing visitors are re-bucketed once.
    cookie_secret: str = ""
    cookie_max_age_days: int = 30
    cookie_secure: bool = False

    # API Keys (for initial setup)
    admin_api_key: str = "admin-key-change-in-production"

    # CORS
    frontend_url: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
