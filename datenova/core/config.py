"""
Application Configuration Module

This module defines all configuration settings for the Datenova CRM service.
Settings are loaded from environment variables (via .env file) using Pydantic.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application-wide configuration settings.

    All settings can be overridden via environment variables.
    The .env file is automatically loaded if present.
    """
    # --- Service ---
    PROJECT_NAME: str = "Datenova CRM API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # --- Database ---
    # A full SQLAlchemy URL wins over the SSH settings below; with neither a
    # local SQLite file is used.
    DATABASE_URL: Optional[str] = None

    # MySQL reached through the SSH tunnel
    DB_HOST: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_NAME: Optional[str] = None
    DB_PASSWORD: Optional[str] = None

    # Create tables on startup (development convenience)
    AUTO_CREATE_DB: bool = True

    # --- SSH tunnel ---
    USE_SSH: bool = False
    SSH_HOST: Optional[str] = None
    SSH_USER: Optional[str] = None
    SSH_PASSWORD: Optional[str] = None

    # --- Auth ---
    # Override SECRET_KEY outside development
    SECRET_KEY: str = "datenova-dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # one week

    # --- File storage ---
    STORAGE_DIR: str = "var/storage"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    DELIVERABLES_BUCKET: str = "deliverables"

    # --- Workflows ---
    # When False, multi-step writes (deliverable create+upload+patch, task
    # assignment delete+insert, time log insert+hours update) run as
    # independent calls with no compensation.
    ATOMIC_MULTI_STEP_WRITES: bool = False
    TASK_ASSIGNMENT_ROLE: str = "collaborator"
    INVITATION_EXPIRY_DAYS: int = 7
    FRONTEND_URL: str = "http://localhost:5173"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
