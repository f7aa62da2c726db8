"""
Application configuration settings.

This file loads settings from environment variables.
For local development, create a .env file based on .env.example
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        APP_NAME: Name of the application (shown in the docs and startup log)
        DEBUG: Enable debug mode (True for development, False for production)
        TASKS_FILE: JSON file backing the REST API
        CLIENT_STORAGE_URL: SQLAlchemy URL of the browser-local key-value store
    """

    # Application settings
    APP_NAME: str = "TODO API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # HTTP server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Server persistence: a single JSON array of tasks
    TASKS_FILE: Path = Path("tasks.json")

    # Client persistence: key-value record holding the browser task list
    CLIENT_STORAGE_URL: str = "sqlite:///todo_local.sqlite3"
    CLIENT_STORAGE_KEY: str = "todoTasks"

    class Config:
        # Load variables from .env file if it exists
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a single settings instance to use throughout the app
settings = Settings()
