"""
Application configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import List

from ccred.core.constants import DEFAULT_METHODOLOGY


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_file_encoding = "utf-8",
        extra = "ignore"
    )
    
    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./ccred.db", alias="DATABASE_URL")
    
    # File storage for field-data uploads
    upload_dir: str = Field(default="uploads", alias="UPLOAD_DIR")
    max_upload_size_mb: int = Field(default=50, alias="MAX_UPLOAD_SIZE_MB")
    
    # Workflow
    default_methodology: str = Field(default=DEFAULT_METHODOLOGY, alias="DEFAULT_METHODOLOGY")
    allow_terminal_retransition: bool = Field(default=False, alias="ALLOW_TERMINAL_RETRANSITION")
    
    # Application
    app_name: str = Field(default="C-CRED API Server", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    port: int = Field(default=5000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
