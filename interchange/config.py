"""
Configuration management using Pydantic Settings
"""
from pathlib import Path
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Filesystem layout (relative paths resolve against WORKING_DIR)
    WORKING_DIR: str = "."
    DATABASE_FILE: str = "quizapp-database/quizapp.db"
    SNAPSHOT_STAGING_FILE: str = "quizapp-database/imported-quizapp.db"
    QUESTION_IMAGES_DIR: str = "uploads/question-images"

    # Snapshot replacement
    SNAPSHOT_SCRIPT: str = "update-db.ps1"
    SNAPSHOT_SCRIPT_TIMEOUT: int = 300  # seconds

    # Redis
    CACHE_ENABLED: bool = True
    REDIS_URL: str = "redis://localhost:6379/0"
    EXPORT_CACHE_TTL: int = 300  # 5 minutes

    # Application
    APP_NAME: str = "Quiz Data Interchange"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Interchange
    ZIP_EXTRACT_CONCURRENCY: int = 5
    EXPORT_STRICT_KIND: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

    def resolve(self, relative: str) -> Path:
        """Resolve a configured path against the working directory"""
        path = Path(relative)
        if path.is_absolute():
            return path
        return (Path(self.WORKING_DIR) / path).resolve()

    @property
    def database_path(self) -> Path:
        return self.resolve(self.DATABASE_FILE)

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.database_path.as_posix()}"


# Global settings instance
settings = Settings()
