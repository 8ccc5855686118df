"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000

    # MongoDB
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "helpdesk"

    # Session tokens (the signing secret has no default)
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    # Password hashing
    bcrypt_rounds: int = 10

    # Super admin accounts expire this many days after creation
    super_admin_account_days: int = 30

    # Retention sweep
    retention_months: int = 6
    retention_schedule_enabled: bool = False
    retention_cron_hour: int = 2

    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"

    # CORS - set to "*" to allow all origins
    cors_origins: str = "*"

    # Environment
    environment: str = "development"
    # Serves /api/docs, /api/redoc and /api/openapi.json when on
    debug: bool = False

    # Initial system owner created by scripts/init_db.py
    # Change these in production!
    bootstrap_owner_username: str = "systemowner"
    bootstrap_owner_email: str = "systemowner@helpdesk.com"
    bootstrap_owner_password: str = "systemowner123"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
