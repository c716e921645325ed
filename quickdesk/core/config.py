import json
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "QuickDesk API"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    DATABASE_URL: str
    REDIS_URL: str = "redis://redis:6379/0"

    # Access tokens come from the identity provider; this service only verifies them
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str | None = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    FRONTEND_URL: str = "http://localhost:5173"
    BACKEND_URL: str = "http://localhost:8000"
    BACKEND_CORS_ORIGINS: str = json.dumps(DEFAULT_CORS_ORIGINS)

    TICKETS_PAGE_SIZE: int = 10

    EMAIL_BACKEND: Literal["console", "smtp"] = "console"
    EMAIL_NOTIFICATIONS_ENABLED: bool = True
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = "support@quickdesk.local"
    SMTP_FROM_NAME: str = "QuickDesk Support"

    STORAGE_BACKEND: Literal["local", "s3"] = "local"
    UPLOAD_DIR: str = "./uploads"
    ATTACHMENT_MAX_SIZE_MB: int = 10
    S3_ENDPOINT_URL: str = ""
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_BUCKET_NAME: str = "attachments"
    S3_PUBLIC_URL: str = ""

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    CELERY_TASK_ALWAYS_EAGER: bool = False

    @property
    def cors_origins(self) -> list[str]:
        """``BACKEND_CORS_ORIGINS`` is a JSON list; a malformed value falls back to the dev origins."""
        try:
            origins = json.loads(self.BACKEND_CORS_ORIGINS)
        except json.JSONDecodeError:
            return list(DEFAULT_CORS_ORIGINS)
        return [str(origin) for origin in origins]

    @property
    def attachment_max_size_bytes(self) -> int:
        return self.ATTACHMENT_MAX_SIZE_MB * 1024 * 1024


settings = Settings()
