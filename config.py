from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Any
import json


def parse_list(v: Any) -> List[str]:
    """Parse a list setting from a JSON array or a comma-separated string"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in v.split(',') if item.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "UniArchive API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = ""
    DATABASE_NAME: str = ""

    # ==========================================
    # CORS
    # ==========================================
    CORS_ORIGINS: Any = ["*"]

    # ==========================================
    # Uploads
    # ==========================================
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 25000000  # 25MB
    ALLOWED_EXTENSIONS: Any = ["pdf", "jpg", "jpeg", "png", "doc", "docx"]

    # ==========================================
    # OTP verification
    # ==========================================
    ALLOWED_EMAIL_DOMAIN: str = "@vitstudent.ac.in"
    OTP_TTL_MINUTES: int = 10

    # ==========================================
    # Email (SMTP)
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM_NAME: str = "UniArchive"

    # ==========================================
    # AI assistant (OpenAI-compatible chat completions)
    # ==========================================
    AI_API_KEY: str = ""
    AI_API_ENDPOINT: str = "https://integrate.api.nvidia.com/v1/chat/completions"
    AI_MODEL: str = "meta/llama3-70b-instruct"
    AI_TEMPERATURE: float = 0.5
    AI_MAX_TOKENS: int = 1024
    AI_REQUEST_TIMEOUT: float = 30.0  # seconds

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    @field_validator("CORS_ORIGINS", "ALLOWED_EXTENSIONS", mode="before")
    @classmethod
    def split_lists(cls, v: Any) -> List[str]:
        return parse_list(v)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
