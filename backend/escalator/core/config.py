from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_file_encoding = "utf-8",
        extra = "ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite:///./escalator.db"

    # API
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    MAX_UPLOAD_SIZE_MB: int = 10
    RATE_LIMIT_PER_MIN: int = 30

    # SMTP - Escalation mails
    SMTP_HOST: Optional[str] = ""
    SMTP_PORT: Optional[int] = None
    SMTP_USER: Optional[str] = ""
    SMTP_PASS: Optional[str] = ""
    SMTP_FROM: Optional[str] = ""
    SMTP_USE_TLS: bool = True
    MAIL_MAX_RETRIES: int = 3
    MAIL_BACKOFF_SECONDS: float = 1.0

    # Gemini - Natural language filters
    GEMINI_API_KEY: Optional[str] = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_TIMEOUT: int = 30

settings = Settings()
