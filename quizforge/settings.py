from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List

class Settings(BaseSettings):
    # xAI (OpenAI-compatible API)
    XAI_API_KEY: str | None = None
    XAI_BASE_URL: str = "https://api.x.ai/v1"
    XAI_MODEL: str = "grok-4-1-fast-non-reasoning"
    REQUEST_TIMEOUT: float = 120.0
    MOCK_MODE: bool = False

    # Request limits
    MAX_FILES: int = 10
    MAX_UPLOAD_MB: int = 20
    MIN_QUESTIONS: int = 5
    MAX_QUESTIONS: int = 100

    # Transient storage for uploads, emptied after every request
    UPLOAD_DIR: str = "uploads"

    # Safety/abuse knobs
    RATE_LIMIT: str = "30/minute"
    RATE_LIMIT_ENABLED: bool = True

    # CORS
    ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # Optional extra frontend
    FRONTEND_ORIGIN: str | None = None

    # Browser sessions kept in memory
    MAX_SESSIONS: int = 500

    # Server bind for `python -m quizforge`
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024

settings = Settings()
if settings.FRONTEND_ORIGIN:
    settings.ALLOW_ORIGINS.append(settings.FRONTEND_ORIGIN)
