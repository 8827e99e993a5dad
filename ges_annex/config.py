"""Runtime settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ges_annex.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_MAX_SESSIONS,
    DEFAULT_PORT,
    DEFAULT_SESSION_IDLE_SECONDS,
)
from ges_annex.constants.quiz_constants import DEFAULT_AUTHOR_ROLE

_PACKAGE_DIR = Path(__file__).resolve().parent
_DATA_DIR = _PACKAGE_DIR / "data"


class Settings(BaseSettings):
    """Application settings, sourced from GES_ANNEX_* variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="GES_ANNEX_",
        env_file=".env",
        extra="ignore",
    )

    # ── Server ──────────────────────────────────────────────────────────
    HOST: str = DEFAULT_HOST
    PORT: int = DEFAULT_PORT
    HEADLESS: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Content ─────────────────────────────────────────────────────────
    APP_ID: str = "default-app-id"
    DATA_FILE: str = ""  # empty keeps everything in memory
    NEWS_DIR: Path = _DATA_DIR / "news"
    SEED_QUIZ_FILE: Path | None = _DATA_DIR / "quizzes" / "sample_quiz.txt"

    # ── Identity ────────────────────────────────────────────────────────
    ALLOW_ANONYMOUS_ATTEMPTS: bool = False
    AUTHOR_ROLE: str = DEFAULT_AUTHOR_ROLE
    AUTHOR_EMAILS: str = ""  # comma-separated, granted the author role at sign-up
    BCRYPT_ROUNDS: int = 12

    # ── Browser sessions ────────────────────────────────────────────────
    MAX_SESSIONS: int = DEFAULT_MAX_SESSIONS
    SESSION_IDLE_SECONDS: int = DEFAULT_SESSION_IDLE_SECONDS

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def _check_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value

    @property
    def author_emails(self) -> list[str]:
        return [email.strip().lower() for email in self.AUTHOR_EMAILS.split(",") if email.strip()]

    @property
    def data_path(self) -> Path | None:
        return Path(self.DATA_FILE) if self.DATA_FILE else None


@lru_cache
def get_settings() -> Settings:
    return Settings()
