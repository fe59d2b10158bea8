from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import os

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the API.

    Built once at startup and handed to ``create_app``; nothing reads the
    environment after that.
    """

    database_url: str = "sqlite:///./task_manager.db"
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    # 0 disables the exp claim
    access_token_expire_minutes: int = 60 * 24 * 7
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    bcrypt_rounds: int = 12
    avatar_max_bytes: int = 1_000_000
    avatar_size: int = 250
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from the process environment and ``.env`` (if present)."""
        load_dotenv(REPO_ROOT / ".env")

        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            secret_key=os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY", cls.secret_key),
            access_token_expire_minutes=_env_int(
                "ACCESS_TOKEN_EXPIRE_MINUTES", cls.access_token_expire_minutes
            ),
            port=_env_int("PORT", cls.port),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "http://localhost:3000")),
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", cls.bcrypt_rounds),
            avatar_max_bytes=_env_int("AVATAR_MAX_BYTES", cls.avatar_max_bytes),
            avatar_size=_env_int("AVATAR_SIZE", cls.avatar_size),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            log_file=os.getenv("LOG_FILE") or None,
        )
