"""Settings loaded from the environment (+ optional .env).

A single ``Settings`` instance is built at startup and handed to
``create_app``; nothing reads the environment after that.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env(name: str, default: str = "") -> str:
    """Stripped value of ``name``; unset or blank gives ``default``."""
    raw = (os.getenv(name) or "").strip()
    return raw or default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    return raw.lower() in TRUTHY if raw else default


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = _env(name)
    return raw.replace(",", " ").split() if raw else list(default)


@dataclass(frozen=True, slots=True)
class Settings:
    secret_key: str
    database_url: str = "sqlite:///./taskboard.db"
    host: str = "127.0.0.1"
    port: int = 7000
    token_expires_in: int = 86400
    asset_base_url: str = "http://localhost:7000"
    default_role_id: str | None = None
    upload_dir: Path = Path("public/uploads")
    public_board: bool = True
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @staticmethod
    def from_env() -> "Settings":
        load_dotenv(override=False)

        secret_key = _env("SECRET_KEY")
        if not secret_key:
            raise RuntimeError("SECRET_KEY is not set")

        default_role_id = _env("DEFAULT_USER_ROLE_ID") or None

        return Settings(
            secret_key=secret_key,
            database_url=_env("DATABASE_URL", "sqlite:///./taskboard.db"),
            host=_env("HOST", "127.0.0.1"),
            port=_env_int("PORT", 7000),
            token_expires_in=_env_int("TOKEN_EXPIRES_IN", 86400),
            asset_base_url=_env("IMAGE_URL", "http://localhost:7000"),
            default_role_id=default_role_id,
            upload_dir=Path(_env("UPLOAD_DIR", "public/uploads")).expanduser(),
            public_board=_env_bool("PUBLIC_TASK_BOARD", True),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            cors_origins=_env_list("CORS_ORIGINS", ["*"]),
        )
