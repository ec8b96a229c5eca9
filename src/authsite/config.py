# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Anchor the default SQLite file to the project root, not the working directory.
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATABASE_URL = f"sqlite:///{BASE_DIR / 'data' / 'authsite.db'}"
DEFAULT_SESSION_TTL_SECONDS = 7 * 24 * 60 * 60  # 7 days

_TRUTHY = {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    cookie_secure: bool = False
    cookie_samesite: str = ""
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 5000
    reload: bool = False


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def load_settings() -> Settings:
    """Read settings from AUTHSITE_* environment variables."""
    return Settings(
        database_url=os.getenv("AUTHSITE_DATABASE_URL", DEFAULT_DATABASE_URL),
        session_ttl_seconds=int(os.getenv("AUTHSITE_SESSION_TTL", str(DEFAULT_SESSION_TTL_SECONDS))),
        cookie_secure=_flag("AUTHSITE_COOKIE_SECURE"),
        cookie_samesite=os.getenv("AUTHSITE_COOKIE_SAMESITE", "").strip(),
        log_level=os.getenv("AUTHSITE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        host=os.getenv("AUTHSITE_HOST", "127.0.0.1"),
        port=int(os.getenv("AUTHSITE_PORT", "5000")),
        reload=_flag("AUTHSITE_RELOAD"),
    )
