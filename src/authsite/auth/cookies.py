# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Dict, Optional
from urllib.parse import quote, unquote

COOKIE_NAME = "sessionId"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_cookies(header: Optional[str]) -> Dict[str, str]:
    """Parse a raw ``Cookie`` header. Pairs without ``=`` are skipped."""
    out: Dict[str, str] = {}
    if not header:
        return out
    for pair in header.split(";"):
        pair = pair.strip()
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            continue
        out[key] = unquote(value.strip())
    return out


def http_date(when: datetime) -> str:
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return format_datetime(when.astimezone(timezone.utc), usegmt=True)


def _format(value: str, expires: datetime, *, secure: bool, samesite: str) -> str:
    parts = [
        f"{COOKIE_NAME}={quote(value, safe='')}",
        f"Expires={http_date(expires)}",
        "HttpOnly",
        "Path=/",
    ]
    # Secure/SameSite are opt-in (AUTHSITE_COOKIE_SECURE / AUTHSITE_COOKIE_SAMESITE).
    if secure:
        parts.append("Secure")
    if samesite:
        parts.append(f"SameSite={samesite}")
    return "; ".join(parts)


def format_session_cookie(
    session_id: str, expires_at: datetime, *, secure: bool = False, samesite: str = ""
) -> str:
    return _format(session_id, expires_at, secure=secure, samesite=samesite)


def format_expired_cookie(*, secure: bool = False, samesite: str = "") -> str:
    return _format("", EPOCH, secure=secure, samesite=samesite)
