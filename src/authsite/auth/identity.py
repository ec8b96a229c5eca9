# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from fastapi import Depends, Request
from loguru import logger
from sqlalchemy.orm import Session as DbSession

from authsite.auth.cookies import COOKIE_NAME, parse_cookies
from authsite.auth.sessions import Session, SessionStore, utcnow
from authsite.auth.users import User, get_user
from authsite.infra.db import get_db
from authsite.log import short_id


@dataclass(frozen=True)
class Identity:
    """Who is making the current request. Built per request, never stored."""

    cookies: Dict[str, str] = field(default_factory=dict)
    session: Optional[Session] = None
    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def resolve_identity(
    cookie_header: Optional[str], db: DbSession, *, now: Optional[datetime] = None
) -> Identity:
    cookies = parse_cookies(cookie_header)
    anonymous = Identity(cookies=cookies)

    session_id = cookies.get(COOKIE_NAME, "")
    if not session_id:
        return anonymous

    store = SessionStore(db)
    sess = store.get(session_id)
    if sess is None:
        return anonymous

    if sess.is_expired(now or utcnow()):
        store.delete(sess.id)
        logger.info("expired session evicted id={}", short_id(sess.id))
        return anonymous

    user = get_user(db, sess.user_id)
    if user is None:
        logger.warning("session id={} references missing user_id={}", short_id(sess.id), sess.user_id)
        return anonymous

    return Identity(cookies=cookies, session=sess, user=user)


def current_identity(request: Request, db: DbSession = Depends(get_db)) -> Identity:
    """FastAPI dependency resolving the identity of every routed request."""
    return resolve_identity(request.headers.get("cookie"), db)
