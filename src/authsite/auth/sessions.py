# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.orm import Session as DbSession

from authsite.infra.db import SessionRow
from authsite.log import short_id

SESSION_ID_BYTES = 32
DEFAULT_TTL = timedelta(days=7)
_MAX_ID_ATTEMPTS = 3


def utcnow() -> datetime:
    """Naive UTC, the representation stored in ``sessions.expires_at``."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Session:
    id: str
    user_id: int
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or utcnow())


def _to_session(row: SessionRow) -> Session:
    return Session(id=row.id, user_id=row.user_id, expires_at=row.expires_at)


class SessionStore:
    """Sessions persisted in the ``sessions`` table.

    Expiry is not enforced here: ``get`` returns expired rows as-is and the
    identity resolver evicts them.
    """

    def __init__(self, db: DbSession):
        self.db = db

    def create(
        self, user_id: int, ttl: timedelta = DEFAULT_TTL, *, now: Optional[datetime] = None
    ) -> Session:
        session_id = self._new_id()
        row = SessionRow(id=session_id, user_id=user_id, expires_at=(now or utcnow()) + ttl)
        self.db.add(row)
        self.db.commit()
        logger.info("session created id={} user_id={}", short_id(session_id), user_id)
        return _to_session(row)

    def get(self, session_id: str) -> Optional[Session]:
        if not session_id:
            return None
        row = self.db.get(SessionRow, session_id)
        return _to_session(row) if row is not None else None

    def delete(self, session_id: str) -> None:
        if not session_id:
            return
        result = self.db.execute(delete(SessionRow).where(SessionRow.id == session_id))
        self.db.commit()
        if result.rowcount:
            logger.info("session deleted id={}", short_id(session_id))

    def _new_id(self) -> str:
        # A duplicate id is regenerated, never overwritten; the primary key
        # still rejects a concurrent insert of the same id.
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = secrets.token_hex(SESSION_ID_BYTES)
            if self.db.get(SessionRow, candidate) is None:
                return candidate
        raise RuntimeError("Could not allocate a unique session id")
