# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession

from authsite.auth.passwords import hash_password, verify_password
from authsite.infra.db import UserRow


class UsernameTakenError(Exception):
    """Raised when registering a username that already exists."""

    def __init__(self, username: str):
        super().__init__(f"Username already taken: {username}")
        self.username = username


@dataclass(frozen=True)
class User:
    id: int
    username: str


def _to_user(row: UserRow) -> User:
    return User(id=row.id, username=row.username)


def create_user(db: DbSession, username: str, password: str) -> User:
    row = UserRow(username=username, password=hash_password(password))
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise UsernameTakenError(username) from exc
    logger.info("user registered username={}", username)
    return _to_user(row)


def get_user(db: DbSession, user_id: int) -> Optional[User]:
    row = db.get(UserRow, user_id)
    return _to_user(row) if row is not None else None


def _row_by_username(db: DbSession, username: str) -> Optional[UserRow]:
    if not username:
        return None
    return db.scalars(select(UserRow).where(UserRow.username == username)).first()


def authenticate(db: DbSession, username: str, password: str) -> Optional[User]:
    """Return the user for valid credentials, None otherwise (either part wrong)."""
    row = _row_by_username(db, username)
    if row is None or not verify_password(password, row.password):
        return None
    return _to_user(row)
