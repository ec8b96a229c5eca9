# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Relational store: schema, engine and per-request sessions.

Two tables:
  users(id PK autoincrement, username unique, password)
  sessions(id PK, user_id FK -> users.id, expires_at)
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterator

from fastapi import Request
from sqlalchemy import DateTime, ForeignKey, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # Stored as "salt:hash" (hex), see auth.passwords.
    password: Mapped[str] = mapped_column(String(255), nullable=False)


class SessionRow(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    # Naive UTC.
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


def make_engine(url: str) -> Engine:
    connect_args: dict = {}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False}
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, future=True, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency: one store handle per request.

    Store operations commit their own writes; closing discards whatever a
    failed request left uncommitted.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
