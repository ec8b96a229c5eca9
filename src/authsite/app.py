# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from authsite.auth.cookies import COOKIE_NAME, format_expired_cookie, format_session_cookie
from authsite.auth.identity import Identity, current_identity
from authsite.auth.sessions import SessionStore
from authsite.auth.users import UsernameTakenError, authenticate, create_user
from authsite.config import Settings, load_settings
from authsite.core.pages import render
from authsite.infra.db import get_db, init_db, make_engine, make_session_factory
from authsite.log import setup_logging

BASE_DIR = Path(__file__).resolve().parent

INVALID_CREDENTIALS = "Invalid username or password"
USERNAME_TAKEN = "Username already taken"
MISSING_FIELDS = "Username and password are required"

router = APIRouter()


def _page(identity: Identity, page_name: str, title: str, error: str = "") -> HTMLResponse:
    """Render a page with the resolved identity injected."""
    html = render(
        page_name,
        {"title": title, "user": identity.user, "session": identity.session, "error": error},
    )
    return HTMLResponse(html, status_code=200)


def _redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=302)


def _login_response(request: Request, db: DbSession, user_id: int) -> RedirectResponse:
    settings: Settings = request.app.state.settings
    sess = SessionStore(db).create(user_id, timedelta(seconds=settings.session_ttl_seconds))
    resp = _redirect_home()
    resp.headers.append(
        "set-cookie",
        format_session_cookie(
            sess.id, sess.expires_at, secure=settings.cookie_secure, samesite=settings.cookie_samesite
        ),
    )
    return resp


# ------------------ Routes ------------------


@router.get("/", response_class=HTMLResponse)
def home(identity: Identity = Depends(current_identity)):
    return _page(identity, "home", "Home")


@router.get("/register", response_class=HTMLResponse)
def register_get(identity: Identity = Depends(current_identity)):
    return _page(identity, "register", "Register")


@router.post("/register")
def register_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    identity: Identity = Depends(current_identity),
    db: DbSession = Depends(get_db),
):
    username = (username or "").strip()
    if not username or not password:
        return _page(identity, "register", "Register", MISSING_FIELDS)
    try:
        user = create_user(db, username, password)
    except UsernameTakenError:
        logger.info("registration rejected, username taken username={}", username)
        return _page(identity, "register", "Register", USERNAME_TAKEN)
    return _login_response(request, db, user.id)


@router.get("/login", response_class=HTMLResponse)
def login_get(identity: Identity = Depends(current_identity)):
    return _page(identity, "login", "Login")


@router.post("/login")
def login_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    identity: Identity = Depends(current_identity),
    db: DbSession = Depends(get_db),
):
    username = (username or "").strip()
    if not username or not password:
        return _page(identity, "login", "Login", MISSING_FIELDS)
    user = authenticate(db, username, password)
    if user is None:
        logger.info("login failed username={}", username)
        return _page(identity, "login", "Login", INVALID_CREDENTIALS)
    return _login_response(request, db, user.id)


@router.api_route("/logout", methods=["GET", "POST"])
def logout(
    request: Request,
    identity: Identity = Depends(current_identity),
    db: DbSession = Depends(get_db),
):
    session_id = identity.cookies.get(COOKIE_NAME, "")
    if session_id:
        SessionStore(db).delete(session_id)
    settings: Settings = request.app.state.settings
    resp = _redirect_home()
    resp.headers.append(
        "set-cookie",
        format_expired_cookie(secure=settings.cookie_secure, samesite=settings.cookie_samesite),
    )
    return resp


async def _storage_error(request: Request, exc: SQLAlchemyError):
    logger.opt(exception=exc).error("storage failure on {} {}", request.method, request.url.path)
    return PlainTextResponse("Internal Server Error", status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    engine = make_engine(settings.database_url)
    init_db(engine)

    app = FastAPI()
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
    app.include_router(router)
    app.add_exception_handler(SQLAlchemyError, _storage_error)

    logger.info("app ready database={}", engine.url.render_as_string(hide_password=True))
    return app
