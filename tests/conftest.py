import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from authsite.app import create_app
from authsite.config import Settings
from authsite.infra.db import init_db, make_engine, make_session_factory


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(database_url=f"sqlite:///{tmp_path / 'authsite.db'}", log_level="WARNING")


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture()
def db(app):
    """A store handle on the same database the app uses."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def memory_db():
    """Standalone in-memory store for unit tests that do not need the app."""
    engine = make_engine("sqlite:///:memory:")
    init_db(engine)
    session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
