from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from authsite.auth.identity import Identity, current_identity
from authsite.infra.db import SessionRow, UserRow

CREDS = {"username": "alice", "password": "secret"}


def _count(db, model) -> int:
    db.expire_all()
    return db.scalar(select(func.count()).select_from(model))


def _register(client, **overrides):
    return client.post("/register", data={**CREDS, **overrides})


def test_pages_render_for_anonymous(client):
    for path, marker in (("/", "Please log in or register."), ("/login", 'action="/login"'), ("/register", 'action="/register"')):
        r = client.get(path)
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/html")
        assert marker in r.text
        assert 'href="/login"' in r.text
        assert 'href="/logout"' not in r.text


def test_unknown_route_is_404(client):
    assert client.get("/nope").status_code == 404


def test_static_assets_served(client):
    r = client.get("/static/styles.css")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/css")


def test_register_creates_user_and_session(client, db):
    r = _register(client)
    assert r.status_code == 302
    assert r.headers["location"] == "/"
    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith("sessionId=")
    assert "HttpOnly" in set_cookie
    assert "Path=/" in set_cookie

    user = db.scalars(select(UserRow).where(UserRow.username == "alice")).one()
    session_id = r.cookies["sessionId"]
    row = db.get(SessionRow, session_id)
    assert row is not None
    assert row.user_id == user.id


def test_password_is_not_stored_in_plaintext(client, db):
    _register(client)
    row = db.scalars(select(UserRow).where(UserRow.username == "alice")).one()
    assert "secret" not in row.password
    assert row.password.count(":") == 1


def test_home_reflects_authenticated_identity(client):
    r = _register(client)
    sid = r.cookies["sessionId"]
    client.cookies.clear()

    authed = client.get("/", headers={"cookie": f"sessionId={sid}"})
    assert authed.status_code == 200
    assert "Hello, alice!" in authed.text
    assert 'href="/logout"' in authed.text
    assert 'href="/login"' not in authed.text

    anon = client.get("/")
    assert "Hello, alice!" not in anon.text


def test_forms_render_for_authenticated_user(client):
    sid = _register(client).cookies["sessionId"]
    client.cookies.clear()
    for path in ("/login", "/register"):
        r = client.get(path, headers={"cookie": f"sessionId={sid}"})
        assert r.status_code == 200
        assert f'action="{path}"' in r.text
        assert 'href="/logout"' in r.text


def test_duplicate_username_rejected(client, db):
    _register(client)
    client.cookies.clear()
    sessions_before = _count(db, SessionRow)

    r = _register(client, password="other")
    assert r.status_code == 200
    assert "Username already taken" in r.text
    assert "set-cookie" not in r.headers
    assert _count(db, UserRow) == 1
    assert _count(db, SessionRow) == sessions_before


def test_register_missing_fields_renders_error(client, db):
    r = client.post("/register", data={"username": "alice"})
    assert r.status_code == 200
    assert "Username and password are required" in r.text
    assert _count(db, UserRow) == 0


def test_login_success_creates_new_session(client, db):
    _register(client)
    client.cookies.clear()

    r = client.post("/login", data=CREDS)
    assert r.status_code == 302
    assert r.headers["location"] == "/"
    assert r.cookies["sessionId"]
    assert _count(db, SessionRow) == 2


def test_login_wrong_password(client, db):
    _register(client)
    client.cookies.clear()
    before = _count(db, SessionRow)

    r = client.post("/login", data={"username": "alice", "password": "wrong"})
    assert r.status_code == 200
    assert "Invalid username or password" in r.text
    assert "set-cookie" not in r.headers
    assert _count(db, SessionRow) == before


def test_login_unknown_user_same_message(client):
    r = client.post("/login", data={"username": "bob", "password": "secret"})
    assert r.status_code == 200
    assert "Invalid username or password" in r.text


def test_login_missing_fields(client):
    r = client.post("/login", data={})
    assert r.status_code == 200
    assert "Username and password are required" in r.text


def test_logout_deletes_session(client, db):
    sid = _register(client).cookies["sessionId"]
    client.cookies.clear()

    r = client.get("/logout", headers={"cookie": f"sessionId={sid}"})
    assert r.status_code == 302
    assert r.headers["location"] == "/"
    assert r.headers["set-cookie"].startswith("sessionId=;")
    assert "Expires=Thu, 01 Jan 1970 00:00:00 GMT" in r.headers["set-cookie"]

    db.expire_all()
    assert db.get(SessionRow, sid) is None

    after = client.get("/", headers={"cookie": f"sessionId={sid}"})
    assert "Hello, alice!" not in after.text


def test_logout_without_cookie_still_clears(client):
    r = client.post("/logout")
    assert r.status_code == 302
    assert r.headers["location"] == "/"
    assert r.headers["set-cookie"].startswith("sessionId=;")


def test_logout_unknown_session_is_not_an_error(client):
    r = client.get("/logout", headers={"cookie": "sessionId=unknown"})
    assert r.status_code == 302


def test_storage_failure_maps_to_500(app, client):
    def broken_identity():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    app.dependency_overrides[current_identity] = broken_identity
    try:
        r = client.get("/")
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.text == "Internal Server Error"


def test_identity_override_renders_user(app, client):
    from authsite.auth.users import User

    app.dependency_overrides[current_identity] = lambda: Identity(user=User(id=1, username="zoe"))
    try:
        r = client.get("/")
    finally:
        app.dependency_overrides.clear()
    assert "Hello, zoe!" in r.text


def test_login_against_corrupt_hash_renders_error(client, db):
    db.add(UserRow(username="mallory", password="00:" + "00" * 32))
    db.commit()

    r = client.post("/login", data={"username": "mallory", "password": "secret"})
    assert r.status_code == 200
    assert "Invalid username or password" in r.text
    assert "set-cookie" not in r.headers


def test_every_page_route_evicts_expired_session(client, db):
    _register(client)
    client.cookies.clear()
    user = db.scalars(select(UserRow).where(UserRow.username == "alice")).one()

    for i, path in enumerate(("/", "/login", "/register")):
        sid = f"stale-{i}"
        db.add(SessionRow(id=sid, user_id=user.id, expires_at=datetime(2000, 1, 1)))
        db.commit()

        r = client.get(path, headers={"cookie": f"sessionId={sid}"})
        assert r.status_code == 200
        assert 'href="/logout"' not in r.text
        db.expire_all()
        assert db.get(SessionRow, sid) is None
