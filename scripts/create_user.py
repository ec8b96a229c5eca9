#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from authsite.auth.users import UsernameTakenError, create_user
from authsite.config import load_settings
from authsite.infra.db import init_db, make_engine, make_session_factory


def main() -> None:
    settings = load_settings()
    engine = make_engine(settings.database_url)
    init_db(engine)

    username = input("Username: ").strip()
    if not username:
        raise SystemExit("Empty username")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if not pw1:
        raise SystemExit("Empty password")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    db = make_session_factory(engine)()
    try:
        user = create_user(db, username, pw1)
    except UsernameTakenError:
        raise SystemExit(f"Username already taken: {username}")
    finally:
        db.close()

    print(f"OK -> user {user.username} (id={user.id}) in {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    main()
