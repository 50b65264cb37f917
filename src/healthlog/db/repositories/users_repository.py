from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection

from src.healthlog.timeutil import utc_now_iso


def find_user_id_by_login(connection: Connection, *, login: str) -> int | None:
    row = connection.execute(
        text("SELECT id FROM users WHERE login = :login"),
        {"login": login},
    ).mappings().first()
    if not row:
        return None
    return int(row["id"])


def get_or_create_user_id(connection: Connection, *, login: str) -> int:
    connection.execute(
        text("INSERT OR IGNORE INTO users (login, created_at) VALUES (:login, :created_at)"),
        {"login": login, "created_at": utc_now_iso()},
    )
    user_id = find_user_id_by_login(connection, login=login)
    if user_id is None:
        raise RuntimeError(f"User row for login {login!r} could not be created")
    return user_id
