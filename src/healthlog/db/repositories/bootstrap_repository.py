from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection

from src.healthlog.db.session import db_connection
from src.healthlog.search.weight_index import weight_search_index


def ensure_tables(connection: Connection) -> None:
    connection.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS users (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              login VARCHAR(50) NOT NULL UNIQUE,
              created_at TEXT NOT NULL
            )
            """
        )
    )

    connection.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS weights (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              date_time TIMESTAMP NOT NULL,
              value DOUBLE NOT NULL,
              user_id INTEGER REFERENCES users(id)
            )
            """
        )
    )

    connection.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS blood_pressures (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              date_time TIMESTAMP NOT NULL,
              systolic INTEGER NOT NULL,
              diastolic INTEGER NOT NULL,
              user_id INTEGER REFERENCES users(id)
            )
            """
        )
    )

    connection.execute(text("CREATE INDEX IF NOT EXISTS idx_weights_date_time ON weights(date_time)"))
    connection.execute(text("CREATE INDEX IF NOT EXISTS idx_weights_user_date_time ON weights(user_id, date_time)"))
    connection.execute(text("CREATE INDEX IF NOT EXISTS idx_blood_pressures_user ON blood_pressures(user_id)"))


def fetch_health_summary() -> dict:
    with db_connection() as connection:
        row = connection.execute(
            text(
                """
                SELECT
                  (SELECT COUNT(*) FROM users) AS users,
                  (SELECT COUNT(*) FROM weights) AS weights,
                  (SELECT COUNT(*) FROM blood_pressures) AS blood_pressures
                """
            )
        ).mappings().first()

    return {
        "users": int(row["users"] or 0),
        "weights": int(row["weights"] or 0),
        "blood_pressures": int(row["blood_pressures"] or 0),
        "indexed_weights": weight_search_index.count(),
    }
