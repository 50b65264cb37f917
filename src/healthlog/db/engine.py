from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from sqlalchemy import event
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from src.healthlog.config import get_settings


def _sqlite_engine(db_path: Path, *, foreign_keys: bool) -> Engine:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    url = f"sqlite+pysqlite:///{db_path}"
    engine = create_engine(
        url,
        future=True,
        connect_args={"check_same_thread": False, "timeout": 60},
        pool_pre_ping=True,
    )

    @event.listens_for(engine, "connect")
    def set_pragmas(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        if foreign_keys:
            cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return _sqlite_engine(get_settings().db_path, foreign_keys=True)


@lru_cache(maxsize=1)
def get_search_engine() -> Engine:
    return _sqlite_engine(get_settings().search_db_path, foreign_keys=False)


def reset_engine_cache() -> None:
    for cached in (get_engine, get_search_engine):
        if cached.cache_info().currsize:
            cached().dispose()
        cached.cache_clear()
