from __future__ import annotations

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


def _configure(tmp_path: Path) -> None:
    os.environ["HEALTHLOG_DB_PATH"] = str(tmp_path / "healthlog-test.db")
    os.environ["HEALTHLOG_SEARCH_DB_PATH"] = str(tmp_path / "healthlog-search-test.db")
    os.environ["HEALTHLOG_REQUEST_BODY_LIMIT_BYTES"] = "512"
    os.environ["HEALTHLOG_JWT_SECRET"] = "test-secret"
    os.environ["HEALTHLOG_DEFAULT_PAGE_SIZE"] = "2"
    os.environ["HEALTHLOG_MAX_PAGE_SIZE"] = "50"

    import src.healthlog.config as config
    import src.healthlog.db.engine as db_engine

    config.reset_settings_cache()
    db_engine.reset_engine_cache()


@pytest.fixture()
def stores(tmp_path: Path):
    _configure(tmp_path)

    from src.healthlog.db.repositories.bootstrap_repository import ensure_tables
    from src.healthlog.db.session import db_transaction
    from src.healthlog.search.weight_index import weight_search_index

    with db_transaction() as connection:
        ensure_tables(connection)
    weight_search_index.ensure_index()
    yield

    import src.healthlog.db.engine as db_engine

    db_engine.reset_engine_cache()


@pytest.fixture()
def app_client(tmp_path: Path):
    _configure(tmp_path)

    from src.healthlog.main import create_app

    app = create_app()

    with TestClient(app) as client:
        yield client

    import src.healthlog.db.engine as db_engine

    db_engine.reset_engine_cache()


@pytest.fixture()
def auth_headers():
    from src.healthlog.auth import create_token

    def build(login: str, *roles: str) -> dict[str, str]:
        token = create_token(login, roles or ("ROLE_USER",))
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture()
def user():
    from src.healthlog.auth import Caller

    return Caller(login="alice", roles=frozenset({"ROLE_USER"}))


@pytest.fixture()
def admin():
    from src.healthlog.auth import Caller

    return Caller(login="admin", roles=frozenset({"ROLE_USER", "ROLE_ADMIN"}))
