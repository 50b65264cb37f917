from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_env: str
    debug: bool
    db_path: Path
    search_db_path: Path
    cors_allow_origins: list[str]
    request_body_limit_bytes: int
    request_timeout_seconds: int
    jwt_secret: str
    jwt_algorithm: str
    admin_role: str
    default_page_size: int
    max_page_size: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    env = os.getenv("HEALTHLOG_APP_ENV", "development").strip().lower()
    data_dir = PROJECT_ROOT / "data"
    db_path = Path(os.getenv("HEALTHLOG_DB_PATH", str(data_dir / "healthlog.db"))).expanduser()
    search_db_path = Path(os.getenv("HEALTHLOG_SEARCH_DB_PATH", str(data_dir / "healthlog-search.db"))).expanduser()
    cors_raw = os.getenv("HEALTHLOG_CORS_ALLOW_ORIGINS", "http://localhost:9000,http://localhost:8000")
    origins = [entry.strip() for entry in cors_raw.split(",") if entry.strip()]
    if not origins:
        origins = ["http://localhost:9000", "http://localhost:8000"]

    max_page_size = max(1, int(os.getenv("HEALTHLOG_MAX_PAGE_SIZE", "100")))

    return Settings(
        app_env=env,
        debug=_to_bool(os.getenv("HEALTHLOG_DEBUG"), default=(env != "production")),
        db_path=db_path,
        search_db_path=search_db_path,
        cors_allow_origins=origins,
        request_body_limit_bytes=int(os.getenv("HEALTHLOG_REQUEST_BODY_LIMIT_BYTES", str(1024 * 1024))),
        request_timeout_seconds=int(os.getenv("HEALTHLOG_REQUEST_TIMEOUT_SECONDS", "30")),
        jwt_secret=os.getenv("HEALTHLOG_JWT_SECRET", "healthlog-development-secret"),
        jwt_algorithm=os.getenv("HEALTHLOG_JWT_ALGORITHM", "HS256"),
        admin_role=os.getenv("HEALTHLOG_ADMIN_ROLE", "ROLE_ADMIN").strip(),
        default_page_size=min(max_page_size, max(1, int(os.getenv("HEALTHLOG_DEFAULT_PAGE_SIZE", "20")))),
        max_page_size=max_page_size,
    )


def reset_settings_cache() -> None:
    get_settings.cache_clear()
