from __future__ import annotations

import os

import uvicorn

from src.healthlog.config import get_settings


if __name__ == "__main__":
    settings = get_settings()
    host = os.getenv("HEALTHLOG_HOST", "127.0.0.1")
    port = int(os.getenv("HEALTHLOG_PORT", os.getenv("PORT", "8080")))
    uvicorn.run(
        "src.healthlog.main:app",
        host=host,
        port=port,
        reload=os.getenv("HEALTHLOG_RELOAD", "0") == "1",
        log_level="debug" if settings.debug else "info",
    )
