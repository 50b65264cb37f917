from __future__ import annotations

import asyncio
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .api.schemas.common import fail


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, timeout_seconds: int) -> None:
        super().__init__(app)
        self._timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        request.state.request_id = request_id
        try:
            response = await asyncio.wait_for(call_next(request), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            payload = fail(
                code="REQUEST_TIMEOUT",
                message="Request timed out.",
                request_id=request_id,
            )
            return JSONResponse(status_code=504, content=payload, headers={"X-Request-Id": request_id})

        response.headers["X-Request-Id"] = request_id
        # Responses carry personal health data.
        response.headers.setdefault("Cache-Control", "no-store")
        return response


class RequestBodyLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        request_id = getattr(request.state, "request_id", "unknown")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                size = 0
            if size > self._max_bytes:
                payload = fail(
                    code="PAYLOAD_TOO_LARGE",
                    message=f"Payload exceeds {self._max_bytes} bytes.",
                    request_id=request_id,
                )
                return JSONResponse(status_code=413, content=payload)

        return await call_next(request)
