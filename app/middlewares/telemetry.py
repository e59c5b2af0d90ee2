from __future__ import annotations

import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import clear_context, get_logger, set_request_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Amarra um request_id a todo log emitido durante o request.

    O contexto é limpo na entrada: o cache de agenda sobrevive entre requests,
    os campos de log (user_id, professional_id) não.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        clear_context()
        rid = set_request_id(request.headers.get("X-Request-ID"))
        log = get_logger("http").bind(path=request.url.path, method=request.method)
        log.debug("request.start")

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log.exception("request.error")
            raise
        duration_ms = round((time.perf_counter() - started) * 1000.0, 2)

        response.headers["X-Request-ID"] = rid
        level = log.warning if response.status_code >= 500 else log.info
        level("request.end", status_code=response.status_code, duration_ms=duration_ms)
        return response
