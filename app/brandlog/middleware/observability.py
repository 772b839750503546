from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.brandlog.core.db_timing import db_timer, get_db_time_ms
from app.brandlog.core.logging import log_json
from app.brandlog.core.metrics import metrics

logger = logging.getLogger("brandlog.request")

_STATE_FIELDS = ("user_id", "role", "error_code", "error_class")


def route_template(request: Request) -> str:
    """Path template of the matched route (``/brands/{brand_id}``), else the raw path."""
    matched = request.scope.get("route")
    return getattr(matched, "path", None) or request.url.path


def _rounded(value: float | None) -> float | None:
    return None if value is None else round(value, 2)


def build_request_log_payload(
    request: Request,
    *,
    status_code: int,
    latency_ms: float,
    db_time_ms: float | None,
) -> dict:
    payload = {
        "event": "http_request",
        "trace_id": getattr(request.state, "trace_id", ""),
        "route": route_template(request),
        "method": request.method,
        "status_code": status_code,
        "latency_ms": _rounded(latency_ms),
        "db_time_ms": _rounded(db_time_ms),
    }
    for field in _STATE_FIELDS:
        payload[field] = getattr(request.state, field, None)
    return payload


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """One structured log line and one metrics sample per request."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        status_code = 500
        with db_timer():
            try:
                response = await call_next(request)
                status_code = response.status_code
                return response
            finally:
                elapsed_ms = (time.perf_counter() - started) * 1000
                payload = build_request_log_payload(
                    request,
                    status_code=status_code,
                    latency_ms=elapsed_ms,
                    db_time_ms=get_db_time_ms(),
                )
                log_json(logger, payload)
                metrics.record_http_request(
                    route=payload["route"],
                    method=request.method,
                    status_code=status_code,
                    latency_ms=elapsed_ms,
                )
