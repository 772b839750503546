from copy import deepcopy

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

ERROR_RESPONSE_REF = "#/components/schemas/ErrorResponse"

TAG_METADATA = [
    {"name": "ops", "description": "Liveness, readiness and Prometheus metrics."},
    {"name": "auth", "description": "Credential login and 24h bearer token verification."},
    {"name": "users", "description": "User administration and brand allocations (admin unless stated)."},
    {"name": "brands", "description": "Brand catalogue, scoped to the caller's allocations for non-admins."},
    {"name": "login-events", "description": "Scoped login-event listing and aggregated summaries."},
    {"name": "exports", "description": "Streaming CSV exports of the caller's scoped login events."},
]

ERROR_RESPONSE_SCHEMAS = {
    "ErrorResponse": {
        "type": "object",
        "required": ["code", "message", "trace_id"],
        "properties": {
            "code": {"type": "string", "example": "ACCESS_DENIED"},
            "message": {"type": "string", "example": "Access denied"},
            "details": {"type": "object", "nullable": True},
            "trace_id": {"type": "string", "example": "4b8f2c1e-0f1d-4d43-9a43-3f0f3f5a9c10"},
        },
    },
}

_PUBLIC_PATHS = {"/health", "/ready", "/ops/metrics", "/auth/login", "/auth/token"}


def _operation_id(method: str, path: str) -> str:
    normalized = path.strip("/").replace("/", "_").replace("-", "_").replace("{", "").replace("}", "")
    return f"{method}_{normalized}"


def _error_content() -> dict:
    return {"application/json": {"schema": {"$ref": ERROR_RESPONSE_REF}}}


def _apply_error_responses(path: str, method: str, operation: dict) -> None:
    responses = operation.setdefault("responses", {})
    if path not in _PUBLIC_PATHS:
        responses.setdefault("401", {"description": "Missing, invalid or expired token", "content": _error_content()})
        responses.setdefault("403", {"description": "Insufficient role or brand not allocated", "content": _error_content()})
    if "{" in path:
        responses.setdefault("404", {"description": "Resource not found", "content": _error_content()})
    if method in {"post", "put", "delete"} and path not in _PUBLIC_PATHS:
        responses.setdefault("409", {"description": "Resource conflict", "content": _error_content()})


def _apply_csv_content(path: str, operation: dict) -> None:
    if not path.startswith("/exports"):
        return
    ok = operation.setdefault("responses", {}).setdefault("200", {"description": "CSV document"})
    ok["content"] = {"text/csv": {"schema": {"type": "string", "format": "binary"}}}


def harden_openapi_schema(app: FastAPI):
    if app.openapi_schema:
        return app.openapi_schema

    schema = get_openapi(title=app.title, version="1.0.0", routes=app.routes)
    schema["tags"] = TAG_METADATA
    schema.setdefault("components", {}).setdefault("schemas", {}).update(deepcopy(ERROR_RESPONSE_SCHEMAS))

    for path, path_item in schema.get("paths", {}).items():
        for method, operation in path_item.items():
            if method not in {"get", "post", "put", "patch", "delete"}:
                continue
            operation["operationId"] = _operation_id(method, path)
            _apply_error_responses(path, method, operation)
            _apply_csv_content(path, operation)

    app.openapi_schema = schema
    return app.openapi_schema
