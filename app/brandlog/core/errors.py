import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.exceptions import HTTPException

from app.brandlog.core import error_catalog
from app.brandlog.core.context import get_request_context, trace_id_of
from app.brandlog.core.error_catalog import AppError, ErrorCatalog, ErrorDefinition

logger = logging.getLogger(__name__)

CATEGORY_STATUS_CODES = {
    error_catalog.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    error_catalog.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    error_catalog.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    error_catalog.CONFLICT: status.HTTP_409_CONFLICT,
    error_catalog.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    error_catalog.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    error_catalog.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# framework-level errors (routing, method mismatch) that never pass through AppError
HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}

_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def status_code_for(error: ErrorDefinition) -> int:
    return CATEGORY_STATUS_CODES.get(error.category, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(code: str, message: str, details: object, trace_id: str, status_code: int) -> JSONResponse:
    body = {"code": code, "message": message, "details": details, "trace_id": trace_id}
    return JSONResponse(status_code=status_code, content=body)


def _fail(request: Request, exc: Exception, *, code: str, message: str, details, status_code: int) -> JSONResponse:
    request.state.error_code = code
    request.state.error_class = type(exc).__name__
    return error_response(code, message, details, trace_id_of(request), status_code)


def _fail_with(request: Request, exc: Exception, error: ErrorDefinition, details=None) -> JSONResponse:
    return _fail(request, exc, code=error.code, message=error.message, details=details, status_code=status_code_for(error))


def _store_unavailable(exc: Exception) -> bool:
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def _field_errors(exc: RequestValidationError) -> dict:
    errors = []
    for item in exc.errors():
        path = [str(part) for part in item.get("loc", ()) if part not in _LOCATION_PREFIXES]
        errors.append(
            {
                "field": ".".join(path) or None,
                "message": item.get("msg", "Invalid value"),
                "type": item.get("type", "validation_error"),
            }
        )
    return {"errors": errors}


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _fail_with(request, exc, exc.error, exc.details)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _fail(
            request,
            exc,
            code=HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            message="HTTP error" if exc.detail is None else str(exc.detail),
            details=None,
            status_code=exc.status_code,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _fail_with(request, exc, ErrorCatalog.VALIDATION_ERROR, _field_errors(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        error = ErrorCatalog.STORE_UNAVAILABLE if _store_unavailable(exc) else ErrorCatalog.INTERNAL_ERROR
        response = _fail_with(request, exc, error, {"type": type(exc).__name__})
        context = get_request_context(request)
        logger.exception(
            "Unhandled error",
            extra={"trace_id": context.trace_id, "user_id": context.user_id, "error_code": error.code},
        )
        return response
