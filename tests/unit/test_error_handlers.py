from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.errors import setup_exception_handlers, status_code_for
from app.brandlog.middleware.trace import TraceIdMiddleware


def _client() -> TestClient:
    app = FastAPI()
    app.add_middleware(TraceIdMiddleware)
    setup_exception_handlers(app)

    @app.get("/denied")
    def denied():
        raise AppError(ErrorCatalog.ACCESS_DENIED, details={"brand_id": "b1"})

    @app.get("/store-down")
    def store_down():
        raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    return TestClient(app, raise_server_exceptions=False)


def test_app_error_body():
    response = _client().get("/denied", headers={"X-Trace-ID": "trace-err"})

    assert response.status_code == 403
    assert response.json() == {
        "code": "ACCESS_DENIED",
        "message": "Access denied",
        "details": {"brand_id": "b1"},
        "trace_id": "trace-err",
    }


def test_operational_error_is_store_unavailable():
    response = _client().get("/store-down")

    assert response.status_code == 503
    assert response.json()["code"] == "STORE_UNAVAILABLE"


def test_unexpected_error_is_internal():
    response = _client().get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"
    assert response.json()["details"] == {"type": "RuntimeError"}


def test_category_status_codes():
    assert status_code_for(ErrorCatalog.TOKEN_EXPIRED) == 401
    assert status_code_for(ErrorCatalog.INSUFFICIENT_ROLE) == 403
    assert status_code_for(ErrorCatalog.NOT_FOUND) == 404
    assert status_code_for(ErrorCatalog.CONFLICT) == 409
    assert status_code_for(ErrorCatalog.VALIDATION_ERROR) == 422
    assert status_code_for(ErrorCatalog.STORE_UNAVAILABLE) == 503
    assert status_code_for(ErrorCatalog.INTERNAL_ERROR) == 500
