from fastapi import FastAPI

from app.brandlog.api import api_router
from app.brandlog.core.config import settings
from app.brandlog.core.errors import setup_exception_handlers
from app.brandlog.core.logging import configure_logging
from app.brandlog.middleware.identity import IdentityContextMiddleware
from app.brandlog.middleware.observability import ObservabilityMiddleware
from app.brandlog.middleware.trace import TraceIdMiddleware
from app.brandlog.openapi import harden_openapi_schema


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(IdentityContextMiddleware)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    app.openapi = lambda: harden_openapi_schema(app)
    return app


app = create_app()
