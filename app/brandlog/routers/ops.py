from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.brandlog.core.context import trace_id_of
from app.brandlog.core.error_catalog import ErrorCatalog
from app.brandlog.core.errors import error_response, status_code_for
from app.brandlog.core.metrics import metrics
from app.brandlog.db.session import get_db

router = APIRouter()
metrics_router = APIRouter()


@router.get("/health")
async def health(request: Request):
    return {"status": "ok", "trace_id": trace_id_of(request)}


@router.get("/ready")
def ready(request: Request, db=Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        error = ErrorCatalog.STORE_UNAVAILABLE
        request.state.error_code = error.code
        return error_response(
            code=error.code,
            message=error.message,
            details={"type": exc.__class__.__name__},
            trace_id=trace_id_of(request),
            status_code=status_code_for(error),
        )
    return {"status": "ready", "trace_id": trace_id_of(request)}


@metrics_router.get("/ops/metrics")
def prometheus_metrics():
    snapshot = metrics.render()
    return Response(content=snapshot.content, media_type=snapshot.content_type)
