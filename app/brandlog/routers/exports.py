import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from app.brandlog.core.deps import get_current_user, get_scope_resolver
from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.scope import ScopeFilters
from app.brandlog.db.session import get_db
from app.brandlog.repos.brands import BrandRepository
from app.brandlog.services.exports import (
    EXPORT_TARGET_ALL,
    EXPORT_TARGET_BRAND,
    EXPORT_TARGET_MINE,
    export_filename,
    export_operation,
    stream_login_events_csv,
)

router = APIRouter()

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _export_response(db, current_user, resolver, target: str, filters: ScopeFilters) -> StreamingResponse:
    # authorization and validation happen before the first byte is sent
    scope = resolver.authorize(current_user, export_operation(target, filters))
    if target == EXPORT_TARGET_BRAND:
        brand = BrandRepository(db).get_by_id(filters.brand_id)
        if brand is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "Brand not found"})
        prefix = f"{brand.name}_login_data"
    elif target == EXPORT_TARGET_MINE:
        prefix = "my_login_data"
    else:
        prefix = "all_brands_login_data"

    filename = export_filename(prefix, scope)
    return StreamingResponse(
        stream_login_events_csv(db.get_bind(), scope),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/login-events", summary="Export login events as CSV")
def export_login_events(
    target: str = Query(EXPORT_TARGET_ALL),
    brand_id: uuid.UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    filters = ScopeFilters(brand_id=brand_id, start_date=start_date, end_date=end_date)
    return _export_response(db, current_user, resolver, target, filters)


@router.get("/my-data", summary="Export login events of allocated brands")
def export_my_data(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    filters = ScopeFilters(start_date=start_date, end_date=end_date)
    return _export_response(db, current_user, resolver, EXPORT_TARGET_MINE, filters)


@router.get("/all-brands", summary="Export login events of every brand in scope")
def export_all_brands(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    filters = ScopeFilters(start_date=start_date, end_date=end_date)
    return _export_response(db, current_user, resolver, EXPORT_TARGET_ALL, filters)


@router.get("/brands/{brand_id}", summary="Export login events of one brand")
def export_brand(
    brand_id: uuid.UUID,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    filters = ScopeFilters(brand_id=brand_id, start_date=start_date, end_date=end_date)
    return _export_response(db, current_user, resolver, EXPORT_TARGET_BRAND, filters)
