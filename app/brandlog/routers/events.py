import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from app.brandlog.core.context import trace_id_of
from app.brandlog.core.deps import get_current_user, get_scope_resolver
from app.brandlog.core.scope import Action, Operation, ResourceKind, ScopeFilters
from app.brandlog.db.session import get_db
from app.brandlog.schemas.events import (
    BrandSummaryItem,
    BrandSummaryResponse,
    DailySummaryItem,
    DailySummaryResponse,
    EventSummaryOut,
    ListFilters,
    LoginEventBatchRequest,
    LoginEventBatchResponse,
    LoginEventListResponse,
    LoginEventRow,
)
from app.brandlog.services.audit import AuditService
from app.brandlog.services.login_events import (
    append_events,
    brand_summary,
    daily_summary,
    list_events,
    summarize,
)

router = APIRouter()


def _read_scope(current_user, resolver, filters: ScopeFilters):
    return resolver.authorize(current_user, Operation(ResourceKind.LOGIN_EVENT, Action.READ, filters=filters))


def _event_row(row: dict) -> LoginEventRow:
    return LoginEventRow(
        id=row["id"],
        store_id=row["store_id"],
        client_store_id=row["client_store_id"],
        manager_name=row["manager_name"],
        manager_number=row["manager_number"],
        login_type=row["login_type"],
        login_date=row["login_date"],
        brand_id=str(row["brand_id"]) if row["brand_id"] else None,
        brand_name=row["brand_name"],
        master_outlet_id=row["master_outlet_id"],
        created_at=row["created_at"],
    )


def _summary_out(summary) -> dict:
    return {
        "total_logins": summary.total_logins,
        "unique_stores": summary.unique_stores,
        "unique_managers": summary.unique_managers,
        "parent_logins": summary.parent_logins,
        "team_member_logins": summary.team_member_logins,
    }


@router.get("/login-events", response_model=LoginEventListResponse, summary="List login events in scope")
def list_login_events(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    brand_id: uuid.UUID | None = Query(None),
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    filters = ScopeFilters(brand_id=brand_id, start_date=start_date, end_date=end_date)
    scope = _read_scope(current_user, resolver, filters)
    listing = list_events(db, scope, limit=limit, offset=offset)
    summary = summarize(db, scope)
    return LoginEventListResponse(
        rows=[_event_row(row) for row in listing],
        summary=EventSummaryOut(**_summary_out(summary)),
        total=summary.total_logins,
        limit=listing.limit,
        offset=listing.offset,
        filters=ListFilters(**scope.snapshot()),
    )


@router.get("/daily-summary", response_model=DailySummaryResponse, summary="Per-day login counters")
def get_daily_summary(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    brand_id: uuid.UUID | None = Query(None),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    filters = ScopeFilters(brand_id=brand_id, start_date=start_date, end_date=end_date)
    scope = _read_scope(current_user, resolver, filters)
    return DailySummaryResponse(
        daily_summary=[
            DailySummaryItem(login_date=item.login_date, **_summary_out(item.summary))
            for item in daily_summary(db, scope)
        ],
        filters=ListFilters(**scope.snapshot()),
    )


@router.get("/brand-summary", response_model=BrandSummaryResponse, summary="Per-brand login counters")
def get_brand_summary(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    brand_id: uuid.UUID | None = Query(None),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    filters = ScopeFilters(brand_id=brand_id, start_date=start_date, end_date=end_date)
    scope = _read_scope(current_user, resolver, filters)
    return BrandSummaryResponse(
        brand_summary=[
            BrandSummaryItem(
                brand_id=str(item.brand_id),
                brand_name=item.brand_name,
                master_outlet_id=item.master_outlet_id,
                **_summary_out(item.summary),
            )
            for item in brand_summary(db, scope)
        ],
        filters=ListFilters(**scope.snapshot()),
    )


@router.post(
    "/login-events",
    response_model=LoginEventBatchResponse,
    status_code=201,
    summary="Append login events",
)
def create_login_events(
    request: Request,
    payload: LoginEventBatchRequest,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.LOGIN_EVENT, Action.WRITE))
    events = append_events(db, [event.model_dump() for event in payload.events])
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "login_events.append",
        entity_type="login_event",
        entity_id=None,
        trace_id=trace_id,
        metadata={"created": len(events)},
    )
    return LoginEventBatchResponse(created=len(events), ids=[event.id for event in events], trace_id=trace_id)
