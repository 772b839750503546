"""Scoped login-event queries.

``event_conditions`` is the only place a :class:`~app.brandlog.core.scope.Scope`
is turned into a WHERE clause. Listing, counters, per-day and per-brand
summaries and the CSV export all select from ``scoped_events_statement`` so
they always see the same rows for the same caller and filters.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterator

from sqlalchemy import Select, case, distinct, func, select

from app.brandlog.core.config import settings
from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.scope import Scope
from app.brandlog.db.models import LOGIN_TYPE_PARENT, LOGIN_TYPE_TEAM_MEMBER, Brand, LoginEvent
from app.brandlog.repos.brands import BrandRepository
from app.brandlog.repos.login_events import LoginEventRepository

EVENT_ORDERING = (LoginEvent.login_date.desc(), LoginEvent.id.desc())


@dataclass(frozen=True)
class EventSummary:
    total_logins: int = 0
    unique_stores: int = 0
    unique_managers: int = 0
    parent_logins: int = 0
    team_member_logins: int = 0


@dataclass(frozen=True)
class DailySummaryRow:
    login_date: date
    summary: EventSummary


@dataclass(frozen=True)
class BrandSummaryRow:
    brand_id: object
    brand_name: str
    master_outlet_id: str
    summary: EventSummary


def event_conditions(scope: Scope) -> list:
    conditions = []
    if not scope.unrestricted:
        # NULL brand_id never matches IN, so brand-less events stay admin-only
        conditions.append(LoginEvent.brand_id.in_(sorted(scope.allowed_brand_ids, key=str)))
    if scope.explicit_brand_id is not None:
        conditions.append(LoginEvent.brand_id == scope.explicit_brand_id)
    if scope.start_date is not None:
        conditions.append(LoginEvent.login_date >= scope.start_date)
    if scope.end_date is not None:
        conditions.append(LoginEvent.login_date <= scope.end_date)
    return conditions


def brand_conditions(scope: Scope) -> list:
    conditions = []
    if not scope.unrestricted:
        conditions.append(Brand.id.in_(sorted(scope.allowed_brand_ids, key=str)))
    if scope.explicit_brand_id is not None:
        conditions.append(Brand.id == scope.explicit_brand_id)
    return conditions


def scoped_events_statement(scope: Scope) -> Select:
    return (
        select(
            LoginEvent.id,
            LoginEvent.store_id,
            LoginEvent.client_store_id,
            LoginEvent.manager_name,
            LoginEvent.manager_number,
            LoginEvent.login_type,
            LoginEvent.login_date,
            LoginEvent.brand_id,
            LoginEvent.created_at,
            Brand.name.label("brand_name"),
            Brand.master_outlet_id,
        )
        .outerjoin(Brand, Brand.id == LoginEvent.brand_id)
        .where(*event_conditions(scope))
    )


def ordered_events_statement(scope: Scope) -> Select:
    return scoped_events_statement(scope).order_by(*EVENT_ORDERING)


def _counters(rows):
    return (
        func.count(rows.c.id).label("total_logins"),
        func.count(distinct(rows.c.store_id)).label("unique_stores"),
        func.count(distinct(rows.c.manager_number)).label("unique_managers"),
        func.coalesce(func.sum(case((rows.c.login_type == LOGIN_TYPE_PARENT, 1), else_=0)), 0).label(
            "parent_logins"
        ),
        func.coalesce(func.sum(case((rows.c.login_type == LOGIN_TYPE_TEAM_MEMBER, 1), else_=0)), 0).label(
            "team_member_logins"
        ),
    )


def _summary_from(row) -> EventSummary:
    return EventSummary(
        total_logins=int(row.total_logins or 0),
        unique_stores=int(row.unique_stores or 0),
        unique_managers=int(row.unique_managers or 0),
        parent_logins=int(row.parent_logins or 0),
        team_member_logins=int(row.team_member_logins or 0),
    )


def clamp_page_size(limit: int | None) -> int:
    if not limit or limit <= 0:
        return settings.EVENTS_DEFAULT_PAGE_SIZE
    return min(limit, settings.EVENTS_MAX_PAGE_SIZE)


class EventListing:
    """Lazy page of scoped events; each iteration re-runs the query."""

    def __init__(self, db, scope: Scope, *, limit: int | None = None, offset: int = 0) -> None:
        self.db = db
        self.scope = scope
        self.limit = clamp_page_size(limit)
        self.offset = max(offset, 0)

    def statement(self) -> Select:
        return ordered_events_statement(self.scope).limit(self.limit).offset(self.offset)

    def __iter__(self) -> Iterator[dict]:
        if self.scope.is_empty:
            return iter(())
        return (dict(row) for row in self.db.execute(self.statement()).mappings())


def list_events(db, scope: Scope, *, limit: int | None = None, offset: int = 0) -> EventListing:
    return EventListing(db, scope, limit=limit, offset=offset)


def summarize(db, scope: Scope) -> EventSummary:
    if scope.is_empty:
        return EventSummary()
    rows = scoped_events_statement(scope).subquery()
    row = db.execute(select(*_counters(rows))).one()
    return _summary_from(row)


def daily_summary(db, scope: Scope) -> list[DailySummaryRow]:
    if scope.is_empty:
        return []
    rows = scoped_events_statement(scope).subquery()
    stmt = select(rows.c.login_date, *_counters(rows)).group_by(rows.c.login_date).order_by(rows.c.login_date.desc())
    return [DailySummaryRow(login_date=row.login_date, summary=_summary_from(row)) for row in db.execute(stmt)]


def brand_summary(db, scope: Scope) -> list[BrandSummaryRow]:
    """Per-brand counters; every brand in scope is listed, absent counts are zero."""
    if scope.is_empty:
        return []
    rows = scoped_events_statement(scope).subquery()
    counts = select(rows.c.brand_id, *_counters(rows)).group_by(rows.c.brand_id).subquery()
    total = func.coalesce(counts.c.total_logins, 0)
    stmt = (
        select(
            Brand.id,
            Brand.name,
            Brand.master_outlet_id,
            total.label("total_logins"),
            func.coalesce(counts.c.unique_stores, 0).label("unique_stores"),
            func.coalesce(counts.c.unique_managers, 0).label("unique_managers"),
            func.coalesce(counts.c.parent_logins, 0).label("parent_logins"),
            func.coalesce(counts.c.team_member_logins, 0).label("team_member_logins"),
        )
        .outerjoin(counts, counts.c.brand_id == Brand.id)
        .where(*brand_conditions(scope))
        .order_by(total.desc(), Brand.name)
    )
    return [
        BrandSummaryRow(
            brand_id=row.id,
            brand_name=row.name,
            master_outlet_id=row.master_outlet_id,
            summary=_summary_from(row),
        )
        for row in db.execute(stmt)
    ]


def list_brands(db, scope: Scope) -> list[Brand]:
    if scope.is_empty:
        return []
    stmt = select(Brand).where(*brand_conditions(scope)).order_by(Brand.created_at.desc(), Brand.name)
    return db.execute(stmt).scalars().all()


def append_events(db, payloads: list[dict]) -> list[LoginEvent]:
    brand_ids = {payload["brand_id"] for payload in payloads if payload.get("brand_id") is not None}
    missing = brand_ids - BrandRepository(db).existing_ids(brand_ids)
    if missing:
        raise AppError(
            ErrorCatalog.NOT_FOUND,
            details={"message": "Brand not found", "brand_ids": sorted(str(brand_id) for brand_id in missing)},
        )
    events = [LoginEvent(**payload) for payload in payloads]
    return LoginEventRepository(db).append(events)
