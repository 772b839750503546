from __future__ import annotations

import csv
import io
import logging
import os
import re
from datetime import date, datetime
from typing import Iterator

from sqlalchemy.orm import Session

from app.brandlog.core.config import settings
from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.logging import log_event
from app.brandlog.core.metrics import metrics
from app.brandlog.core.scope import Action, Operation, ResourceKind, Scope, ScopeFilters
from app.brandlog.services.login_events import ordered_events_statement

logger = logging.getLogger(__name__)

EXPORT_TARGET_MINE = "mine"
EXPORT_TARGET_BRAND = "brand"
EXPORT_TARGET_ALL = "all"
EXPORT_TARGETS = (EXPORT_TARGET_MINE, EXPORT_TARGET_BRAND, EXPORT_TARGET_ALL)

EXPORT_COLUMNS = [
    "Brand Name",
    "Master Outlet ID",
    "Store ID",
    "Client Store ID",
    "Store Manager Name",
    "Store Manager Number",
    "Login Type",
    "Login Date",
]


def export_operation(target: str, filters: ScopeFilters) -> Operation:
    if target not in EXPORT_TARGETS:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "invalid export target"})
    return Operation(
        resource_kind=ResourceKind.LOGIN_EVENT,
        action=Action.EXPORT,
        filters=filters,
        pointed=target == EXPORT_TARGET_BRAND,
        own_allocations_only=target == EXPORT_TARGET_MINE,
    )


def sanitize_filename(name: str | None, *, fallback: str) -> str:
    if not name:
        return f"{fallback}.csv"
    base = os.path.basename(name)
    base = re.sub(r"\.[^.]+$", "", base)
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("._-")
    if not cleaned:
        cleaned = fallback
    return f"{cleaned}.csv"


def export_filename(prefix: str, scope: Scope, *, today: date | None = None) -> str:
    today = today or date.today()
    if scope.start_date and scope.end_date:
        date_range = f"{scope.start_date.isoformat()}_to_{scope.end_date.isoformat()}"
    else:
        date_range = "all_time"
    return sanitize_filename(f"{prefix}_{date_range}_{today.isoformat()}.csv", fallback="login_events")


def _format_cell(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def csv_row(row) -> list:
    return [
        _format_cell(value)
        for value in (
            row.brand_name,
            row.master_outlet_id,
            row.store_id,
            row.client_store_id,
            row.manager_name,
            row.manager_number,
            row.login_type,
            row.login_date,
        )
    ]


class _ChunkBuffer:
    def __init__(self) -> None:
        self.buffer = io.StringIO()
        self.writer = csv.writer(self.buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\r\n")

    def write(self, values: list) -> None:
        self.writer.writerow(values)

    def size(self) -> int:
        return self.buffer.tell()

    def drain(self) -> bytes:
        data = self.buffer.getvalue()
        self.buffer.seek(0)
        self.buffer.truncate(0)
        return data.encode("utf-8")


def stream_login_events_csv(
    bind,
    scope: Scope,
    *,
    batch_size: int | None = None,
    chunk_bytes: int | None = None,
) -> Iterator[bytes]:
    """Yield the scoped events as CSV chunks.

    Rows are fetched ``batch_size`` at a time on a dedicated session, and a
    chunk is emitted whenever ``chunk_bytes`` have been buffered, so memory
    stays bounded regardless of result size. Closing the generator (client
    disconnect) releases the cursor and session immediately. An empty scope
    still produces the header row.
    """
    batch_size = batch_size or settings.EXPORTS_BATCH_SIZE
    chunk_bytes = chunk_bytes or settings.EXPORTS_CHUNK_BYTES
    chunk = _ChunkBuffer()
    chunk.write(EXPORT_COLUMNS)
    row_count = 0
    try:
        if not scope.is_empty:
            with Session(bind) as session:
                result = session.execute(ordered_events_statement(scope).execution_options(yield_per=batch_size))
                try:
                    for row in result:
                        chunk.write(csv_row(row))
                        row_count += 1
                        if chunk.size() >= chunk_bytes:
                            yield chunk.drain()
                finally:
                    result.close()
        if chunk.size():
            yield chunk.drain()
    finally:
        metrics.increment_export_rows(row_count)
        log_event(logger, "export_streamed", user_id=str(scope.user_id), rows=row_count, **scope.snapshot())
