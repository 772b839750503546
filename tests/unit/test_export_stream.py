import json
import logging
import uuid
from datetime import date

from sqlalchemy import create_engine

from app.brandlog.core.scope import ALL_BRANDS, Scope
from app.brandlog.db.models import Base, Brand, LoginEvent
from app.brandlog.services.exports import (
    EXPORT_COLUMNS,
    export_filename,
    sanitize_filename,
    stream_login_events_csv,
)
from sqlalchemy.orm import Session


def _engine_with_events(count: int):
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    with Session(engine) as db:
        brand = Brand(id=uuid.uuid4(), name="Acme", master_outlet_id="OUT1")
        db.add(brand)
        db.flush()
        for index in range(count):
            db.add(
                LoginEvent(
                    store_id=f"STORE{index:04d}",
                    client_store_id="CLIENT",
                    manager_name="Jane Smith",
                    manager_number="+1555",
                    login_type="parent",
                    login_date=date(2024, 1, 5),
                    brand_id=brand.id,
                )
            )
        db.commit()
    return engine


def _admin_scope() -> Scope:
    return Scope(user_id=uuid.uuid4(), role="admin", allowed_brand_ids=ALL_BRANDS)


def test_stream_emits_bounded_chunks():
    engine = _engine_with_events(200)

    chunks = list(stream_login_events_csv(engine, _admin_scope(), batch_size=25, chunk_bytes=1024))

    assert len(chunks) > 1
    assert all(len(chunk) < 1024 + 256 for chunk in chunks)
    lines = b"".join(chunks).decode("utf-8").split("\r\n")
    assert lines[0].split(",")[0] == '"Brand Name"'
    assert len([line for line in lines[1:] if line]) == 200


def test_closing_stream_early_stops_production():
    engine = _engine_with_events(200)

    stream = stream_login_events_csv(engine, _admin_scope(), batch_size=10, chunk_bytes=256)
    first = next(stream)
    stream.close()

    assert first.startswith(b'"Brand Name"')


def test_empty_scope_streams_header_only(caplog):
    engine = _engine_with_events(3)
    scope = Scope(user_id=uuid.uuid4(), role="user", allowed_brand_ids=frozenset())
    caplog.set_level(logging.INFO, logger="app.brandlog.services.exports")

    chunks = list(stream_login_events_csv(engine, scope))

    assert len(chunks) == 1
    assert chunks[0].decode("utf-8").count("\r\n") == 1
    assert chunks[0].decode("utf-8").startswith('"' + EXPORT_COLUMNS[0])
    entries = [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.name == "app.brandlog.services.exports"
    ]
    assert entries[-1]["event"] == "export_streamed"
    assert entries[-1]["rows"] == 0
    assert entries[-1]["user_id"] == str(scope.user_id)


def test_sanitize_filename():
    assert sanitize_filename("../Acme Brand!.txt", fallback="x") == "Acme_Brand.csv"
    assert sanitize_filename("", fallback="login_events") == "login_events.csv"
    assert sanitize_filename("***", fallback="login_events") == "login_events.csv"


def test_export_filename_uses_range():
    scope = Scope(
        user_id=uuid.uuid4(),
        role="admin",
        allowed_brand_ids=ALL_BRANDS,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )

    assert (
        export_filename("all_brands_login_data", scope, today=date(2024, 2, 1))
        == "all_brands_login_data_2024-01-01_to_2024-01-31_2024-02-01.csv"
    )
