from datetime import date

import pytest
from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.orm import sessionmaker

from app.brandlog.core.config import settings
from app.brandlog.core.security import verify_password
from app.brandlog.db.models import Allocation, Brand, LoginEvent, User
from app.brandlog.db.seed import run_seed, seed_demo_data


@pytest.fixture()
def seeded_session(migrate_sqlite):
    engine = create_engine(migrate_sqlite("seed.db"), future=True)
    db = sessionmaker(bind=engine, future=True)()
    yield db
    db.close()
    engine.dispose()


def test_migrations_apply(migrate_sqlite):
    database_url = migrate_sqlite("migrations.db")

    engine = create_engine(database_url, future=True)
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())

    assert {"users", "brands", "user_allocations", "login_events", "audit_events"} <= tables

    indexes = {index["name"] for index in inspector.get_indexes("login_events")}
    assert "ix_login_events_brand_date" in indexes
    unique = {constraint["name"] for constraint in inspector.get_unique_constraints("user_allocations")}
    assert "uq_user_allocations_user_brand" in unique
    engine.dispose()


def test_run_seed_is_idempotent(seeded_session):
    run_seed(seeded_session)
    run_seed(seeded_session)

    admins = seeded_session.execute(select(User).where(User.username == settings.ADMIN_USERNAME)).scalars().all()
    assert len(admins) == 1
    assert admins[0].role == "admin"
    assert verify_password(settings.ADMIN_PASSWORD, admins[0].hashed_password)


def test_seed_demo_data_is_reproducible(seeded_session):
    db = seeded_session
    summary = seed_demo_data(db, days=5, seed=7, user_password="DemoPass1", today=date(2024, 1, 10))

    assert summary["brands"] == 2
    assert summary["demo_user"] == "user1"
    events = db.execute(select(LoginEvent)).scalars().all()
    assert len(events) == summary["events"]
    assert {event.login_date for event in events} <= {date(2024, 1, day) for day in range(5, 10)}
    assert {event.login_type for event in events} <= {"parent", "team_member"}
    assert db.execute(select(func.count()).select_from(Brand)).scalar_one() == 2
    assert db.execute(select(func.count()).select_from(Allocation)).scalar_one() == 1


def test_seed_demo_data_without_password_skips_user(seeded_session):
    summary = seed_demo_data(seeded_session, days=1, seed=1)

    assert summary["demo_user"] is None
    assert seeded_session.execute(select(User).where(User.username == "user1")).scalars().first() is None
