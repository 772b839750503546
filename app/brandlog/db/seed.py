import random
from datetime import date, timedelta

from sqlalchemy import select

from app.brandlog.core.config import settings
from app.brandlog.core.security import get_password_hash
from app.brandlog.db.models import (
    LOGIN_TYPE_PARENT,
    LOGIN_TYPE_TEAM_MEMBER,
    ROLE_ADMIN,
    ROLE_USER,
    Allocation,
    Brand,
    LoginEvent,
    User,
)

DEMO_BRANDS = [
    ("Brand A", "OUTLET001"),
    ("Brand B", "OUTLET002"),
]
DEMO_USERNAME = "user1"
DEMO_EMAIL = "user1@example.com"
DEMO_MANAGERS = ["John Doe", "Jane Smith", "Mike Johnson", "Sarah Wilson", "David Brown"]
MAX_LOGINS_PER_DAY = 10


def _get_or_create_admin(db):
    user = db.execute(select(User).where(User.username == settings.ADMIN_USERNAME)).scalars().first()
    if user:
        return user
    user = User(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        role=ROLE_ADMIN,
    )
    db.add(user)
    db.flush()
    return user


def _get_or_create_brand(db, name: str, master_outlet_id: str, created_by):
    brand = db.execute(select(Brand).where(Brand.name == name)).scalars().first()
    if brand:
        return brand
    brand = Brand(name=name, master_outlet_id=master_outlet_id, created_by=created_by)
    db.add(brand)
    db.flush()
    return brand


def _get_or_create_demo_user(db, password: str):
    user = db.execute(select(User).where(User.username == DEMO_USERNAME)).scalars().first()
    if user:
        return user
    user = User(
        username=DEMO_USERNAME,
        email=DEMO_EMAIL,
        hashed_password=get_password_hash(password),
        role=ROLE_USER,
    )
    db.add(user)
    db.flush()
    return user


def _ensure_allocation(db, user, brand, allocated_by) -> None:
    existing = (
        db.execute(select(Allocation).where(Allocation.user_id == user.id, Allocation.brand_id == brand.id))
        .scalars()
        .first()
    )
    if existing:
        return
    db.add(Allocation(user_id=user.id, brand_id=brand.id, allocated_by=allocated_by))


def _demo_events(brand, day: date, rng: random.Random) -> list[LoginEvent]:
    events = []
    for _ in range(rng.randint(0, MAX_LOGINS_PER_DAY)):
        events.append(
            LoginEvent(
                store_id=f"STORE{rng.randrange(1000):03d}",
                client_store_id=f"CLIENT{rng.randrange(500):03d}",
                manager_name=rng.choice(DEMO_MANAGERS),
                manager_number=f"+1{rng.randrange(1_000_000_000):09d}",
                login_type=LOGIN_TYPE_PARENT if rng.random() > 0.3 else LOGIN_TYPE_TEAM_MEMBER,
                login_date=day,
                brand_id=brand.id,
            )
        )
    return events


def run_seed(db):
    admin = _get_or_create_admin(db)
    db.commit()
    return admin


def seed_demo_data(
    db,
    *,
    days: int = 30,
    seed: int | None = None,
    user_password: str | None = None,
    today: date | None = None,
) -> dict:
    """Create demo brands and pseudo-random login events for the last ``days`` days.

    The demo user is only created when ``user_password`` is given; it is
    allocated to the first demo brand.
    """
    rng = random.Random(seed)
    today = today or date.today()
    admin = _get_or_create_admin(db)
    brands = [_get_or_create_brand(db, name, outlet, admin.id) for name, outlet in DEMO_BRANDS]

    demo_user = None
    if user_password:
        demo_user = _get_or_create_demo_user(db, user_password)
        _ensure_allocation(db, demo_user, brands[0], admin.id)

    created = 0
    for offset in range(days, 0, -1):
        day = today - timedelta(days=offset)
        for brand in brands:
            events = _demo_events(brand, day, rng)
            db.add_all(events)
            created += len(events)
    db.commit()
    return {
        "brands": len(brands),
        "events": created,
        "demo_user": demo_user.username if demo_user else None,
    }
