import uuid
from datetime import date

from app.brandlog.core.security import get_password_hash
from app.brandlog.db.models import Allocation, Brand, LoginEvent, User

DEFAULT_PASSWORD = "Pass1234!"


def create_user(db_session, *, username: str, role: str = "user", password: str = DEFAULT_PASSWORD, email=None):
    user = User(
        id=uuid.uuid4(),
        username=username,
        email=email or f"{username}@example.com",
        hashed_password=get_password_hash(password),
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    return user


def create_brand(db_session, *, name: str, master_outlet_id: str = "OUT1", created_by=None):
    brand = Brand(id=uuid.uuid4(), name=name, master_outlet_id=master_outlet_id, created_by=created_by)
    db_session.add(brand)
    db_session.commit()
    return brand


def allocate(db_session, user, brand, *, allocated_by=None):
    allocation = Allocation(user_id=user.id, brand_id=brand.id, allocated_by=allocated_by)
    db_session.add(allocation)
    db_session.commit()
    return allocation


def add_event(
    db_session,
    brand,
    *,
    login_date: date = date(2024, 1, 5),
    login_type: str = "parent",
    store_id: str = "STORE001",
    client_store_id: str = "CLIENT001",
    manager_name: str = "Jane Smith",
    manager_number: str = "+1555000111",
):
    event = LoginEvent(
        store_id=store_id,
        client_store_id=client_store_id,
        manager_name=manager_name,
        manager_number=manager_number,
        login_type=login_type,
        login_date=login_date,
        brand_id=brand.id if brand is not None else None,
    )
    db_session.add(event)
    db_session.commit()
    return event


def login(client, username: str, password: str = DEFAULT_PASSWORD) -> str:
    response = client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
