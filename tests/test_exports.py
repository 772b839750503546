import csv
import io
import uuid
from datetime import date

from tests.helpers import add_event, allocate, auth_headers, create_brand, create_user, login

HEADER = (
    '"Brand Name","Master Outlet ID","Store ID","Client Store ID",'
    '"Store Manager Name","Store Manager Number","Login Type","Login Date"'
)


def _rows(response) -> list[list[str]]:
    return list(csv.reader(io.StringIO(response.text)))


def _world(db_session):
    user = create_user(db_session, username="u1")
    create_user(db_session, username="root", role="admin")
    acme = create_brand(db_session, name="Acme", master_outlet_id="OUT1")
    other = create_brand(db_session, name="Other", master_outlet_id="OUT2")
    allocate(db_session, user, acme)
    add_event(db_session, acme, login_date=date(2024, 1, 5))
    add_event(db_session, other, login_date=date(2024, 1, 6), store_id="STORE002")
    return user, acme, other


def test_export_mine_example(client, db_session):
    _world(db_session)
    headers = auth_headers(login(client, "u1"))

    response = client.get("/exports/login-events", params={"target": "mine"}, headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"].startswith("attachment;")
    assert "my_login_data_all_time_" in response.headers["content-disposition"]
    lines = response.text.strip("\r\n").split("\r\n")
    assert lines[0] == HEADER
    assert len(lines) == 2
    assert lines[1].startswith('"Acme","OUT1","STORE001","CLIENT001"')
    assert lines[1].endswith('"parent","2024-01-05"')


def test_export_alias_matches_target(client, db_session):
    _world(db_session)
    headers = auth_headers(login(client, "u1"))

    target = client.get("/exports/login-events", params={"target": "mine"}, headers=headers)
    alias = client.get("/exports/my-data", headers=headers)

    assert alias.text == target.text


def test_export_empty_is_header_only(client, db_session):
    create_user(db_session, username="loner")
    headers = auth_headers(login(client, "loner"))

    response = client.get("/exports/all-brands", headers=headers)

    assert response.status_code == 200
    assert response.text == HEADER + "\r\n"


def test_export_all_is_scoped_for_users(client, db_session):
    _world(db_session)
    user_headers = auth_headers(login(client, "u1"))
    admin_headers = auth_headers(login(client, "root"))

    user_rows = _rows(client.get("/exports/login-events", params={"target": "all"}, headers=user_headers))
    admin_rows = _rows(client.get("/exports/all-brands", headers=admin_headers))

    assert [row[0] for row in user_rows[1:]] == ["Acme"]
    assert [row[0] for row in admin_rows[1:]] == ["Other", "Acme"]


def test_admin_mine_uses_own_allocations(client, db_session):
    _world(db_session)
    headers = auth_headers(login(client, "root"))

    response = client.get("/exports/my-data", headers=headers)

    assert response.text == HEADER + "\r\n"


def test_export_pointed_brand(client, db_session):
    _, acme, other = _world(db_session)
    headers = auth_headers(login(client, "u1"))

    allowed = client.get(f"/exports/brands/{acme.id}", headers=headers)
    denied = client.get(
        "/exports/login-events",
        params={"target": "brand", "brand_id": str(other.id)},
        headers=headers,
    )

    assert allowed.status_code == 200
    assert 'filename="Acme_login_data_all_time_' in allowed.headers["content-disposition"]
    assert len(_rows(allowed)) == 2
    assert denied.status_code == 403
    assert denied.json()["code"] == "ACCESS_DENIED"


def test_export_brand_target_requires_brand(client, db_session):
    _world(db_session)
    headers = auth_headers(login(client, "u1"))

    response = client.get("/exports/login-events", params={"target": "brand"}, headers=headers)

    assert response.status_code == 422


def test_admin_export_unknown_brand(client, db_session):
    _world(db_session)
    headers = auth_headers(login(client, "root"))

    response = client.get(f"/exports/brands/{uuid.uuid4()}", headers=headers)

    assert response.status_code == 404


def test_export_invalid_target(client, db_session):
    _world(db_session)
    headers = auth_headers(login(client, "u1"))

    response = client.get("/exports/login-events", params={"target": "everything"}, headers=headers)

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_export_date_range_in_filename(client, db_session):
    _world(db_session)
    headers = auth_headers(login(client, "root"))

    response = client.get(
        "/exports/all-brands",
        params={"start_date": "2024-01-06", "end_date": "2024-01-31"},
        headers=headers,
    )

    assert "all_brands_login_data_2024-01-06_to_2024-01-31_" in response.headers["content-disposition"]
    assert [row[0] for row in _rows(response)[1:]] == ["Other"]
