from sqlalchemy.exc import OperationalError


def test_ready(client):
    response = client.get("/ready")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ready"
    assert payload["trace_id"]


def test_ready_reports_store_unavailable(client):
    from app.brandlog.routers.ops import get_db

    class BrokenSession:
        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    def broken_db():
        yield BrokenSession()

    client.app.dependency_overrides[get_db] = broken_db
    try:
        response = client.get("/ready")
    finally:
        client.app.dependency_overrides.clear()

    assert response.status_code == 503
    payload = response.json()
    assert payload["code"] == "STORE_UNAVAILABLE"
    assert payload["details"] == {"type": "OperationalError"}
