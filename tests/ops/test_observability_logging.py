import json
import logging
from types import SimpleNamespace

from starlette.requests import Request

from app.brandlog.middleware.observability import build_request_log_payload
from tests.helpers import auth_headers, create_user, login


def test_build_request_log_payload():
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/data/login-events",
        "headers": [],
        "route": SimpleNamespace(path="/data/login-events"),
    }
    request = Request(scope)
    request.state.trace_id = "trace-1"
    request.state.user_id = "user-1"
    request.state.role = "user"
    request.state.error_code = None

    payload = build_request_log_payload(
        request,
        status_code=200,
        latency_ms=12.3456,
        db_time_ms=4.5678,
    )

    assert payload["event"] == "http_request"
    assert payload["trace_id"] == "trace-1"
    assert payload["user_id"] == "user-1"
    assert payload["role"] == "user"
    assert payload["route"] == "/data/login-events"
    assert payload["method"] == "GET"
    assert payload["status_code"] == 200
    assert payload["latency_ms"] == 12.35
    assert payload["db_time_ms"] == 4.57


def test_request_log_carries_identity_and_error(client, db_session, caplog):
    user = create_user(db_session, username="u1")
    headers = auth_headers(login(client, "u1"))
    caplog.set_level(logging.INFO, logger="brandlog.request")

    client.get("/users", headers={**headers, "X-Trace-ID": "trace-obs"})

    entries = [json.loads(record.getMessage()) for record in caplog.records if record.name == "brandlog.request"]
    entry = next(item for item in entries if item["trace_id"] == "trace-obs")
    assert entry["route"] == "/users"
    assert entry["status_code"] == 403
    assert entry["user_id"] == str(user.id)
    assert entry["role"] == "user"
    assert entry["error_code"] == "INSUFFICIENT_ROLE"
    assert entry["db_time_ms"] is not None
