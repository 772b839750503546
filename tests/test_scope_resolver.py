import logging
import uuid
from datetime import date

import pytest

from app.brandlog.core.error_catalog import AppError
from app.brandlog.core.scope import ALL_BRANDS, Action, Operation, ResourceKind, ScopeFilters, ScopeResolver
from tests.helpers import allocate, create_brand, create_user


def _events(filters: ScopeFilters | None = None, **kwargs) -> Operation:
    return Operation(ResourceKind.LOGIN_EVENT, Action.READ, filters=filters or ScopeFilters(), **kwargs)


def test_admin_scope_is_unrestricted(db_session):
    admin = create_user(db_session, username="root", role="admin")

    scope = ScopeResolver(db_session).authorize(admin, _events())

    assert scope.allowed_brand_ids == ALL_BRANDS
    assert scope.unrestricted
    assert not scope.is_empty


def test_user_scope_is_allocation_set(db_session):
    user = create_user(db_session, username="u1")
    acme = create_brand(db_session, name="Acme")
    create_brand(db_session, name="Other")
    allocate(db_session, user, acme)

    scope = ScopeResolver(db_session).authorize(user, _events())

    assert scope.allowed_brand_ids == frozenset({acme.id})
    assert scope.permits_brand(acme.id)
    assert not scope.permits_brand(None)


def test_user_without_allocations_has_empty_scope(db_session):
    user = create_user(db_session, username="u1")

    scope = ScopeResolver(db_session).authorize(user, _events())

    assert scope.allowed_brand_ids == frozenset()
    assert scope.is_empty


def test_foreign_brand_filter_narrows_to_nothing(db_session):
    user = create_user(db_session, username="u1")
    acme = create_brand(db_session, name="Acme")
    other = create_brand(db_session, name="Other")
    allocate(db_session, user, acme)

    scope = ScopeResolver(db_session).authorize(user, _events(ScopeFilters(brand_id=other.id)))

    assert scope.explicit_brand_id == other.id
    assert scope.is_empty


def test_pointed_foreign_brand_is_denied(db_session, caplog):
    user = create_user(db_session, username="u1")
    other = create_brand(db_session, name="Other")
    caplog.set_level(logging.INFO, logger="app.brandlog.core.scope")

    with pytest.raises(AppError) as excinfo:
        ScopeResolver(db_session).authorize(user, _events(ScopeFilters(brand_id=other.id), pointed=True))

    assert excinfo.value.error.code == "ACCESS_DENIED"
    assert excinfo.value.is_forbidden
    assert any('"event": "access_denied"' in record.getMessage() for record in caplog.records)


def test_pointed_without_brand_is_validation_error(db_session):
    user = create_user(db_session, username="u1")

    with pytest.raises(AppError) as excinfo:
        ScopeResolver(db_session).authorize(user, _events(pointed=True))

    assert excinfo.value.error.code == "VALIDATION_ERROR"


@pytest.mark.parametrize(
    "resource_kind, action",
    [
        (ResourceKind.BRAND, Action.WRITE),
        (ResourceKind.ALLOCATION, Action.WRITE),
        (ResourceKind.ALLOCATION, Action.READ),
        (ResourceKind.USER_LIST, Action.READ),
        (ResourceKind.LOGIN_EVENT, Action.WRITE),
    ],
)
def test_admin_only_operations(db_session, resource_kind, action):
    user = create_user(db_session, username="u1")

    with pytest.raises(AppError) as excinfo:
        ScopeResolver(db_session).authorize(user, Operation(resource_kind, action))

    assert excinfo.value.error.code == "INSUFFICIENT_ROLE"


def test_own_allocations_only_applies_to_admins(db_session):
    admin = create_user(db_session, username="root", role="admin")
    acme = create_brand(db_session, name="Acme")
    create_brand(db_session, name="Other")
    allocate(db_session, admin, acme)

    scope = ScopeResolver(db_session).authorize(admin, _events(own_allocations_only=True))

    assert scope.allowed_brand_ids == frozenset({acme.id})


def test_dates_are_carried_into_scope(db_session):
    user = create_user(db_session, username="u1")
    filters = ScopeFilters(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))

    scope = ScopeResolver(db_session).authorize(user, _events(filters))

    assert scope.start_date == date(2024, 1, 1)
    assert scope.end_date == date(2024, 1, 31)
    assert scope.snapshot() == {"brand_id": None, "start_date": "2024-01-01", "end_date": "2024-01-31"}


def test_inverted_date_range_is_rejected():
    with pytest.raises(AppError) as excinfo:
        ScopeFilters(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
    assert excinfo.value.error.code == "VALIDATION_ERROR"


def test_resolve_identity_failures(db_session):
    resolver = ScopeResolver(db_session)

    with pytest.raises(AppError) as missing:
        resolver.resolve_identity(str(uuid.uuid4()))
    with pytest.raises(AppError) as malformed:
        resolver.resolve_identity("not-a-uuid")

    assert missing.value.error.code == "IDENTITY_NOT_FOUND"
    assert malformed.value.error.code == "TOKEN_MALFORMED"


def test_user_read_is_self_or_admin(db_session):
    admin = create_user(db_session, username="root", role="admin")
    user = create_user(db_session, username="u1")
    resolver = ScopeResolver(db_session)

    resolver.authorize_user_read(user, user.id)
    resolver.authorize_user_read(admin, user.id)
    with pytest.raises(AppError) as excinfo:
        resolver.authorize_user_read(user, admin.id)

    assert excinfo.value.error.code == "ACCESS_DENIED"
