"""Authorization and row-level scope resolution.

Every permission decision goes through :class:`ScopeResolver`. It re-reads the
caller from the store, applies the role rules and returns a :class:`Scope`
value that the query pipeline turns into SQL for listings, aggregates and
exports alike.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.logging import log_event
from app.brandlog.core.metrics import metrics
from app.brandlog.db.models import ROLE_ADMIN, User
from app.brandlog.repos.allocations import AllocationRepository
from app.brandlog.repos.users import UserRepository

logger = logging.getLogger(__name__)

ALL_BRANDS = "ALL"


class ResourceKind(str, Enum):
    BRAND = "brand"
    LOGIN_EVENT = "login_event"
    USER_LIST = "user_list"
    ALLOCATION = "allocation"


class Action(str, Enum):
    READ = "read"
    WRITE = "write"
    EXPORT = "export"


# UserList reads expose every account, so they are gated like writes.
ADMIN_ONLY_READS = {ResourceKind.USER_LIST, ResourceKind.ALLOCATION}


@dataclass(frozen=True)
class ScopeFilters:
    brand_id: uuid.UUID | None = None
    start_date: date | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={"message": "end_date must not be before start_date"},
            )

    def snapshot(self) -> dict:
        return {
            "brand_id": str(self.brand_id) if self.brand_id else None,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass(frozen=True)
class Operation:
    resource_kind: ResourceKind
    action: Action
    filters: ScopeFilters = field(default_factory=ScopeFilters)
    # names one brand directly (detail, single-brand export)
    pointed: bool = False
    # restrict to the caller's own allocations regardless of role
    own_allocations_only: bool = False


@dataclass(frozen=True)
class Scope:
    user_id: uuid.UUID
    role: str
    allowed_brand_ids: frozenset | str
    explicit_brand_id: uuid.UUID | None = None
    start_date: date | None = None
    end_date: date | None = None

    @property
    def unrestricted(self) -> bool:
        return self.allowed_brand_ids == ALL_BRANDS

    def permits_brand(self, brand_id) -> bool:
        if brand_id is None:
            return self.unrestricted
        if self.unrestricted:
            return True
        return brand_id in self.allowed_brand_ids

    @property
    def is_empty(self) -> bool:
        """True when the scope cannot match any row, without querying."""
        if self.unrestricted:
            return False
        if not self.allowed_brand_ids:
            return True
        return self.explicit_brand_id is not None and self.explicit_brand_id not in self.allowed_brand_ids

    def snapshot(self) -> dict:
        return {
            "brand_id": str(self.explicit_brand_id) if self.explicit_brand_id else None,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


def _parse_subject(subject_id) -> uuid.UUID:
    if isinstance(subject_id, uuid.UUID):
        return subject_id
    try:
        return uuid.UUID(str(subject_id))
    except (TypeError, ValueError) as exc:
        raise AppError(ErrorCatalog.TOKEN_MALFORMED) from exc


class ScopeResolver:
    def __init__(self, db):
        self.users = UserRepository(db)
        self.allocations = AllocationRepository(db)

    def resolve_identity(self, subject_id) -> User:
        user = self.users.get_by_id(_parse_subject(subject_id))
        if user is None:
            raise AppError(ErrorCatalog.IDENTITY_NOT_FOUND)
        return user

    def authorize(self, user: User, operation: Operation) -> Scope:
        is_admin = user.role == ROLE_ADMIN
        filters = operation.filters

        if operation.action == Action.WRITE or operation.resource_kind in ADMIN_ONLY_READS:
            if not is_admin:
                self._deny(user, operation, ErrorCatalog.INSUFFICIENT_ROLE)
            return Scope(
                user_id=user.id,
                role=user.role,
                allowed_brand_ids=ALL_BRANDS,
                explicit_brand_id=filters.brand_id,
                start_date=filters.start_date,
                end_date=filters.end_date,
            )

        if operation.pointed and filters.brand_id is None:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "brand_id is required"})

        if is_admin and not operation.own_allocations_only:
            allowed: frozenset | str = ALL_BRANDS
        else:
            allowed = self.allocations.brand_ids_for_user(user.id)

        if operation.pointed and allowed != ALL_BRANDS and filters.brand_id not in allowed:
            self._deny(user, operation, ErrorCatalog.ACCESS_DENIED)

        return Scope(
            user_id=user.id,
            role=user.role,
            allowed_brand_ids=allowed,
            explicit_brand_id=filters.brand_id,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )

    def authorize_user_read(self, user: User, target_user_id) -> None:
        """Users may read their own record; anyone else requires admin."""
        if user.role == ROLE_ADMIN or user.id == target_user_id:
            return
        self._deny(user, Operation(ResourceKind.USER_LIST, Action.READ), ErrorCatalog.ACCESS_DENIED)

    def _deny(self, user: User, operation: Operation, error) -> None:
        metrics.increment_access_denied(error.code)
        log_event(
            logger,
            "access_denied",
            user_id=str(user.id),
            role=user.role,
            code=error.code,
            resource=operation.resource_kind.value,
            action=operation.action.value,
            brand_id=str(operation.filters.brand_id) if operation.filters.brand_id else None,
        )
        raise AppError(error)
