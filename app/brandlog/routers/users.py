import uuid

from fastapi import APIRouter, Depends, Query, Request

from app.brandlog.core.context import trace_id_of
from app.brandlog.core.deps import get_current_user, get_scope_resolver
from app.brandlog.core.scope import Action, Operation, ResourceKind
from app.brandlog.db.session import get_db
from app.brandlog.repos.allocations import AllocationRepository
from app.brandlog.repos.users import UserRepository
from app.brandlog.schemas.users import (
    AllocatedBrand,
    AllocatedBrandsResponse,
    AllocationItem,
    AllocationResponse,
    MessageResponse,
    UserCreateRequest,
    UserDetailResponse,
    UserItem,
    UserListResponse,
    UserResponse,
)
from app.brandlog.services.allocations import AllocationService
from app.brandlog.services.audit import AuditService
from app.brandlog.services.users import UserService

router = APIRouter()


def _user_item(user) -> UserItem:
    return UserItem(
        id=str(user.id),
        username=user.username,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
    )


def _allocated_brands(db, user_id) -> list[AllocatedBrand]:
    return [
        AllocatedBrand(
            id=str(brand.id),
            name=brand.name,
            master_outlet_id=brand.master_outlet_id,
            allocated_at=allocation.created_at,
        )
        for allocation, brand in AllocationRepository(db).list_for_user(user_id)
    ]


def _allocation_item(allocation, user, brand) -> AllocationItem:
    return AllocationItem(
        id=str(allocation.id),
        user_id=str(user.id),
        username=user.username,
        brand_id=str(brand.id),
        brand_name=brand.name,
        allocated_by=str(allocation.allocated_by) if allocation.allocated_by else None,
        created_at=allocation.created_at,
    )


@router.get("", response_model=UserListResponse, summary="List users")
def list_users(
    role: str | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.USER_LIST, Action.READ))
    users, total = UserRepository(db).list_all(role=role, limit=limit, offset=offset)
    return UserListResponse(users=[_user_item(user) for user in users], total=total)


@router.post("", response_model=UserResponse, status_code=201, summary="Create user")
def create_user(
    request: Request,
    payload: UserCreateRequest,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.USER_LIST, Action.WRITE))
    user = UserService(db).create(
        username=payload.username.strip(),
        password=payload.password,
        role=payload.role,
        email=str(payload.email) if payload.email else None,
    )
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "users.create",
        entity_type="user",
        entity_id=user.id,
        trace_id=trace_id,
        metadata={"username": user.username, "role": user.role},
    )
    return UserResponse(user=_user_item(user), trace_id=trace_id)


@router.get("/me", response_model=UserDetailResponse, summary="Current user")
def me(current_user=Depends(get_current_user), db=Depends(get_db)):
    return UserDetailResponse(user=_user_item(current_user), allocated_brands=_allocated_brands(db, current_user.id))


@router.get("/me/brands", response_model=AllocatedBrandsResponse, summary="Brands allocated to the current user")
def my_brands(current_user=Depends(get_current_user), db=Depends(get_db)):
    return AllocatedBrandsResponse(allocated_brands=_allocated_brands(db, current_user.id))


@router.get("/{user_id}", response_model=UserDetailResponse, summary="Get user")
def get_user(
    user_id: uuid.UUID,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize_user_read(current_user, user_id)
    user = UserService(db).get(user_id)
    return UserDetailResponse(user=_user_item(user), allocated_brands=_allocated_brands(db, user.id))


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete user")
def delete_user(
    request: Request,
    user_id: uuid.UUID,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.USER_LIST, Action.WRITE))
    removed = UserService(db).delete(user_id, acting_user=current_user)
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "users.delete",
        entity_type="user",
        entity_id=user_id,
        trace_id=trace_id,
        metadata={"allocations_removed": removed},
    )
    return MessageResponse(message="User deleted", trace_id=trace_id)


@router.get("/{user_id}/allocations", response_model=AllocatedBrandsResponse, summary="List user allocations")
def list_user_allocations(
    user_id: uuid.UUID,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.ALLOCATION, Action.READ))
    rows = AllocationService(db).list_for_user(user_id)
    return AllocatedBrandsResponse(
        allocated_brands=[
            AllocatedBrand(
                id=str(brand.id),
                name=brand.name,
                master_outlet_id=brand.master_outlet_id,
                allocated_at=allocation.created_at,
            )
            for allocation, brand in rows
        ]
    )


@router.post(
    "/{user_id}/allocations/{brand_id}",
    response_model=AllocationResponse,
    status_code=201,
    summary="Allocate brand to user",
)
def allocate_brand(
    request: Request,
    user_id: uuid.UUID,
    brand_id: uuid.UUID,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.ALLOCATION, Action.WRITE))
    allocation, user, brand = AllocationService(db).allocate(
        user_id=user_id,
        brand_id=brand_id,
        allocated_by=current_user.id,
    )
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "allocations.create",
        entity_type="allocation",
        entity_id=allocation.id,
        trace_id=trace_id,
        metadata={"user_id": str(user.id), "brand_id": str(brand.id)},
    )
    return AllocationResponse(allocation=_allocation_item(allocation, user, brand), trace_id=trace_id)


@router.delete(
    "/{user_id}/allocations/{brand_id}",
    response_model=MessageResponse,
    summary="Remove brand allocation",
)
def remove_allocation(
    request: Request,
    user_id: uuid.UUID,
    brand_id: uuid.UUID,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.ALLOCATION, Action.WRITE))
    AllocationService(db).remove(user_id=user_id, brand_id=brand_id)
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "allocations.remove",
        entity_type="allocation",
        entity_id=None,
        trace_id=trace_id,
        metadata={"user_id": str(user_id), "brand_id": str(brand_id)},
    )
    return MessageResponse(message="Allocation removed", trace_id=trace_id)
