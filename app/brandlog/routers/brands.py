import uuid

from fastapi import APIRouter, Depends, Query, Request

from app.brandlog.core.context import trace_id_of
from app.brandlog.core.deps import get_current_user, get_scope_resolver
from app.brandlog.core.scope import Action, Operation, ResourceKind, ScopeFilters
from app.brandlog.db.session import get_db
from app.brandlog.schemas.brands import (
    BrandAllocatedUser,
    BrandDetailResponse,
    BrandItem,
    BrandListResponse,
    BrandResponse,
    BrandWriteRequest,
)
from app.brandlog.schemas.users import MessageResponse
from app.brandlog.services.audit import AuditService
from app.brandlog.services.brands import BrandService
from app.brandlog.services.login_events import list_brands as list_brands_in_scope

router = APIRouter()


def brand_item(brand) -> BrandItem:
    return BrandItem(
        id=str(brand.id),
        name=brand.name,
        master_outlet_id=brand.master_outlet_id,
        created_by=str(brand.created_by) if brand.created_by else None,
        created_at=brand.created_at,
        updated_at=brand.updated_at,
    )


@router.get("", response_model=BrandListResponse, summary="List brands in scope")
def list_brands(
    brand_id: uuid.UUID | None = Query(None),
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    scope = resolver.authorize(
        current_user,
        Operation(ResourceKind.BRAND, Action.READ, filters=ScopeFilters(brand_id=brand_id)),
    )
    return BrandListResponse(brands=[brand_item(brand) for brand in list_brands_in_scope(db, scope)])


@router.get("/{brand_id}", response_model=BrandDetailResponse, summary="Get brand")
def get_brand(
    brand_id: uuid.UUID,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    scope = resolver.authorize(
        current_user,
        Operation(ResourceKind.BRAND, Action.READ, filters=ScopeFilters(brand_id=brand_id), pointed=True),
    )
    service = BrandService(db)
    brand = service.get_in_scope(brand_id, scope)
    allocated_users = []
    if current_user.is_admin:
        allocated_users = [
            BrandAllocatedUser(
                id=str(user.id),
                username=user.username,
                email=user.email,
                allocated_at=allocation.created_at,
            )
            for allocation, user in service.allocated_users(brand.id)
        ]
    return BrandDetailResponse(brand=brand_item(brand), allocated_users=allocated_users)


@router.post("", response_model=BrandResponse, status_code=201, summary="Create brand")
def create_brand(
    request: Request,
    payload: BrandWriteRequest,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.BRAND, Action.WRITE))
    brand = BrandService(db).create(
        name=payload.name,
        master_outlet_id=payload.master_outlet_id,
        created_by=current_user.id,
    )
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "brands.create",
        entity_type="brand",
        entity_id=brand.id,
        trace_id=trace_id,
        metadata={"name": brand.name, "master_outlet_id": brand.master_outlet_id},
    )
    return BrandResponse(brand=brand_item(brand), trace_id=trace_id)


@router.put("/{brand_id}", response_model=BrandResponse, summary="Update brand")
def update_brand(
    request: Request,
    brand_id: uuid.UUID,
    payload: BrandWriteRequest,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.BRAND, Action.WRITE))
    brand = BrandService(db).update(brand_id, name=payload.name, master_outlet_id=payload.master_outlet_id)
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "brands.update",
        entity_type="brand",
        entity_id=brand.id,
        trace_id=trace_id,
        metadata={"name": brand.name, "master_outlet_id": brand.master_outlet_id},
    )
    return BrandResponse(brand=brand_item(brand), trace_id=trace_id)


@router.delete("/{brand_id}", response_model=MessageResponse, summary="Delete brand")
def delete_brand(
    request: Request,
    brand_id: uuid.UUID,
    current_user=Depends(get_current_user),
    resolver=Depends(get_scope_resolver),
    db=Depends(get_db),
):
    resolver.authorize(current_user, Operation(ResourceKind.BRAND, Action.WRITE))
    removed = BrandService(db).delete(brand_id)
    trace_id = trace_id_of(request)
    AuditService(db).record_success(
        current_user,
        "brands.delete",
        entity_type="brand",
        entity_id=brand_id,
        trace_id=trace_id,
        metadata={"allocations_removed": removed},
    )
    return MessageResponse(message="Brand deleted", trace_id=trace_id)
