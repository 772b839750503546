from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserCreateRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "user1",
                "password": "Secret123",
                "role": "user",
                "email": "user1@example.com",
            }
        }
    }

    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    role: Literal["admin", "user"] = "user"
    email: EmailStr | None = None


class UserItem(BaseModel):
    id: str
    username: str
    email: str | None = None
    role: str
    created_at: datetime


class UserListResponse(BaseModel):
    users: list[UserItem]
    total: int


class AllocatedBrand(BaseModel):
    id: str
    name: str
    master_outlet_id: str
    allocated_at: datetime


class UserDetailResponse(BaseModel):
    user: UserItem
    allocated_brands: list[AllocatedBrand]


class AllocatedBrandsResponse(BaseModel):
    allocated_brands: list[AllocatedBrand]


class AllocationItem(BaseModel):
    id: str
    user_id: str
    username: str
    brand_id: str
    brand_name: str
    allocated_by: str | None = None
    created_at: datetime


class AllocationResponse(BaseModel):
    allocation: AllocationItem
    trace_id: str


class MessageResponse(BaseModel):
    ok: bool = True
    message: str
    trace_id: str


class UserResponse(BaseModel):
    user: UserItem
    trace_id: str
