from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class BrandWriteRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Acme",
                "master_outlet_id": "OUT1",
            }
        }
    }

    name: str = Field(min_length=1, max_length=255)
    master_outlet_id: str = Field(min_length=1, max_length=100)

    @field_validator("name", "master_outlet_id", mode="before")
    @classmethod
    def strip_blanks(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class BrandItem(BaseModel):
    id: str
    name: str
    master_outlet_id: str
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class BrandResponse(BaseModel):
    brand: BrandItem
    trace_id: str


class BrandListResponse(BaseModel):
    brands: list[BrandItem]


class BrandAllocatedUser(BaseModel):
    id: str
    username: str
    email: str | None = None
    allocated_at: datetime


class BrandDetailResponse(BaseModel):
    brand: BrandItem
    allocated_users: list[BrandAllocatedUser]
