import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class EventSummaryOut(BaseModel):
    total_logins: int
    unique_stores: int
    unique_managers: int
    parent_logins: int
    team_member_logins: int


class LoginEventRow(BaseModel):
    id: int
    store_id: str
    client_store_id: str
    manager_name: str
    manager_number: str
    login_type: str
    login_date: date
    brand_id: str | None = None
    brand_name: str | None = None
    master_outlet_id: str | None = None
    created_at: datetime


class ListFilters(BaseModel):
    brand_id: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class LoginEventListResponse(BaseModel):
    rows: list[LoginEventRow]
    summary: EventSummaryOut
    total: int
    limit: int
    offset: int
    filters: ListFilters


class DailySummaryItem(EventSummaryOut):
    login_date: date


class DailySummaryResponse(BaseModel):
    daily_summary: list[DailySummaryItem]
    filters: ListFilters


class BrandSummaryItem(EventSummaryOut):
    brand_id: str
    brand_name: str
    master_outlet_id: str


class BrandSummaryResponse(BaseModel):
    brand_summary: list[BrandSummaryItem]
    filters: ListFilters


class LoginEventCreate(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "store_id": "STORE001",
                "client_store_id": "CLIENT001",
                "manager_name": "Jane Smith",
                "manager_number": "+1555000111",
                "login_type": "parent",
                "login_date": "2024-01-05",
                "brand_id": "<uuid>",
            }
        }
    }

    store_id: str = Field(min_length=1, max_length=100)
    client_store_id: str = Field(min_length=1, max_length=100)
    manager_name: str = Field(min_length=1, max_length=255)
    manager_number: str = Field(min_length=1, max_length=50)
    login_type: Literal["parent", "team_member"]
    login_date: date
    brand_id: uuid.UUID | None = None

    @field_validator("login_type", mode="before")
    @classmethod
    def normalize_login_type(cls, value):
        if isinstance(value, str):
            return value.strip().lower().replace(" ", "_")
        return value


class LoginEventBatchRequest(BaseModel):
    events: list[LoginEventCreate] = Field(min_length=1, max_length=5000)


class LoginEventBatchResponse(BaseModel):
    created: int
    ids: list[int]
    trace_id: str
