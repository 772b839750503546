from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "admin",
                "password": "change-me",
            }
        }
    }

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CurrentUser(BaseModel):
    id: str
    username: str
    email: str | None = None
    role: str


class TokenResponse(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "<jwt>",
                "token_type": "bearer",
                "expires_in": 86400,
                "user": {"id": "<uuid>", "username": "admin", "email": None, "role": "admin"},
                "trace_id": "trace-123",
            }
        }
    }

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: CurrentUser
    trace_id: str


class OAuth2TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ClaimsResponse(BaseModel):
    sub: str
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime


class VerifyResponse(BaseModel):
    claims: ClaimsResponse
    user: CurrentUser
    trace_id: str
