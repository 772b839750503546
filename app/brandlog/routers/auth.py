from datetime import datetime, timezone
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, Request

from app.brandlog.core.context import trace_id_of
from app.brandlog.core.deps import get_scope_resolver, get_token_claims
from app.brandlog.core.error_catalog import AppError
from app.brandlog.core.security import ACCESS_TOKEN_LIFETIME, TokenClaims
from app.brandlog.db.session import get_db
from app.brandlog.repos.users import UserRepository
from app.brandlog.schemas.auth import (
    ClaimsResponse,
    CurrentUser,
    LoginRequest,
    OAuth2TokenResponse,
    TokenResponse,
    VerifyResponse,
)
from app.brandlog.services.audit import AuditService
from app.brandlog.services.auth import AuthService

router = APIRouter()


def current_user_out(user) -> CurrentUser:
    return CurrentUser(id=str(user.id), username=user.username, email=user.email, role=user.role)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login (JSON)",
    description="Exchanges a username/password pair for a 24h bearer token.",
)
def login(request: Request, payload: LoginRequest, db=Depends(get_db)):
    trace_id = trace_id_of(request)
    try:
        user, token = AuthService(db).login(payload.username, payload.password)
    except AppError as exc:
        candidate = UserRepository(db).get_by_username(payload.username)
        if candidate is not None:
            AuditService(db).record_failure(
                candidate, "auth.login.failed", error_code=exc.error.code, trace_id=trace_id
            )
        raise

    AuditService(db).record_success(user, "auth.login", entity_type="user", entity_id=user.id, trace_id=trace_id)
    return TokenResponse(
        access_token=token,
        expires_in=int(ACCESS_TOKEN_LIFETIME.total_seconds()),
        user=current_user_out(user),
        trace_id=trace_id,
    )


@router.post(
    "/token",
    response_model=OAuth2TokenResponse,
    summary="OAuth2 Token (Swagger/Auth)",
    description="OAuth2 Password Flow endpoint for Swagger Authorize using form-data username/password.",
)
async def oauth2_token(request: Request, db=Depends(get_db)):
    raw_body = (await request.body()).decode()
    form_data = parse_qs(raw_body)
    username = (form_data.get("username") or [""])[0]
    password = (form_data.get("password") or [""])[0]

    _, token = AuthService(db).login(username, password)
    return OAuth2TokenResponse(access_token=token)


@router.get("/verify", response_model=VerifyResponse, summary="Verify token")
def verify(
    request: Request,
    claims: TokenClaims = Depends(get_token_claims),
    resolver=Depends(get_scope_resolver),
):
    user = resolver.resolve_identity(claims.sub)
    return VerifyResponse(
        claims=ClaimsResponse(
            sub=claims.sub,
            username=claims.username,
            role=claims.role,
            issued_at=datetime.fromtimestamp(claims.iat, tz=timezone.utc),
            expires_at=claims.expires_at,
        ),
        user=current_user_out(user),
        trace_id=trace_id_of(request),
    )
