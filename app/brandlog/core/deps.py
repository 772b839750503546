from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from app.brandlog.core.context import bind_identity
from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.scope import ScopeResolver
from app.brandlog.core.security import TokenClaims, decode_token
from app.brandlog.db.session import get_db

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_token_claims(token: str | None = Depends(oauth2_scheme)) -> TokenClaims:
    if not token:
        raise AppError(ErrorCatalog.TOKEN_MISSING)
    return decode_token(token)


def get_scope_resolver(db=Depends(get_db)) -> ScopeResolver:
    return ScopeResolver(db)


def get_current_user(
    request: Request,
    claims: TokenClaims = Depends(get_token_claims),
    resolver: ScopeResolver = Depends(get_scope_resolver),
):
    user = resolver.resolve_identity(claims.sub)
    bind_identity(request, user_id=str(user.id), username=user.username, role=user.role)
    return user


__all__ = [
    "get_token_claims",
    "get_scope_resolver",
    "get_current_user",
]
