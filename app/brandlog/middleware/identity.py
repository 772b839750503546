from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.brandlog.core.context import bind_identity
from app.brandlog.core.error_catalog import AppError
from app.brandlog.core.security import TokenClaims, decode_token


def _bearer_claims(request: Request) -> TokenClaims | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    try:
        return decode_token(token.strip())
    except AppError:
        return None


class IdentityContextMiddleware(BaseHTTPMiddleware):
    """Attach the token's identity to the request for logging.

    Nothing here is trusted for authorization; routes re-resolve the caller
    through ``get_current_user``.
    """

    async def dispatch(self, request: Request, call_next):
        claims = _bearer_claims(request)
        if claims is None:
            bind_identity(request)
        else:
            bind_identity(request, user_id=claims.sub, username=claims.username, role=claims.role)
        return await call_next(request)
