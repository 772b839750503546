"""Password hashing and session tokens.

Tokens are HS256 JWTs carrying ``sub`` (user id), ``username`` and ``role``
plus ``iat``/``exp``. The claims only identify the caller; authorization
always re-reads the user record (see :mod:`app.brandlog.core.scope`).
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from app.brandlog.core.config import settings
from app.brandlog.core.error_catalog import AppError, ErrorCatalog

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# fixed; not an operational setting
ACCESS_TOKEN_LIFETIME = timedelta(hours=24)


class TokenClaims(BaseModel):
    sub: str
    username: str
    role: str
    iat: int
    exp: int

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


class TokenService:
    def __init__(
        self,
        secret_key: str | None = None,
        *,
        algorithm: str | None = None,
    ) -> None:
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM

    def issue(self, user, *, issued_at: datetime | None = None) -> str:
        issued_at = issued_at or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role,
            "iat": issued_at,
            "exp": issued_at + ACCESS_TOKEN_LIFETIME,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise AppError(ErrorCatalog.TOKEN_MALFORMED) from exc
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise AppError(ErrorCatalog.TOKEN_EXPIRED) from exc
        except JWTError as exc:
            raise AppError(ErrorCatalog.TOKEN_INVALID) from exc
        try:
            return TokenClaims(**payload)
        except (ValidationError, TypeError) as exc:
            raise AppError(ErrorCatalog.TOKEN_MALFORMED) from exc


def create_user_access_token(user, *, issued_at: datetime | None = None) -> str:
    return TokenService().issue(user, issued_at=issued_at)


def decode_token(token: str) -> TokenClaims:
    return TokenService().verify(token)
