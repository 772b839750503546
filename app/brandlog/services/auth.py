from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.security import create_user_access_token, pwd_context, verify_password
from app.brandlog.repos.users import UserRepository


class AuthService:
    def __init__(self, db):
        self.repo = UserRepository(db)

    def login(self, username: str, password: str):
        if not username or not password:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={"message": "Username and password are required"},
            )
        user = self.repo.get_by_username(username)
        if user is None:
            # keep timing uniform with the wrong-password path
            pwd_context.dummy_verify()
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        if not verify_password(password, user.hashed_password):
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        return user, create_user_access_token(user)
