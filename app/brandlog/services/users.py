from sqlalchemy.exc import IntegrityError

from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.security import get_password_hash
from app.brandlog.db.models import User
from app.brandlog.repos.allocations import AllocationRepository
from app.brandlog.repos.users import UserRepository


class UserService:
    def __init__(self, db):
        self.db = db
        self.repo = UserRepository(db)
        self.allocations = AllocationRepository(db)

    def get(self, user_id) -> User:
        user = self.repo.get_by_id(user_id)
        if user is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "User not found"})
        return user

    def create(self, *, username: str, password: str, role: str, email: str | None) -> User:
        if self.repo.exists_with_username_or_email(username, email):
            raise AppError(ErrorCatalog.CONFLICT, details={"message": "Username or email already exists"})
        user = User(username=username, email=email, role=role, hashed_password=get_password_hash(password))
        try:
            return self.repo.create(user)
        except IntegrityError as exc:
            self.db.rollback()
            raise AppError(ErrorCatalog.CONFLICT, details={"message": "Username or email already exists"}) from exc

    def delete(self, user_id, *, acting_user) -> int:
        """Remove a user together with its allocations; returns allocations removed."""
        user = self.get(user_id)
        if user.id == acting_user.id:
            raise AppError(ErrorCatalog.CONFLICT, details={"message": "Cannot delete the current user"})
        try:
            removed = self.allocations.delete_for_user(user.id)
            self.repo.detach_references(user.id)
            self.repo.delete(user)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return removed
