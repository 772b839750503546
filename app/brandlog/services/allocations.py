from sqlalchemy.exc import IntegrityError

from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.db.models import Allocation
from app.brandlog.repos.allocations import AllocationRepository
from app.brandlog.repos.brands import BrandRepository
from app.brandlog.repos.users import UserRepository


class AllocationService:
    def __init__(self, db):
        self.db = db
        self.repo = AllocationRepository(db)
        self.users = UserRepository(db)
        self.brands = BrandRepository(db)

    def allocate(self, *, user_id, brand_id, allocated_by):
        user = self.users.get_by_id(user_id)
        if user is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "User not found"})
        brand = self.brands.get_by_id(brand_id)
        if brand is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "Brand not found"})
        allocation = Allocation(user_id=user.id, brand_id=brand.id, allocated_by=allocated_by)
        try:
            # the unique constraint is the duplicate check
            self.repo.add(allocation)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AppError(ErrorCatalog.CONFLICT, details={"message": "Brand already allocated to user"}) from exc
        return allocation, user, brand

    def remove(self, *, user_id, brand_id) -> None:
        allocation = self.repo.get(user_id, brand_id)
        if allocation is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "Allocation not found"})
        self.repo.delete_one(allocation)
        self.db.commit()

    def list_for_user(self, user_id):
        if self.users.get_by_id(user_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "User not found"})
        return self.repo.list_for_user(user_id)
