from sqlalchemy.exc import IntegrityError

from app.brandlog.core.error_catalog import AppError, ErrorCatalog
from app.brandlog.core.scope import Scope
from app.brandlog.db.models import Brand
from app.brandlog.repos.allocations import AllocationRepository
from app.brandlog.repos.brands import BrandRepository

HAS_EVENTS_DETAILS = {"message": "Brand has recorded login events and cannot be deleted"}


class BrandService:
    def __init__(self, db):
        self.db = db
        self.repo = BrandRepository(db)
        self.allocations = AllocationRepository(db)

    def get_in_scope(self, brand_id, scope: Scope) -> Brand:
        brand = self.repo.get_by_id(brand_id)
        if brand is None or not scope.permits_brand(brand.id):
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "Brand not found"})
        return brand

    def allocated_users(self, brand_id):
        return self.allocations.list_for_brand(brand_id)

    def create(self, *, name: str, master_outlet_id: str, created_by) -> Brand:
        brand = Brand(name=name, master_outlet_id=master_outlet_id, created_by=created_by)
        try:
            return self.repo.create(brand)
        except IntegrityError as exc:
            self.db.rollback()
            raise AppError(ErrorCatalog.CONFLICT, details={"message": "Brand name already exists"}) from exc

    def update(self, brand_id, *, name: str, master_outlet_id: str) -> Brand:
        brand = self._get_or_404(brand_id)
        brand.name = name
        brand.master_outlet_id = master_outlet_id
        try:
            return self.repo.update(brand)
        except IntegrityError as exc:
            self.db.rollback()
            raise AppError(ErrorCatalog.CONFLICT, details={"message": "Brand name already exists"}) from exc

    def delete(self, brand_id) -> int:
        """Delete a brand and its allocations in one transaction.

        Returns the number of allocations removed. Brands that still own
        login events are kept (events are never orphaned); the
        ``login_events.brand_id`` foreign key enforces this when an event
        lands between the count and the commit.
        """
        brand = self._get_or_404(brand_id)
        if self.repo.count_login_events(brand.id):
            raise AppError(
                ErrorCatalog.CONFLICT,
                details=HAS_EVENTS_DETAILS,
            )
        try:
            removed = self.allocations.delete_for_brand(brand.id)
            self.repo.delete(brand)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AppError(
                ErrorCatalog.CONFLICT,
                details=HAS_EVENTS_DETAILS,
            ) from exc
        return removed

    def _get_or_404(self, brand_id) -> Brand:
        brand = self.repo.get_by_id(brand_id)
        if brand is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"message": "Brand not found"})
        return brand
