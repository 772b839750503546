from sqlalchemy import delete, select

from app.brandlog.db.models import Allocation, Brand, User


class AllocationRepository:
    def __init__(self, db):
        self.db = db

    def brand_ids_for_user(self, user_id) -> frozenset:
        stmt = select(Allocation.brand_id).where(Allocation.user_id == user_id)
        return frozenset(self.db.execute(stmt).scalars().all())

    def get(self, user_id, brand_id):
        stmt = select(Allocation).where(Allocation.user_id == user_id, Allocation.brand_id == brand_id)
        return self.db.execute(stmt).scalars().first()

    def list_for_user(self, user_id):
        stmt = (
            select(Allocation, Brand)
            .join(Brand, Brand.id == Allocation.brand_id)
            .where(Allocation.user_id == user_id)
            .order_by(Allocation.created_at.desc())
        )
        return self.db.execute(stmt).all()

    def list_for_brand(self, brand_id):
        stmt = (
            select(Allocation, User)
            .join(User, User.id == Allocation.user_id)
            .where(Allocation.brand_id == brand_id)
            .order_by(Allocation.created_at.desc())
        )
        return self.db.execute(stmt).all()

    def add(self, allocation: Allocation) -> Allocation:
        self.db.add(allocation)
        self.db.flush()
        return allocation

    def delete_one(self, allocation: Allocation) -> None:
        self.db.delete(allocation)

    def delete_for_brand(self, brand_id) -> int:
        result = self.db.execute(
            delete(Allocation).where(Allocation.brand_id == brand_id).execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_for_user(self, user_id) -> int:
        result = self.db.execute(
            delete(Allocation).where(Allocation.user_id == user_id).execution_options(synchronize_session=False)
        )
        return result.rowcount
