from sqlalchemy import func, select

from app.brandlog.db.models import Brand, LoginEvent


class BrandRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, brand_id):
        return self.db.get(Brand, brand_id)

    def existing_ids(self, brand_ids) -> set:
        if not brand_ids:
            return set()
        stmt = select(Brand.id).where(Brand.id.in_(list(brand_ids)))
        return set(self.db.execute(stmt).scalars().all())

    def count_login_events(self, brand_id) -> int:
        stmt = select(func.count()).select_from(LoginEvent).where(LoginEvent.brand_id == brand_id)
        return self.db.execute(stmt).scalar_one()

    def create(self, brand: Brand) -> Brand:
        self.db.add(brand)
        self.db.commit()
        self.db.refresh(brand)
        return brand

    def update(self, brand: Brand) -> Brand:
        self.db.add(brand)
        self.db.commit()
        self.db.refresh(brand)
        return brand

    def delete(self, brand: Brand) -> None:
        self.db.delete(brand)
