from sqlalchemy import func, or_, select, update

from app.brandlog.db.models import Allocation, Brand, User


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, user_id):
        return self.db.get(User, user_id)

    def get_by_username(self, username: str):
        stmt = select(User).where(User.username == username)
        return self.db.execute(stmt).scalars().first()

    def exists_with_username_or_email(self, username: str, email: str | None) -> bool:
        conditions = [User.username == username]
        if email:
            conditions.append(User.email == email)
        stmt = select(User.id).where(or_(*conditions)).limit(1)
        return self.db.execute(stmt).first() is not None

    def list_all(self, *, role: str | None = None, limit: int | None = None, offset: int | None = None):
        stmt = select(User)
        count_stmt = select(func.count()).select_from(User)
        if role:
            stmt = stmt.where(User.role == role)
            count_stmt = count_stmt.where(User.role == role)
        stmt = stmt.order_by(User.created_at.desc(), User.username)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        rows = self.db.execute(stmt).scalars().all()
        total = self.db.execute(count_stmt).scalar_one()
        return rows, total

    def create(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def detach_references(self, user_id) -> None:
        """Clear nullable references to a user that is about to be removed."""
        self.db.execute(update(Brand).where(Brand.created_by == user_id).values(created_by=None))
        self.db.execute(update(Allocation).where(Allocation.allocated_by == user_id).values(allocated_by=None))

    def delete(self, user: User) -> None:
        self.db.delete(user)
