"""User repository."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from researchhub.db.models import User


class UserRepository:
    """Data access for User rows. Users are never deleted."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, user_id: UUID) -> User | None:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return self.session.execute(stmt).scalar_one_or_none()

    def save(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user
