"""User repository."""

from sqlalchemy import func, select

from lms.db.models import User
from lms.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User
    search_columns = (User.name, User.email)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email (case-insensitive)."""
        async with self._guard(f"get user by email {email}"):
            result = await self.session.execute(
                select(User).where(func.lower(User.email) == email.strip().lower())
            )
            return result.scalar_one_or_none()

    async def is_email_taken(self, email: str, exclude_user_id: int | None = None) -> bool:
        """True if another user already owns ``email``."""
        stmt = select(func.count()).select_from(User).where(func.lower(User.email) == email.strip().lower())
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        async with self._guard(f"check email {email}"):
            result = await self.session.execute(stmt)
            return result.scalar_one() > 0
