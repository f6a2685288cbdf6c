"""Course repository."""

from sqlalchemy import func, select

from lms.db.models import Course
from lms.db.repositories.base import BaseRepository


class CourseRepository(BaseRepository[Course]):
    model = Course
    search_columns = (Course.title, Course.description)

    async def get_by_title(self, title: str) -> Course | None:
        async with self._guard(f"get course by title {title}"):
            result = await self.session.execute(
                select(Course).where(func.lower(Course.title) == title.strip().lower())
            )
            return result.scalar_one_or_none()
