"""Enrollment repository.

Enrollments are always loaded together with their user and course, since
every read path renders the user name and course title.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from lms.db.models import Enrollment
from lms.db.repositories.base import BaseRepository


class EnrollmentRepository(BaseRepository[Enrollment]):
    model = Enrollment
    load_options = (selectinload(Enrollment.user), selectinload(Enrollment.course))

    async def exists(self, user_id: int, course_id: int, exclude_enrollment_id: int | None = None) -> bool:
        """True if ``user_id`` is already enrolled in ``course_id``."""
        stmt = (
            select(func.count())
            .select_from(Enrollment)
            .where(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
        )
        if exclude_enrollment_id is not None:
            stmt = stmt.where(Enrollment.id != exclude_enrollment_id)
        async with self._guard(f"check enrollment user={user_id} course={course_id}"):
            result = await self.session.execute(stmt)
            return result.scalar_one() > 0

    async def get_by_id_with_details(self, enrollment_id: int) -> Enrollment | None:
        """Load one enrollment, refreshing user and course already in the session."""
        stmt = self._select().where(Enrollment.id == enrollment_id).execution_options(populate_existing=True)
        async with self._guard(f"get {self._name} {enrollment_id} with details"):
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
