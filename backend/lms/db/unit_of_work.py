"""Unit of work: one session, three repositories, one commit."""

import logging

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.exceptions import ConnectionError, DatabaseError, DuplicateRecordError
from lms.db.repositories.course_repo import CourseRepository
from lms.db.repositories.enrollment_repo import EnrollmentRepository
from lms.db.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Groups the repositories of a request around a single ``AsyncSession``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.courses = CourseRepository(session)
        self.enrollments = EnrollmentRepository(session)

    async def save(self) -> None:
        """Commit pending changes, rolling back if the commit fails."""
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.error(f"Integrity error on commit: {e}")
            raise DuplicateRecordError("Record already exists") from e
        except OperationalError as e:
            await self.session.rollback()
            logger.error(f"Database connection error on commit: {e}")
            raise ConnectionError("Database connection failed") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Unexpected error on commit: {e}")
            raise DatabaseError(f"Failed to commit: {e}") from e

    async def rollback(self) -> None:
        await self.session.rollback()
