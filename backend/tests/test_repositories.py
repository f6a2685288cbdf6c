"""Tests for repositories and the unit of work."""

import logging

import pytest

from lms.db.exceptions import DuplicateRecordError
from lms.db.models import Course, Enrollment, User
from lms.db.unit_of_work import UnitOfWork


def _user(n: int, name: str | None = None) -> User:
    return User(name=name or f"User {n}", email=f"user{n}@example.com", password_hash="hash", role="Student")


@pytest.fixture
def uow(db) -> UnitOfWork:
    return UnitOfWork(db)


async def test_add_and_get_user(uow):
    user = await uow.users.add(_user(1))
    await uow.save()

    assert user.id is not None
    fetched = await uow.users.get_by_id(user.id)
    assert fetched.email == "user1@example.com"
    assert await uow.users.get_by_id(999) is None


async def test_get_by_email_is_case_insensitive(uow):
    await uow.users.add(_user(1))

    assert (await uow.users.get_by_email("USER1@example.com")).name == "User 1"


async def test_is_email_taken_excludes_self(uow):
    user = await uow.users.add(_user(1))

    assert await uow.users.is_email_taken("user1@example.com")
    assert not await uow.users.is_email_taken("user1@example.com", exclude_user_id=user.id)
    assert not await uow.users.is_email_taken("other@example.com")


async def test_duplicate_email_raises_duplicate_record(uow):
    await uow.users.add(_user(1))

    with pytest.raises(DuplicateRecordError, match="already exists"):
        await uow.users.add(_user(1, name="Copy"))


async def test_repository_logs_errors(uow, caplog):
    caplog.set_level(logging.ERROR)
    await uow.users.add(_user(1))

    with pytest.raises(DuplicateRecordError):
        await uow.users.add(_user(1))

    assert any("Duplicate User" in r.getMessage() for r in caplog.records)


async def test_paging_and_search(uow):
    for n in range(1, 13):
        await uow.users.add(_user(n, name="Grace" if n % 4 == 0 else f"User {n}"))

    page, total = await uow.users.get_paged(page_number=2, page_size=5)
    assert total == 12
    assert [u.id for u in page] == [6, 7, 8, 9, 10]

    matches, total = await uow.users.get_paged(page_number=1, page_size=10, search_term="grace")
    assert total == 3
    assert {u.name for u in matches} == {"Grace"}
    assert await uow.users.count("grace") == 3


async def test_course_by_title_and_delete(uow):
    instructor = await uow.users.add(_user(1))
    course = await uow.courses.add(Course(title="Algebra", description="x", instructor_id=instructor.id))

    assert (await uow.courses.get_by_title("algebra")).id == course.id

    await uow.courses.delete(course)
    await uow.save()
    assert await uow.courses.get_by_id(course.id) is None


async def test_enrollment_exists_and_details(uow):
    student = await uow.users.add(_user(1))
    course = await uow.courses.add(Course(title="Algebra", description="x", instructor_id=student.id))
    enrollment = await uow.enrollments.add(Enrollment(user_id=student.id, course_id=course.id))
    await uow.save()

    assert await uow.enrollments.exists(student.id, course.id)
    assert not await uow.enrollments.exists(student.id, course.id, exclude_enrollment_id=enrollment.id)

    uow.session.expunge_all()
    loaded = await uow.enrollments.get_by_id_with_details(enrollment.id)
    assert loaded.user.name == "User 1"
    assert loaded.course.title == "Algebra"


async def test_duplicate_enrollment_rejected_by_constraint(uow):
    student = await uow.users.add(_user(1))
    course = await uow.courses.add(Course(title="Algebra", description="x", instructor_id=student.id))
    await uow.enrollments.add(Enrollment(user_id=student.id, course_id=course.id))

    with pytest.raises(DuplicateRecordError):
        await uow.enrollments.add(Enrollment(user_id=student.id, course_id=course.id))


async def test_deleting_user_cascades(uow):
    student = await uow.users.add(_user(1))
    course = await uow.courses.add(Course(title="Algebra", description="x", instructor_id=student.id))
    await uow.enrollments.add(Enrollment(user_id=student.id, course_id=course.id))
    await uow.save()

    await uow.users.delete(student)
    await uow.save()

    assert await uow.courses.count() == 0
    assert await uow.enrollments.count() == 0
