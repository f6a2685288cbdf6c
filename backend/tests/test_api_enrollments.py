"""API tests for /api/enrollments."""

import pytest_asyncio
from sqlalchemy import func, select

from lms.db.models import Course, Enrollment
from lms.db.repositories.enrollment_repo import EnrollmentRepository


@pytest_asyncio.fixture
async def enrollment(db, student_user, course) -> Enrollment:
    enrollment = Enrollment(user_id=student_user.id, course_id=course.id)
    db.add(enrollment)
    await db.commit()
    await db.refresh(enrollment)
    return enrollment


async def test_create_enrollment(client, student_headers, student_user, course):
    response = await client.post(
        "/api/enrollments",
        json={"userId": student_user.id, "courseId": course.id},
        headers=student_headers,
    )
    body = response.json()

    assert response.status_code == 201
    assert body["message"] == "Enrollment created successfully"

    fetched = await client.get(f"/api/enrollments/{body['data']}", headers=student_headers)
    assert fetched.json()["data"]["userName"] == "Sam Student"
    assert fetched.json()["data"]["courseTitle"] == "Intro to Databases"


async def test_duplicate_enrollment(client, student_headers, enrollment):
    response = await client.post(
        "/api/enrollments",
        json={"userId": enrollment.user_id, "courseId": enrollment.course_id},
        headers=student_headers,
    )
    body = response.json()

    assert response.status_code == 409
    assert body["errorCode"] == 4001


async def test_enrollment_unknown_user(client, student_headers, course):
    response = await client.post(
        "/api/enrollments", json={"userId": 999, "courseId": course.id}, headers=student_headers
    )

    assert response.status_code == 404
    assert response.json()["errorCode"] == 2001


async def test_enrollment_unknown_course(client, student_headers, student_user):
    response = await client.post(
        "/api/enrollments", json={"userId": student_user.id, "courseId": 999}, headers=student_headers
    )

    assert response.status_code == 404
    assert response.json()["errorCode"] == 2002


async def test_enrollment_validation(client, student_headers):
    response = await client.post("/api/enrollments", json={"userId": 0, "courseId": -1}, headers=student_headers)
    body = response.json()

    assert response.status_code == 400
    assert set(body["details"]["fieldErrors"]) == {"userId", "courseId"}


async def test_list_and_page_enrollments(client, student_headers, enrollment):
    listed = (await client.get("/api/enrollments", headers=student_headers)).json()
    paged = (await client.get("/api/enrollments/paged?pageSize=5", headers=student_headers)).json()

    assert [e["id"] for e in listed["data"]] == [enrollment.id]
    assert paged["pagination"]["totalCount"] == 1
    assert paged["pagination"]["pageSize"] == 5


async def test_get_missing_enrollment(client, student_headers):
    response = await client.get("/api/enrollments/999", headers=student_headers)

    assert response.status_code == 404
    assert response.json()["errorCode"] == 2003


async def test_update_enrollment(client, admin_headers, admin_user, enrollment):
    payload = {"id": enrollment.id, "userId": admin_user.id, "courseId": enrollment.course_id}

    response = await client.put(f"/api/enrollments/{enrollment.id}", json=payload, headers=admin_headers)

    assert response.status_code == 200
    fetched = await client.get(f"/api/enrollments/{enrollment.id}", headers=admin_headers)
    assert fetched.json()["data"]["userId"] == admin_user.id
    assert fetched.json()["data"]["userName"] == "Ada Admin"


async def test_update_enrollment_mismatch(client, admin_headers, enrollment):
    payload = {"id": enrollment.id + 1, "userId": enrollment.user_id, "courseId": enrollment.course_id}

    response = await client.put(f"/api/enrollments/{enrollment.id}", json=payload, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["errorCode"] == 1001


async def test_update_missing_enrollment(client, admin_headers, student_user, course):
    payload = {"id": 999, "userId": student_user.id, "courseId": course.id}

    response = await client.put("/api/enrollments/999", json=payload, headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["errorCode"] == 2003


async def test_delete_enrollment(client, admin_headers, enrollment):
    response = await client.delete(f"/api/enrollments/{enrollment.id}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.delete(f"/api/enrollments/{enrollment.id}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["errorCode"] == 2003


async def _never_enrolled(self, user_id, course_id, exclude_enrollment_id=None):
    return False


async def test_duplicate_enrollment_rejected_by_database(client, student_headers, enrollment, db, monkeypatch):
    user_id, course_id = enrollment.user_id, enrollment.course_id
    monkeypatch.setattr(EnrollmentRepository, "exists", _never_enrolled)

    response = await client.post(
        "/api/enrollments", json={"userId": user_id, "courseId": course_id}, headers=student_headers
    )
    body = response.json()

    assert response.status_code == 409
    assert body["errorCode"] == 4001
    assert body["message"] == f"User {user_id} is already enrolled in course {course_id}."
    assert await db.scalar(select(func.count()).select_from(Enrollment)) == 1


async def test_update_into_existing_pair_rejected_by_database(client, admin_headers, enrollment, db, monkeypatch):
    user_id, course_id = enrollment.user_id, enrollment.course_id
    other_course = Course(title="Compilers", description="Parsing", instructor_id=user_id)
    db.add(other_course)
    await db.commit()
    moved = Enrollment(user_id=user_id, course_id=other_course.id)
    db.add(moved)
    await db.commit()
    moved_id = moved.id
    monkeypatch.setattr(EnrollmentRepository, "exists", _never_enrolled)

    payload = {"id": moved_id, "userId": user_id, "courseId": course_id}
    response = await client.put(f"/api/enrollments/{moved_id}", json=payload, headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["errorCode"] == 4001
