"""Request type -> handler class."""

from typing import Any

from lms.core.pipeline import Handler
from lms.features import auth, courses, enrollments, users
from lms.models import auth as auth_models
from lms.models import course as course_models
from lms.models import enrollment as enrollment_models
from lms.models import user as user_models

HANDLERS: dict[type, type[Handler[Any, Any]]] = {
    # Auth
    auth_models.LoginCommand: auth.LoginHandler,
    # Users
    user_models.GetAllUsersQuery: users.GetAllUsersHandler,
    user_models.GetPagedUsersQuery: users.GetPagedUsersHandler,
    user_models.GetUserByIdQuery: users.GetUserByIdHandler,
    user_models.CreateUserCommand: users.CreateUserHandler,
    user_models.UpdateUserCommand: users.UpdateUserHandler,
    user_models.DeleteUserCommand: users.DeleteUserHandler,
    # Courses
    course_models.GetAllCoursesQuery: courses.GetAllCoursesHandler,
    course_models.GetPagedCoursesQuery: courses.GetPagedCoursesHandler,
    course_models.GetCourseByIdQuery: courses.GetCourseByIdHandler,
    course_models.CreateCourseCommand: courses.CreateCourseHandler,
    course_models.UpdateCourseCommand: courses.UpdateCourseHandler,
    course_models.DeleteCourseCommand: courses.DeleteCourseHandler,
    # Enrollments
    enrollment_models.GetAllEnrollmentsQuery: enrollments.GetAllEnrollmentsHandler,
    enrollment_models.GetPagedEnrollmentsQuery: enrollments.GetPagedEnrollmentsHandler,
    enrollment_models.GetEnrollmentByIdQuery: enrollments.GetEnrollmentByIdHandler,
    enrollment_models.CreateEnrollmentCommand: enrollments.CreateEnrollmentHandler,
    enrollment_models.UpdateEnrollmentCommand: enrollments.UpdateEnrollmentHandler,
    enrollment_models.DeleteEnrollmentCommand: enrollments.DeleteEnrollmentHandler,
}
