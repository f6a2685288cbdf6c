"""Tests for error code bands and status mapping."""

import pytest

from lms.core.error_codes import ErrorCategory, ErrorCode, error_code_for_status, status_for_error_code


@pytest.mark.parametrize(
    ("code", "category"),
    [
        (ErrorCode.INVALID_EMAIL, ErrorCategory.VALIDATION),
        (ErrorCode.INSTRUCTOR_NOT_FOUND, ErrorCategory.NOT_FOUND),
        (ErrorCode.RATE_LIMITED, ErrorCategory.AUTH),
        (ErrorCode.COURSE_ALREADY_EXISTS, ErrorCategory.CONFLICT),
        (ErrorCode.TRANSACTION_ERROR, ErrorCategory.SERVER),
    ],
)
def test_category_follows_band(code, category):
    assert code.category is category


@pytest.mark.parametrize(
    ("code", "status"),
    [
        (ErrorCode.VALIDATION_ERROR, 400),
        (ErrorCode.DUPLICATE_EMAIL, 409),
        (ErrorCode.DUPLICATE_ENROLLMENT, 409),
        (ErrorCode.COURSE_NOT_FOUND, 404),
        (ErrorCode.TOKEN_EXPIRED, 401),
        (ErrorCode.FORBIDDEN, 403),
        (ErrorCode.RATE_LIMITED, 429),
        (ErrorCode.DATABASE_ERROR, 500),
        (9999, 500),
        (None, 500),
    ],
)
def test_status_for_error_code(code, status):
    assert status_for_error_code(code) == status


def test_error_code_for_status_defaults_to_internal():
    assert error_code_for_status(404) is ErrorCode.USER_NOT_FOUND
    assert error_code_for_status(418) is ErrorCode.INTERNAL_SERVER_ERROR
