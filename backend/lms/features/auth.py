"""Login."""

import logging

from lms.core.error_codes import ErrorCode
from lms.core.pipeline import ResultHandler
from lms.core.result import Result
from lms.models.auth import AuthResponse, LoginCommand

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


class LoginHandler(ResultHandler[LoginCommand]):
    """Validate credentials and issue a JWT."""

    success_message = "Login successful"

    async def handle(self, request: LoginCommand) -> Result[AuthResponse]:
        user = await self.uow.users.get_by_email(request.email)
        if user is None or not self.context.password_hasher.verify(request.password, user.password_hash):
            logger.info("Failed login attempt for %s", request.email)
            return Result.failure(INVALID_CREDENTIALS_MESSAGE, ErrorCode.INVALID_CREDENTIALS)

        token, expires_at = self.context.token_service.create_access_token(user)
        return Result.success(AuthResponse(token=token, expires_at=expires_at))
