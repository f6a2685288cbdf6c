"""Password hashing and JWT issuing."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from lms.config import Settings
from lms.core.error_codes import ErrorCode
from lms.core.exceptions import UnauthorizedAccessError
from lms.db.models import User


class PasswordHasher:
    """bcrypt via passlib."""

    def __init__(self, rounds: int = 12) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash a plain-text password."""
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a plain-text password against a hash. Malformed hashes never match."""
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            return False


class TokenService:
    """Issues and validates HS256 access tokens carrying the user's role."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        self._lifetime = timedelta(minutes=settings.jwt_expiration_minutes)

    def create_access_token(self, user: User) -> tuple[str, datetime]:
        """Create a signed JWT. Returns the token and its expiry time."""
        now = datetime.now(UTC)
        expires_at = now + self._lifetime
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "iss": self._issuer,
            "aud": self._audience,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, expires_at

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT. Returns the claims or raises."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
            )
        except ExpiredSignatureError as exc:
            raise UnauthorizedAccessError("Token has expired", ErrorCode.TOKEN_EXPIRED) from exc
        except JWTError as exc:
            raise UnauthorizedAccessError("Invalid token", ErrorCode.UNAUTHORIZED) from exc

        if payload.get("sub") is None:
            raise UnauthorizedAccessError("Invalid token", ErrorCode.UNAUTHORIZED)
        return payload
