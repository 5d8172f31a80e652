"""Password hashing and session tokens"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from card_tracker.config import Settings
from card_tracker.domain.exceptions import ExpiredToken, InvalidToken

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72
MIN_SECRET_LENGTH = 32


def _truncate(password: str) -> str:
    """bcrypt only looks at the first 72 bytes of input"""
    encoded = password.encode("utf-8")
    if len(encoded) <= BCRYPT_MAX_BYTES:
        return password
    return encoded[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")


class CredentialService:
    """bcrypt password hashes and signed JWT session tokens"""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60 * 24 * 7,
        bcrypt_rounds: int = 10,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_delta = timedelta(minutes=expire_minutes)
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds)
        self._timing_guard_hash: str | None = None

        if len(secret) < MIN_SECRET_LENGTH:
            logger.warning(
                "JWT secret is shorter than recommended",
                extra={"secret_length": len(secret), "recommended_length": MIN_SECRET_LENGTH},
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_minutes=settings.access_token_expire_minutes,
            bcrypt_rounds=settings.bcrypt_rounds,
        )

    def hash_password(self, password: str) -> str:
        """Salted bcrypt hash; two calls with the same password differ"""
        return self.pwd_context.hash(_truncate(password))

    def verify_password(self, password: str, password_hash: str | None) -> bool:
        """
        Check a password against a stored hash using bcrypt's own comparison.

        A missing hash (unknown user) still costs one bcrypt verification so
        both failure paths take the same time.
        """
        if not password_hash:
            if self._timing_guard_hash is None:
                self._timing_guard_hash = self.pwd_context.hash("timing-guard")
            self.pwd_context.verify(_truncate(password), self._timing_guard_hash)
            return False
        return self.pwd_context.verify(_truncate(password), password_hash)

    def issue_token(self, user_id: uuid.UUID | str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.expire_delta,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> uuid.UUID:
        """
        Decode a session token and return the user id it was issued for.

        Raises:
            ExpiredToken: Token signature is valid but past its expiry
            InvalidToken: Bad signature, malformed token or missing subject
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise ExpiredToken() from e
        except JWTError as e:
            raise InvalidToken() from e

        try:
            return uuid.UUID(payload["sub"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidToken() from e
