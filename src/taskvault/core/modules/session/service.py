from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import jwt
import structlog

from taskvault.core.modules.session.models import SESSION_TTL, AuthToken, TokenClaims
from taskvault.errors import TokenInvalidError
from taskvault.utils import now

logger = structlog.get_logger(__name__)

JWT_ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class SessionTokenService:
    """Issues and verifies signed, time-limited session tokens.

    Tokens are stateless HS256 JWTs. There is no revocation list: a token is
    valid until it expires.
    """

    def __init__(self, secret: str, ttl: timedelta = SESSION_TTL, clock: Callable[[], datetime] = now) -> None:
        if not secret:
            raise ValueError("Session token secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, subject_id: str) -> AuthToken:
        issued_at = self._clock()
        payload = {
            "sub": subject_id,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return AuthToken(jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM))

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate a token.

        Raises:
            TokenInvalidError: Bad signature, malformed token, missing claims, or expired
        """
        try:
            # exp and iat are checked below against the service clock, not the wall clock
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": REQUIRED_CLAIMS, "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as e:
            # Reason stays in the logs; callers only ever see TokenInvalidError
            logger.debug("session_token_rejected", reason=type(e).__name__)
            raise TokenInvalidError from e

        subject_id = payload["sub"]
        if not isinstance(subject_id, str) or not subject_id:
            logger.debug("session_token_rejected", reason="InvalidSubject")
            raise TokenInvalidError

        issued_at = _timestamp(payload["iat"])
        expires_at = _timestamp(payload["exp"])
        if issued_at is None or expires_at is None:
            logger.debug("session_token_rejected", reason="InvalidTimestamp")
            raise TokenInvalidError
        if expires_at <= self._clock():
            logger.debug("session_token_rejected", reason="ExpiredSignatureError")
            raise TokenInvalidError

        return TokenClaims(subject_id=subject_id, issued_at=issued_at, expires_at=expires_at)


def _timestamp(value: object) -> datetime | None:
    """Convert a NumericDate claim to an aware datetime, or None if it is not one."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
