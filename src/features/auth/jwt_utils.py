"""JWT utilities for authentication."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from jwt.exceptions import InvalidSignatureError, InvalidTokenError

from src.config.settings import Settings
from src.database.base import utcnow

from .exceptions import Expired, Malformed, SignatureInvalid


@dataclass(frozen=True)
class AccessClaims:
    """Decoded payload of a verified access token."""

    username: str
    issuer: str
    expires_at: datetime


class AccessTokenCodec:
    """Issues and verifies short-lived HMAC-signed access tokens.

    Tokens are compact JWS strings (header.payload.signature, base64url) with
    the claims ``username``, ``iss`` and ``exp``. Nothing is stored: a token is
    valid as long as its signature matches and its expiry lies in the future.

    Args:
        secret: Process-wide signing secret
        algorithm: HMAC algorithm name understood by PyJWT
        issuer: Value written to and required in the ``iss`` claim
        ttl: Lifetime of an issued token
        clock: Source of the current time

    """

    def __init__(
        self,
        secret: str | bytes,
        algorithm: str = "HS256",
        issuer: str = "my-app",
        ttl: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.ttl = ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, config: Settings) -> "AccessTokenCodec":
        """Build the codec from application settings."""
        return cls(
            secret=config.jwt_secret,
            algorithm=config.jwt_algorithm,
            issuer=config.jwt_issuer,
            ttl=timedelta(minutes=config.access_token_expire_minutes),
        )

    def issue(self, username: str, now: datetime | None = None) -> str:
        """Create a signed access token for a username.

        Args:
            username: Identity to assert
            now: Issue time, defaults to the codec clock

        Returns:
            Encoded JWT token string

        """
        issued_at = now or self._clock()
        payload = {
            "username": username,
            "iss": self.issuer,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> AccessClaims:
        """Verify a token and return its claims.

        The signature is checked before the expiry, so a forged token never
        reports as merely expired.

        Raises:
            SignatureInvalid: If the signature does not match
            Expired: If the token expired at or before ``now``
            Malformed: If the token cannot be parsed or lacks required claims

        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": False, "require": ["exp", "iss"]},
            )
        except InvalidSignatureError as err:
            raise SignatureInvalid("Signature verification failed") from err
        except InvalidTokenError as err:
            raise Malformed(str(err)) from err

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise Malformed("Token has no username claim")

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, int | float):
            raise Malformed("Token expiry is not a timestamp")
        try:
            expires_at = datetime.fromtimestamp(exp, UTC)
        except (OverflowError, OSError, ValueError) as err:
            raise Malformed("Token expiry is out of range") from err

        if expires_at <= (now or self._clock()):
            raise Expired("Token has expired")

        return AccessClaims(username=username, issuer=payload["iss"], expires_at=expires_at)
