"""Refresh token persistence and rotation."""

import base64
import hmac
import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.base import utcnow
from src.database.client import store_operation
from src.database.errors import NotFound
from src.features.user.models import User

from .models import RefreshToken

logger = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 32


class RefreshTokenStore:
    """Stateful store of opaque refresh tokens.

    ``rotate`` is the only write path and the only place that enforces the
    rule of at most one active refresh token per user: it revokes every
    earlier token of the user and inserts the new one in a single transaction.

    Args:
        session: Database session used for every call
        ttl: Lifetime of a newly inserted token
        timeout: Deadline in seconds for each store call
        clock: Source of the current time

    """

    def __init__(
        self,
        session: AsyncSession,
        ttl: timedelta = timedelta(hours=24),
        timeout: float | None = 5.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.ttl = ttl
        self.timeout = timeout
        self._clock = clock

    @staticmethod
    def generate() -> str:
        """Create a new random refresh token string (32 bytes, base64url)."""
        return base64.urlsafe_b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")

    async def rotate(self, username: str, new_token: str) -> RefreshToken:
        """Revoke the user's existing tokens and store a new one, atomically.

        Any failure rolls the whole transaction back, leaving earlier tokens
        exactly as they were.

        Args:
            username: Owner of the new token
            new_token: Token string from ``generate``

        Returns:
            The inserted RefreshToken row

        Raises:
            NotFound: If no user has this username
            PersistenceError: If the transaction fails or times out

        """
        now = self._clock()

        async with store_operation(self.timeout, "rotate refresh token"):
            try:
                user_stmt = select(User.id).where(User.username == username)
                user_id = (await self.session.execute(user_stmt)).scalar_one_or_none()
                if user_id is None:
                    raise NotFound(f"User {username!r} does not exist")

                revoke_stmt = (
                    update(RefreshToken)
                    .where(RefreshToken.user_id == user_id, ~RefreshToken.revoked)
                    .values(revoked=True, revoked_at=now)
                )
                revoked = await self.session.execute(revoke_stmt)

                refresh_token = RefreshToken(user_id=user_id, token=new_token, expires_at=now + self.ttl)
                self.session.add(refresh_token)
                await self.session.commit()
            except BaseException:
                await self.session.rollback()
                raise

        logger.info(f"Refresh token rotated for {username} ({revoked.rowcount} previous revoked)")
        return refresh_token

    async def validate(self, username: str, token: str) -> bool:
        """Check that a token is active and owned by ``username``.

        Returns:
            True if a non-revoked, unexpired row with exactly this token exists
            for the user, False otherwise

        Raises:
            PersistenceError: If the lookup fails or times out

        """
        stmt = (
            select(RefreshToken.token)
            .join(User, User.id == RefreshToken.user_id)
            .where(
                RefreshToken.token == token,
                User.username == username,
                ~RefreshToken.revoked,
                RefreshToken.expires_at > self._clock(),
            )
        )
        async with store_operation(self.timeout, "validate refresh token"):
            stored = (await self.session.execute(stmt)).scalar_one_or_none()

        if stored is None:
            return False
        return hmac.compare_digest(stored.encode(), token.encode())

    async def resolve_owner(self, token: str) -> str:
        """Find the username owning an active token.

        Raises:
            NotFound: If no non-revoked, unexpired row has this token
            PersistenceError: If the lookup fails or times out

        """
        stmt = (
            select(User.username)
            .join(RefreshToken, RefreshToken.user_id == User.id)
            .where(
                RefreshToken.token == token,
                ~RefreshToken.revoked,
                RefreshToken.expires_at > self._clock(),
            )
        )
        async with store_operation(self.timeout, "resolve refresh token owner"):
            username = (await self.session.execute(stmt)).scalar_one_or_none()

        if username is None:
            raise NotFound("No active refresh token matches")
        return username

    async def get(self, token: str) -> RefreshToken | None:
        """Fetch a token row regardless of its state."""
        async with store_operation(self.timeout, "fetch refresh token"):
            stmt = select(RefreshToken).where(RefreshToken.token == token)
            return (await self.session.execute(stmt)).scalar_one_or_none()
