"""Credential storage backed by the users table."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.client import store_operation
from src.database.errors import Conflict, NotFound

from .hashing import CredentialHasher, default_hasher
from .models import User

logger = logging.getLogger(__name__)


class CredentialStore:
    """Verifies and creates user credentials.

    Args:
        session: Database session used for every call
        hasher: Password hashing capability
        timeout: Deadline in seconds for each store call

    """

    def __init__(self, session: AsyncSession, hasher: CredentialHasher = default_hasher, timeout: float | None = 5.0):
        self.session = session
        self.hasher = hasher
        self.timeout = timeout

    async def get_by_username(self, username: str) -> User | None:
        """Fetch a user by username, or None if there is no such user."""
        async with store_operation(self.timeout, "look up user"):
            stmt = select(User).where(User.username == username)
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

    async def verify(self, username: str, password: str) -> bool:
        """Check a username/password pair against the stored hash.

        Returns:
            True if the password matches, False otherwise

        Raises:
            NotFound: If no user has this username
            PersistenceError: If the lookup fails or times out

        """
        user = await self.get_by_username(username)
        if user is None:
            raise NotFound(f"User {username!r} does not exist")
        return self.hasher.verify(password, user.password_hash)

    async def create(self, username: str, password_hash: str, email: str) -> User:
        """Insert and commit a new user row.

        Raises:
            Conflict: If the username is already taken
            PersistenceError: If the insert fails for any other reason

        """
        if await self.get_by_username(username) is not None:
            raise Conflict(f"Username {username!r} already registered")

        user = User(username=username, password_hash=password_hash, email=email)
        async with store_operation(self.timeout, "create user"):
            try:
                self.session.add(user)
                await self.session.commit()
            except IntegrityError as exc:
                # Lost a race with a concurrent registration of the same username
                await self.session.rollback()
                raise Conflict(f"Username {username!r} already registered") from exc
            except BaseException:
                await self.session.rollback()
                raise

        logger.info(f"New user registered: {user.username}")
        return user

    async def register(self, username: str, password: str, email: str) -> User:
        """Hash a plaintext password and create the user."""
        return await self.create(username, self.hasher.hash(password), email)
