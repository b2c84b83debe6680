"""Authentication service layer (login and refresh orchestration)."""

import logging
from dataclasses import dataclass

from jwt.exceptions import PyJWTError

from src.database.errors import NotFound, StoreError
from src.features.user.store import CredentialStore

from .exceptions import AuthenticationFailed, InvalidRefreshToken, IssuanceFailed
from .jwt_utils import AccessTokenCodec
from .store import RefreshTokenStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """Token pair handed out by a successful login."""

    access_token: str
    refresh_token: str


class SessionIssuer:
    """Logs users in: verifies credentials, then mints both tokens."""

    def __init__(self, credentials: CredentialStore, codec: AccessTokenCodec, refresh_tokens: RefreshTokenStore):
        self.credentials = credentials
        self.codec = codec
        self.refresh_tokens = refresh_tokens

    async def login(self, username: str, password: str) -> IssuedSession:
        """Authenticate a user and start a new session.

        Starting a session rotates the user's refresh token, so any refresh
        token from an earlier login stops working.

        Args:
            username: Username to authenticate
            password: Plain text password

        Returns:
            IssuedSession with the access and refresh tokens

        Raises:
            AuthenticationFailed: If the user does not exist or the password is wrong
            IssuanceFailed: If the tokens cannot be minted or stored
            PersistenceError: If the credential lookup itself fails

        """
        try:
            verified = await self.credentials.verify(username, password)
        except NotFound:
            logger.warning(f"Login attempt for unknown user: {username}")
            raise AuthenticationFailed() from None

        if not verified:
            logger.warning(f"Login attempt with wrong password: {username}")
            raise AuthenticationFailed()

        try:
            access_token = self.codec.issue(username)
            refresh_token = self.refresh_tokens.generate()
            await self.refresh_tokens.rotate(username, refresh_token)
        except (StoreError, PyJWTError) as exc:
            logger.error(f"Token issuance failed for {username}: {exc}")
            raise IssuanceFailed() from exc

        logger.info(f"User logged in: {username}")
        return IssuedSession(access_token=access_token, refresh_token=refresh_token)


class SessionRefresher:
    """Mints new access tokens from refresh tokens.

    The refresh token itself is not rotated here: it stays usable until it
    expires or the next login for the same user revokes it.
    """

    def __init__(self, codec: AccessTokenCodec, refresh_tokens: RefreshTokenStore):
        self.codec = codec
        self.refresh_tokens = refresh_tokens

    async def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token.

        The owner lookup and the validation both check revocation and expiry.
        Running both closes the window where a rotation commits between
        resolving the owner and minting the token.

        Raises:
            InvalidRefreshToken: If the token is unknown, revoked, expired, or
                the store cannot confirm it
            IssuanceFailed: If the access token cannot be minted

        """
        try:
            username = await self.refresh_tokens.resolve_owner(refresh_token)
            valid = await self.refresh_tokens.validate(username, refresh_token)
        except NotFound:
            logger.info("Refresh rejected: no active token matches")
            raise InvalidRefreshToken() from None
        except StoreError as exc:
            logger.error(f"Refresh rejected: store failure ({exc})")
            raise InvalidRefreshToken() from exc

        if not valid:
            logger.info(f"Refresh rejected: token for {username} failed validation")
            raise InvalidRefreshToken()

        try:
            return self.codec.issue(username)
        except PyJWTError as exc:
            logger.error(f"Access token issuance failed for {username}: {exc}")
            raise IssuanceFailed(detail="Could not generate new token") from exc
