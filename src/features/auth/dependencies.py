"""Authentication dependencies for FastAPI."""

from datetime import timedelta

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.features.user.dependencies import get_credential_store
from src.features.user.store import CredentialStore

from .jwt_utils import AccessTokenCodec
from .service import SessionIssuer, SessionRefresher
from .store import RefreshTokenStore


def get_token_codec(request: Request) -> AccessTokenCodec:
    """Get the access token codec the application was built with.

    The same instance backs RequestAuthenticator, so tokens minted by the
    endpoints are always verifiable by the middleware.
    """
    return request.app.state.token_codec


def get_refresh_token_store(session: AsyncSession = Depends(get_db_session)) -> RefreshTokenStore:
    """Build a refresh token store bound to the request's session."""
    return RefreshTokenStore(
        session,
        ttl=timedelta(hours=settings.refresh_token_expire_hours),
        timeout=settings.store_timeout_seconds,
    )


def get_session_issuer(
    credentials: CredentialStore = Depends(get_credential_store),
    codec: AccessTokenCodec = Depends(get_token_codec),
    refresh_tokens: RefreshTokenStore = Depends(get_refresh_token_store),
) -> SessionIssuer:
    """Build the login orchestrator."""
    return SessionIssuer(credentials, codec, refresh_tokens)


def get_session_refresher(
    codec: AccessTokenCodec = Depends(get_token_codec),
    refresh_tokens: RefreshTokenStore = Depends(get_refresh_token_store),
) -> SessionRefresher:
    """Build the refresh orchestrator."""
    return SessionRefresher(codec, refresh_tokens)
