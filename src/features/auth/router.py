"""Authentication router (login and token refresh endpoints)."""

import logging

from fastapi import APIRouter, Depends

from .dependencies import get_session_issuer, get_session_refresher
from .schemas import LoginResponse, RefreshTokenRequest, RefreshTokenResponse, UserLoginRequest
from .service import SessionIssuer, SessionRefresher

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(data: UserLoginRequest, issuer: SessionIssuer = Depends(get_session_issuer)):
    """Login and get tokens.

    - **username**: Username
    - **password**: Password

    Returns a short-lived access token and a refresh token. Any refresh token
    from an earlier login of the same user is revoked.
    """
    issued = await issuer.login(data.username, data.password)
    return LoginResponse(token=issued.access_token, refresh=issued.refresh_token)


@router.post("/refresh-token", response_model=RefreshTokenResponse)
async def refresh_token(data: RefreshTokenRequest, refresher: SessionRefresher = Depends(get_session_refresher)):
    """Get a new access token using a refresh token.

    - **refresh_token**: Refresh token from the last login

    The refresh token is not replaced and stays valid until it expires or the
    user logs in again.
    """
    token = await refresher.refresh(data.refresh_token)
    return RefreshTokenResponse(token=token)
