"""Authentication schemas (DTOs)."""

from pydantic import BaseModel, Field


# Request schemas
class UserLoginRequest(BaseModel):
    """Login request."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str = Field(..., min_length=1)


# Response schemas
class LoginResponse(BaseModel):
    """Token pair returned by a successful login."""

    token: str
    refresh: str


class RefreshTokenResponse(BaseModel):
    """New access token returned by a successful refresh."""

    token: str
