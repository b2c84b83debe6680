"""Authentication exceptions.

Token and credential failures keep distinct internal kinds for logging but
all collapse to the same 401 response at the HTTP boundary.
"""

from fastapi import HTTPException, status


# Internal token errors (raised by AccessTokenCodec.verify)
class TokenError(Exception):
    """Base class for access token verification failures."""


class Malformed(TokenError):
    """Token has the wrong shape, undecodable segments, or unusable claims."""


class SignatureInvalid(TokenError):
    """Token signature does not match its header and payload."""


class Expired(TokenError):
    """Token signature is valid but its expiry has passed."""


# HTTP-facing errors
class AuthenticationException(HTTPException):
    """Base authentication exception."""

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthenticationFailed(AuthenticationException):
    """Raised when username or password is incorrect."""

    def __init__(self):
        super().__init__(detail="Invalid username or password")


class InvalidRefreshToken(AuthenticationException):
    """Raised when a refresh token is unknown, revoked, or expired."""

    def __init__(self):
        super().__init__(detail="Invalid or expired refresh token")


class UnauthenticatedException(AuthenticationException):
    """Raised when a protected request carries no valid access token."""

    def __init__(self):
        super().__init__(detail="Not authenticated")


class IssuanceFailed(HTTPException):
    """Raised when tokens cannot be minted or persisted for a verified user."""

    def __init__(self, detail: str = "Could not generate token"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
