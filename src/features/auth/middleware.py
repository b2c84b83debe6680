"""Bearer token authentication at the request boundary."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.security.utils import get_authorization_scheme_param
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from .exceptions import TokenError, UnauthenticatedException
from .jwt_utils import AccessTokenCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Verified identity attached to a protected request."""

    username: str


class RequestAuthenticator(BaseHTTPMiddleware):
    """Middleware that guards every path under a protected prefix.

    Requests under the prefix must carry ``Authorization: Bearer <token>``
    with a token the codec accepts. The verified identity is stored as a
    Principal in ``request.state.principal``; handlers read it through
    ``get_current_principal``. Every rejection gets the same 401 body so the
    caller cannot tell a forged token from an expired one.
    """

    def __init__(self, app: ASGIApp, codec: AccessTokenCodec, protected_prefix: str = "/api"):
        super().__init__(app)
        self.codec = codec
        self.protected_prefix = protected_prefix.rstrip("/")

    def is_protected(self, path: str) -> bool:
        """Check whether a request path requires a bearer token."""
        return path == self.protected_prefix or path.startswith(f"{self.protected_prefix}/")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Verify the bearer token, attach the principal, and forward."""
        path = request.url.path
        if not self.is_protected(path):
            return await call_next(request)

        authorization = request.headers.get("Authorization")
        scheme, token = get_authorization_scheme_param(authorization)
        if not authorization or scheme.lower() != "bearer" or not token:
            logger.info(f"Rejected request to {path}: missing bearer credentials")
            return self._unauthenticated()

        try:
            claims = self.codec.verify(token)
        except TokenError as exc:
            logger.info(f"Rejected request to {path}: {exc.__class__.__name__}")
            return self._unauthenticated()

        request.state.principal = Principal(username=claims.username)
        response: Response = await call_next(request)
        return response

    @staticmethod
    def _unauthenticated() -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_principal(request: Request) -> Principal:
    """Get the principal attached by RequestAuthenticator.

    Raises:
        UnauthenticatedException: If the request was not authenticated, for
            example when a handler is mounted outside the protected prefix

    """
    principal = getattr(request.state, "principal", None)
    if not isinstance(principal, Principal):
        raise UnauthenticatedException()
    return principal
