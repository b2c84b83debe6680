"""User registration router (API endpoints)."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from src.database.errors import Conflict, PersistenceError

from .dependencies import get_credential_store
from .exceptions import UserCreationFailed
from .schemas import UserRegisterRequest
from .store import CredentialStore

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Users"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_class=PlainTextResponse)
async def register(data: UserRegisterRequest, store: CredentialStore = Depends(get_credential_store)):
    """Register a new user.

    - **username**: Unique username
    - **password**: Plaintext password, stored as a salted Argon2 hash
    - **email**: Email address
    """
    try:
        await store.register(data.username, data.password, data.email)
    except Conflict:
        logger.warning(f"Registration rejected, username already taken: {data.username}")
        raise UserCreationFailed() from None
    except PersistenceError as exc:
        logger.error(f"Registration failed for {data.username}: {exc}")
        raise UserCreationFailed() from exc

    return "User created successfully"
