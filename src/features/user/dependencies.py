"""User feature dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session

from .hashing import CredentialHasher, default_hasher
from .store import CredentialStore


def get_credential_hasher() -> CredentialHasher:
    """Get the process-wide password hasher."""
    return default_hasher


def get_credential_store(
    session: AsyncSession = Depends(get_db_session),
    hasher: CredentialHasher = Depends(get_credential_hasher),
) -> CredentialStore:
    """Build a credential store bound to the request's session."""
    return CredentialStore(session, hasher=hasher, timeout=settings.store_timeout_seconds)
