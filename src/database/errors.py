"""Relational store error kinds.

Stores raise these instead of leaking SQLAlchemy exceptions, so callers can
tell a missing row from a broken database without importing the driver.
"""


class StoreError(Exception):
    """Base class for relational store failures."""


class PersistenceError(StoreError):
    """Raised when the store is unavailable, times out, or fails unexpectedly."""


class NotFound(StoreError):
    """Raised when a required row does not exist."""


class Conflict(StoreError):
    """Raised when a write violates a uniqueness constraint."""
