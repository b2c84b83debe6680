"""Authentication models (refresh token persistence)."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, utcnow


class RefreshToken(Base):
    """Opaque refresh token owned by a user.

    A row is Active until a later rotation for the same user flips ``revoked``
    or until ``expires_at`` passes. Rows are never deleted, they stay behind
    as an audit trail of issued sessions.
    """

    __tablename__ = "refresh_tokens"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Token data
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false(), index=True)

    # Audit trail
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token's expiry has passed."""
        expires_at = self.expires_at
        # Some backends (SQLite) hand back naive datetimes; stored values are always UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at <= (now or utcnow())

    def is_active(self, now: datetime | None = None) -> bool:
        """Check whether the token can still be used."""
        return not self.revoked and not self.is_expired(now)

    def __repr__(self) -> str:
        return f"RefreshToken(id={self.id!r}, user_id={self.user_id!r}, revoked={self.revoked!r})"
