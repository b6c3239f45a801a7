"""SQLAlchemy models for the Branch Office API."""

from datetime import UTC, datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class SoftDeleteMixin:
    """Adds a nullable deleted_at marker; a set value hides the row by default."""

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True, default=None
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class BranchOffice(SoftDeleteMixin, Base):
    """A branch office. The id is supplied by the caller at creation."""

    __tablename__ = "branch_offices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(100), nullable=False)
    fax_number: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )


class ListStatus(str, PyEnum):
    """Trash visibility a list request may ask for; absent means live rows only."""

    DELETED = "deleted"
