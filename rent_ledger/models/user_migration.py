"""Per-user migration state driving the automatic charges migration."""

from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, ForeignKey, Enum, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from rent_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rent_ledger.models.user import User


class MigrationStatus(str, PyEnum):
    """
    Migration lifecycle.

    pending -> running -> completed | failed. A failed migration stays
    failed until an operator resets it.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class UserMigration(Base, TimestampMixin):
    """One row per (user, migration_key)"""

    __tablename__ = "user_migrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    migration_key: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[MigrationStatus] = mapped_column(
        Enum(MigrationStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=MigrationStatus.PENDING,
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="migrations")

    __table_args__ = (
        UniqueConstraint("user_id", "migration_key", name="uq_user_migration_key"),
    )

    def __repr__(self) -> str:
        return f"<UserMigration(user_id={self.user_id}, key='{self.migration_key}', status={self.status.value})>"
