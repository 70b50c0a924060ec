from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from rent_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rent_ledger.models.property import Property
    from rent_ledger.models.user_migration import UserMigration


class User(Base, TimestampMixin):
    """
    Landlord account, tracked from the auth service.

    Only stores user_id (sub from JWT) - no auth credentials.
    Auto-created on first API request with valid JWT.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_user_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    # auth_user_id is the 'sub' claim from JWT

    # Relationships
    properties: Mapped[list["Property"]] = relationship(
        "Property",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    migrations: Mapped[list["UserMigration"]] = relationship(
        "UserMigration",
        back_populates="user",
        cascade="all, delete-orphan",
    )
