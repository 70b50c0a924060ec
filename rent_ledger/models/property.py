"""Property and unit models - the ownership chain from landlord to tenant."""

from sqlalchemy import String, Integer, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from rent_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rent_ledger.models.user import User
    from rent_ledger.models.tenant import Tenant


class Property(Base, TimestampMixin):
    """A building or plot owned by a landlord."""

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,  # Every query is scoped to one landlord
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="properties")
    units: Mapped[list["Unit"]] = relationship(
        "Unit",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="Unit.unit_number",
    )


class Unit(Base, TimestampMixin):
    """
    A rentable unit within a property.

    At most one tenant occupies a unit at a time. This is enforced by the
    tenant service rather than a schema constraint.
    """

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="units")
    tenants: Mapped[list["Tenant"]] = relationship(
        "Tenant",
        back_populates="unit",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("property_id", "unit_number", name="uq_property_unit_number"),
    )
