from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Enum, Text, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from rent_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rent_ledger.models.tenant import Tenant


class ChargeType(str, PyEnum):
    """Charge type enumeration"""

    RENT = "rent"
    OPENING_BALANCE = "opening_balance"
    OTHER = "other"


class Charge(Base, TimestampMixin):
    """
    One billed obligation for a tenant in a specific month.

    Charges are immutable once created. Uniqueness is enforced by partial
    indexes so concurrent check-then-create paths cannot duplicate rows:
    - one rent charge per (tenant_id, charge_month)
    - one opening_balance charge per tenant_id
    """

    __tablename__ = "charges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    charge_month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM
    type: Mapped[ChargeType] = mapped_column(
        Enum(ChargeType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ChargeType.RENT,
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="charges")

    __table_args__ = (
        Index("ix_charges_tenant_month", "tenant_id", "charge_month"),
        Index(
            "uq_charges_rent_tenant_month",
            "tenant_id",
            "charge_month",
            unique=True,
            sqlite_where=text("type = 'rent'"),
            postgresql_where=text("type = 'rent'"),
        ),
        Index(
            "uq_charges_opening_balance_tenant",
            "tenant_id",
            unique=True,
            sqlite_where=text("type = 'opening_balance'"),
            postgresql_where=text("type = 'opening_balance'"),
        ),
    )
