from datetime import date
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from rent_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rent_ledger.models.property import Unit
    from rent_ledger.models.charge import Charge
    from rent_ledger.models.payment import Payment


class Tenant(Base, TimestampMixin):
    """
    A renter occupying a unit.

    The billing parameters (rent_amount, lease_start, opening_balance,
    is_prorated, first_month_override) drive formula-based accrual. The
    charge ledger materializes the same obligations as explicit rows.
    """

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unit_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rent_amount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    lease_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    opening_balance: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    is_prorated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    first_month_override: Mapped[float | None] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True
    )
    security_deposit: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )

    # Relationships
    unit: Mapped["Unit"] = relationship("Unit", back_populates="tenants")
    charges: Mapped[list["Charge"]] = relationship(
        "Charge",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment",
        back_populates="tenant",
        cascade="all, delete-orphan",  # Allocations cascade from payments
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', unit_id={self.unit_id})>"
