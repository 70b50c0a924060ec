from datetime import date
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from rent_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rent_ledger.models.tenant import Tenant


class Payment(Base, TimestampMixin):
    """
    Money received from a tenant.

    A payment with no allocations has not yet been reconciled against
    charges. Payments are immutable after creation.
    """

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM
    mpesa_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="payments")
    allocations: Mapped[list["PaymentAllocation"]] = relationship(
        "PaymentAllocation",
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="PaymentAllocation.applied_month",
    )

    __table_args__ = (Index("ix_payments_tenant_month", "tenant_id", "payment_month"),)


class PaymentAllocation(Base, TimestampMixin):
    """Portion of a payment applied to a specific charge month"""

    __tablename__ = "payment_allocations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    applied_month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM

    # Relationships
    payment: Mapped["Payment"] = relationship("Payment", back_populates="allocations")
