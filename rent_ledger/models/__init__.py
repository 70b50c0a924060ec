from rent_ledger.models.base import Base
from rent_ledger.models.user import User
from rent_ledger.models.property import Property, Unit
from rent_ledger.models.tenant import Tenant
from rent_ledger.models.charge import Charge, ChargeType
from rent_ledger.models.payment import Payment, PaymentAllocation
from rent_ledger.models.user_migration import UserMigration, MigrationStatus

__all__ = [
    "Base",
    "User",
    "Property",
    "Unit",
    "Tenant",
    "Charge",
    "ChargeType",
    "Payment",
    "PaymentAllocation",
    "UserMigration",
    "MigrationStatus",
]
