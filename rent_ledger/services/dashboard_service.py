from dataclasses import dataclass
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from rent_ledger.core.months import month_key
from rent_ledger.models.property import Unit
from rent_ledger.models.tenant import Tenant
from rent_ledger.models.user import User
from rent_ledger.repositories.property_repository import PropertyRepository
from rent_ledger.repositories.tenant_repository import TenantRepository
from rent_ledger.services.balance import BalanceSummary, PaymentStatus, round_currency
from rent_ledger.services.balance_service import get_balance_source


@dataclass
class DashboardRow:
    unit: Unit
    tenant: Optional[Tenant]
    summary: Optional[BalanceSummary]


class DashboardService:
    """Per-unit balances and account totals for a viewed month"""

    def __init__(self, db: Session):
        self.db = db
        self.property_repo = PropertyRepository(db)
        self.tenant_repo = TenantRepository(db)

    def get_rows(
        self,
        user: User,
        target_month: date,
        source: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> tuple[str, list[DashboardRow]]:
        """
        Resolve every unit of the account.

        Returns:
            (balance source name, rows ordered by property and unit number)
        """
        balance_source = get_balance_source(self.db, source)
        tenants_by_unit = {t.unit_id: t for t in self.tenant_repo.get_by_user(user.id)}

        rows = []
        for unit in self.property_repo.get_units_by_user(user.id):
            tenant = tenants_by_unit.get(unit.id)
            summary = None
            if tenant is not None:
                summary = balance_source.tenant_balance(tenant, target_month, as_of)
            rows.append(DashboardRow(unit=unit, tenant=tenant, summary=summary))
        return balance_source.name, rows

    def get_dashboard(
        self,
        user: User,
        target_month: date,
        source: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> dict:
        source_name, rows = self.get_rows(user, target_month, source, as_of)

        units = []
        for row in rows:
            summary = row.summary
            units.append(
                {
                    "unit_id": row.unit.id,
                    "unit_number": row.unit.unit_number,
                    "property_id": row.unit.property_id,
                    "property_name": row.unit.property.name,
                    "tenant_id": row.tenant.id if row.tenant else None,
                    "tenant_name": row.tenant.name if row.tenant else None,
                    "tenant_phone": row.tenant.phone if row.tenant else None,
                    "rent_amount": float(row.tenant.rent_amount) if row.tenant else None,
                    # Vacant units show as unpaid with zero figures
                    "payment_status": summary.status if summary else PaymentStatus.UNPAID,
                    "expected": summary.expected if summary else 0,
                    "paid": summary.total_paid if summary else 0,
                    "balance": summary.balance if summary else 0,
                    "paid_this_period": summary.paid_this_period if summary else 0,
                }
            )

        occupied = [row for row in rows if row.tenant is not None]
        summaries = [row.summary for row in occupied]
        stats = {
            "total_units": len(rows),
            "occupied_units": len(occupied),
            "vacant_units": len(rows) - len(occupied),
            "total_expected": sum(s.expected for s in summaries),
            "total_paid": sum(s.total_paid for s in summaries),
            "total_arrears": sum(s.balance for s in summaries if s.balance > 0),
            "total_deposits": round_currency(
                sum(float(row.tenant.security_deposit or 0) for row in occupied)
            ),
            "collected_this_period": sum(s.paid_this_period for s in summaries),
        }

        return {
            "month": month_key(target_month),
            "source": source_name,
            "units": units,
            "stats": stats,
        }
