"""
Formula-based rent accrual.

Computes how much should have been billed to a tenant from lease start
through a target month, ignoring payments. Everything here is pure: no
database access and no clock reads. Callers pass the month they are looking
at and, where a lease start is missing, the date to treat as "now".

Amounts are left unrounded; rounding happens once, in the balance resolver.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from rent_ledger.core.months import add_months, days_in_month, month_start, months_between


@dataclass(frozen=True)
class AccrualResult:
    """
    Cumulative billing for one tenant up to a target month.

    Attributes:
        target_month: First day of the month being evaluated
        lease_month: First day of the month containing the lease start
        not_yet_due: True if the target month precedes the lease month
        first_month_charge: Amount billed for the lease month
        full_months_elapsed: Full-rent months billed after the lease month
        cumulative_expected: Opening balance + first month + full months
    """

    target_month: date
    lease_month: date
    not_yet_due: bool
    first_month_charge: float
    full_months_elapsed: int
    cumulative_expected: float


def _amount(value, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def first_month_charge(
    monthly_rent: float,
    lease_start: date,
    is_prorated: bool = False,
    first_month_override: Optional[float] = None,
) -> float:
    """
    Amount billed for the month containing the lease start.

    A manual override always wins. Otherwise a prorated lease pays for the
    days from the start day through month end, inclusive of the start day.
    """
    if first_month_override is not None:
        return float(first_month_override)

    rent = _amount(monthly_rent)
    if is_prorated:
        total_days = days_in_month(lease_start)
        days_remaining = total_days - lease_start.day + 1
        return rent / total_days * days_remaining

    return rent


def full_months_elapsed(lease_start: date, target_month: date) -> int:
    """Full-rent months billed after the lease month, through target_month inclusive"""
    second_month = add_months(month_start(lease_start), 1)
    return max(0, months_between(second_month, month_start(target_month)) + 1)


def calculate_accrual(
    monthly_rent: Optional[float],
    lease_start: Optional[date],
    opening_balance: Optional[float],
    is_prorated: Optional[bool],
    first_month_override: Optional[float],
    target_month: date,
    as_of: Optional[date] = None,
) -> AccrualResult:
    """
    Cumulative amount that should have been billed through target_month.

    Missing optional inputs fall back to defaults instead of raising: no
    rent or opening balance counts as 0, and a missing lease start is
    treated as as_of (itself defaulting to target_month), so the first
    billed month is the one being viewed.

    Args:
        monthly_rent: Monthly rent amount
        lease_start: Date the lease started
        opening_balance: Arrears carried in at lease start
        is_prorated: Whether the first month is pro-rated by days
        first_month_override: Manually entered first-month amount
        target_month: Any date in the month being evaluated
        as_of: Stand-in for "now" when lease_start is missing

    Returns:
        AccrualResult; not_yet_due results carry zero amounts
    """
    target = month_start(target_month)
    effective_start = lease_start or as_of or target
    lease_month = month_start(effective_start)

    if target < lease_month:
        return AccrualResult(
            target_month=target,
            lease_month=lease_month,
            not_yet_due=True,
            first_month_charge=0.0,
            full_months_elapsed=0,
            cumulative_expected=0.0,
        )

    rent = _amount(monthly_rent)
    first_charge = first_month_charge(
        rent, effective_start, bool(is_prorated), first_month_override
    )
    months = full_months_elapsed(effective_start, target)
    cumulative = _amount(opening_balance) + first_charge + months * rent

    return AccrualResult(
        target_month=target,
        lease_month=lease_month,
        not_yet_due=False,
        first_month_charge=first_charge,
        full_months_elapsed=months,
        cumulative_expected=cumulative,
    )


def calculate_tenant_accrual(tenant, target_month: date, as_of: Optional[date] = None) -> AccrualResult:
    """Run calculate_accrual with a tenant's stored billing parameters"""
    return calculate_accrual(
        monthly_rent=tenant.rent_amount,
        lease_start=tenant.lease_start,
        opening_balance=tenant.opening_balance,
        is_prorated=tenant.is_prorated,
        first_month_override=tenant.first_month_override,
        target_month=target_month,
        as_of=as_of,
    )
