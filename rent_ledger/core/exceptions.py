class RentLedgerException(Exception):
    """Base exception for rent ledger"""

    pass


class UnauthorizedException(RentLedgerException):
    """Raised when JWT validation fails or no user is available"""

    pass


class NotFoundException(RentLedgerException):
    """Raised when resource not found"""

    pass


class ForbiddenException(RentLedgerException):
    """Raised when user tries to access another user's data"""

    pass


class ValidationException(RentLedgerException):
    """Raised for business logic validation errors"""

    pass


class ConflictException(RentLedgerException):
    """Raised when a write collides with an existing row"""

    pass


class DuplicateChargeException(ConflictException):
    """
    Raised when a charge with the same uniqueness key already exists.

    Rent charges are unique per (tenant, month); opening-balance charges
    are unique per tenant.
    """

    def __init__(self, tenant_id: int, charge_type: str, charge_month: str | None = None):
        self.tenant_id = tenant_id
        self.charge_type = charge_type
        self.charge_month = charge_month
        if charge_month:
            message = f"{charge_type} charge for tenant {tenant_id} in {charge_month} already exists"
        else:
            message = f"{charge_type} charge for tenant {tenant_id} already exists"
        super().__init__(message)
