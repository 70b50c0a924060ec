from datetime import date
from typing import Optional
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from rent_ledger.core.security import extract_user_id
from rent_ledger.core.exceptions import UnauthorizedException
from rent_ledger.core.months import MONTH_KEY_PATTERN, parse_month_key
from rent_ledger.database import get_db
from rent_ledger.repositories.user_repository import UserRepository
from rent_ledger.models.user import User

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency to validate JWT and get/create user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Extract auth_user_id from 'sub' claim
    4. Get or auto-create User record (landlord account)
    5. Return User object for use in endpoints

    Raises:
        HTTPException 401: If token invalid or expired
    """
    try:
        token = credentials.credentials
        auth_user_id = extract_user_id(token)

        user_repo = UserRepository(db)
        user = user_repo.get_or_create_by_auth_id(auth_user_id)

        return user

    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_as_of(
    as_of: Optional[date] = Query(None, description="Date treated as today (defaults to today)")
) -> date:
    """The only place request handling reads the clock"""
    return as_of or date.today()


def get_target_month(
    month: Optional[str] = Query(
        None, pattern=MONTH_KEY_PATTERN.pattern, description="Viewed month YYYY-MM"
    ),
    as_of: date = Depends(get_as_of),
) -> date:
    """First day of the viewed month; defaults to the month of as_of"""
    if month is None:
        return as_of.replace(day=1)
    return parse_month_key(month)
