"""
API Dependencies Module

This module provides FastAPI dependency functions for authentication and authorization.
It implements a dual authentication strategy supporting both bearer tokens (for API clients)
and HTTP-only cookies (for browser clients).

Authentication resolves an AuthAccount; most endpoints additionally need the
account's User profile, which only exists once the invitation was activated.
"""
from typing import List, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import ValidationError
from sqlmodel import Session, select

from datenova.core.config import settings
from datenova.db.gateway import DataGateway
from datenova.db.session import get_db
from datenova.models.auth_models import AuthAccount
from datenova.models.user import User, UserRole
from datenova.schemas.auth import TokenData
from datenova.services.realtime import change_feed

# auto_error=False allows us to check cookies as a fallback
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False,
)


def token_from_request(request: Request, token: Optional[str]) -> Optional[str]:
    """Bearer header first, then the access_token cookie ("Bearer <token>")."""
    if not token:
        token = request.cookies.get("access_token")
        if token and token.startswith("Bearer "):
            token = token.replace("Bearer ", "")
    return token


def account_from_token(db: Session, token: Optional[str]) -> AuthAccount:
    """
    Decode a JWT and load the account it names.

    Raises:
        HTTPException 401: If no token is provided or the account no longer exists
        HTTPException 403: If the token is invalid or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenData(email=payload.get("sub"))
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    account = db.exec(select(AuthAccount).where(AuthAccount.email == token_data.email)).first()
    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account


def get_current_account(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(reusable_oauth2),
) -> AuthAccount:
    return account_from_token(db, token_from_request(request, token))


def get_current_user(
    account: AuthAccount = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that retrieves the profile of the authenticated account.

    Raises:
        HTTPException 403: If the account has not been activated yet (no profile)
    """
    user = db.get(User, account.id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cuenta pendiente de activación",
        )
    return user


class RoleChecker:
    """
    Dependency factory for checking user roles.

    Usage: Depends(RoleChecker([UserRole.SUPER_ADMIN, UserRole.ADVISOR]))
    """
    def __init__(self, allowed_roles: List[UserRole]):
        self.allowed_roles = allowed_roles

    def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        if current_user.rol not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"The user does not have enough privileges. Required roles: {[r.value for r in self.allowed_roles]}"
            )
        return current_user


STAFF_ROLES = [UserRole.ADVISOR, UserRole.SUPPORT, UserRole.DEVELOPER, UserRole.SUPER_ADMIN]

require_superadmin = RoleChecker([UserRole.SUPER_ADMIN])
require_company_manager = RoleChecker([UserRole.SUPER_ADMIN, UserRole.ADVISOR])
require_staff = RoleChecker(STAFF_ROLES)


def get_gateway(db: Session = Depends(get_db)) -> DataGateway:
    """Per-request gateway publishing committed writes to the change feed."""
    return DataGateway(db, feed=change_feed)
