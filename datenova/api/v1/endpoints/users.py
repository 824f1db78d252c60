"""
User Management Endpoints Module

This module provides endpoints for user profile management. All endpoints require
super-admin privileges except /me, which returns the caller's own profile.

Profiles are created by activating an invitation, never directly.
"""
from typing import Any, List

from fastapi import APIRouter, Depends

from datenova.api import deps
from datenova.core.errors import PermissionDenied
from datenova.db.gateway import DataGateway
from datenova.models.user import User, UserRead
from datenova.schemas.user import UserReadWithCompany, UserUpdate
from datenova.services.validation import user_schema, validate_or_raise

router = APIRouter()


@router.get("", response_model=List[UserReadWithCompany])
def read_users(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
) -> Any:
    """
    Retrieve all user profiles with their company, ordered by name.
    """
    users = gateway.select(User, order_by="nombre", expand=("empresa",))
    return [UserReadWithCompany.model_validate(u, from_attributes=True) for u in users]


@router.get("/me", response_model=UserRead)
def read_user_me(
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Get current user's profile.
    """
    return UserRead.model_validate(current_user, from_attributes=True)


@router.patch("/{user_id}", response_model=UserReadWithCompany)
def update_user(
    *,
    user_id: str,
    user_in: UserUpdate,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
) -> Any:
    """
    Update a user's name, role, company and rates.
    """
    user = gateway.select_one(User, id=user_id)
    patch = user_in.model_dump(exclude_unset=True)
    if "empresa_id" in patch and not patch["empresa_id"]:
        patch["empresa_id"] = None

    # Validate the merged form, as the edit screen always sends every field
    form = {"nombre": user.nombre, "rol": user.rol, "tarifa_hora": user.tarifa_hora,
            "billable_rate": user.billable_rate}
    form.update(patch)
    validate_or_raise(form, user_schema())

    gateway.update(User, patch, id=user_id)
    updated = gateway.select_one(User, id=user_id, expand=("empresa",))
    return UserReadWithCompany.model_validate(updated, from_attributes=True)


@router.delete("/{user_id}")
def delete_user(
    *,
    user_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
) -> Any:
    """
    Delete a user profile. The login account is kept, so the person simply
    loses access until invited again. Super-admins cannot delete themselves.
    """
    if user_id == current_user.id:
        raise PermissionDenied("No puedes eliminar tu propio usuario")
    gateway.select_one(User, id=user_id)
    gateway.delete(User, id=user_id)
    return {"status": "success", "detail": "Usuario eliminado"}
