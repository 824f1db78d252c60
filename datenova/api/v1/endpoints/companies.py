"""
Company Endpoints Module

CRUD for client companies. Managed by super-admins and advisors only.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from datenova.api import deps
from datenova.db.gateway import DataGateway
from datenova.models.company import Company, CompanyRead
from datenova.models.user import User
from datenova.services.validation import company_schema, validate_or_raise

router = APIRouter()

COMPANY_FIELDS = ("nombre", "email", "telefono", "direccion")


def _company_data(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: payload[key] for key in COMPANY_FIELDS if key in payload}


@router.get("", response_model=List[CompanyRead])
def list_companies(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_company_manager),
):
    """Retrieve all companies, newest first."""
    companies = gateway.select(Company, order_by="created_at", descending=True)
    return [CompanyRead.model_validate(c, from_attributes=True) for c in companies]


@router.post("", response_model=CompanyRead)
def create_company(
    payload: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_company_manager),
):
    validate_or_raise(payload, company_schema())
    company = gateway.insert(Company, [_company_data(payload)])[0]
    return CompanyRead.model_validate(gateway.select_one(Company, id=company.id), from_attributes=True)


@router.patch("/{company_id}", response_model=CompanyRead)
def update_company(
    company_id: str,
    payload: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_company_manager),
):
    """
    Update a company. The payload is the full edit form, so it is validated
    against the whole company schema.
    """
    gateway.select_one(Company, id=company_id)
    validate_or_raise(payload, company_schema())
    company = gateway.update(Company, _company_data(payload), id=company_id)[0]
    return CompanyRead.model_validate(company, from_attributes=True)


@router.delete("/{company_id}")
def delete_company(
    company_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_company_manager),
):
    """
    Delete a company. Fails with 409 while projects or users still reference it.
    """
    gateway.select_one(Company, id=company_id)
    gateway.delete(Company, id=company_id)
    return {"status": "success", "detail": "Empresa eliminada"}
