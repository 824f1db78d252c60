"""
Authentication Endpoints Module

This module provides authentication endpoints for sign-up, login, logout,
session lookup and account activation. The system supports both JWT bearer
token authentication and HTTP-only cookie-based authentication for browser
clients.

An account on its own cannot use the CRM: it needs a User profile, which is
created when the account is activated against an open invitation.
"""
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from datenova.api import deps
from datenova.core.config import settings
from datenova.core.errors import ValidationFailed
from datenova.core.security import create_access_token, get_password_hash, verify_password
from datenova.db.gateway import DataGateway
from datenova.db.session import get_db
from datenova.models.auth_models import AuthAccount
from datenova.models.user import User, UserRead
from datenova.schemas.auth import AccountRead, ActivateRequest, SessionRead, Token, UserRegister
from datenova.services.invitations import complete_invitation

router = APIRouter()

MIN_PASSWORD_LENGTH = 8


@router.post("/register", response_model=AccountRead)
def register_account(account_in: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new account.

    Only the identity is created; the account must then be activated through
    an invitation to get a profile.

    Raises:
        HTTPException 400: If an account with this email already exists
    """
    email = account_in.email.strip().lower()
    account = db.exec(select(AuthAccount).where(AuthAccount.email == email)).first()
    if account:
        raise HTTPException(
            status_code=400,
            detail="Este email ya está registrado",
        )

    db_account = AuthAccount(email=email, password=get_password_hash(account_in.password))
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    return db_account


@router.post("/login", response_model=Token)
def login(response: Response, db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()):
    """
    Authenticate an account and issue an access token.

    The token is also set as an HTTP-only cookie for browser clients.
    Note: OAuth2PasswordRequestForm uses 'username' field, but we treat it as email.

    Raises:
        HTTPException 401: If credentials are invalid
    """
    email = form_data.username.strip().lower()
    account = db.exec(select(AuthAccount).where(AuthAccount.email == email)).first()

    if not account or not verify_password(form_data.password, account.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email o contraseña incorrectos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(subject=account.email, expires_delta=access_token_expires)

    # httponly keeps the cookie away from JavaScript; lax still allows normal navigation
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )

    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/logout")
def logout(response: Response):
    """
    Clear the authentication cookie. API clients can simply discard their token.
    """
    response.delete_cookie("access_token")
    return {"status": "success", "detail": "Sesión cerrada"}


@router.get("/session", response_model=SessionRead)
def read_session(
    account: AuthAccount = Depends(deps.get_current_account),
    db: Session = Depends(get_db),
):
    """
    Current account and its profile. A missing profile means the account
    still has to be activated.
    """
    profile = db.get(User, account.id)
    return SessionRead(
        account=AccountRead.model_validate(account, from_attributes=True),
        profile=UserRead.model_validate(profile, from_attributes=True) if profile else None,
        needs_activation=profile is None,
    )


@router.post("/activate", response_model=UserRead)
def activate_account(
    activation: ActivateRequest,
    account: AuthAccount = Depends(deps.get_current_account),
    gateway: DataGateway = Depends(deps.get_gateway),
):
    """
    Set the final password and create the profile from the open invitation.

    Raises:
        ValidationFailed (422): Password mismatch, too short, or empty name
        NotFound (404): No open invitation for the account e-mail
    """
    if activation.password != activation.confirm_password:
        raise ValidationFailed([{"field": "confirm_password", "message": "Las contraseñas no coinciden"}])
    if len(activation.password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed([{
            "field": "password",
            "message": f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres",
        }])
    if not activation.nombre.strip():
        raise ValidationFailed([{"field": "nombre", "message": "Por favor ingresa tu nombre completo"}])

    if gateway.session.get(User, account.id):
        raise ValidationFailed([{"field": "account", "message": "La cuenta ya está activada"}])

    gateway.update(AuthAccount, {"password": get_password_hash(activation.password)}, id=account.id)
    profile = complete_invitation(gateway, account, activation.nombre)
    return UserRead.model_validate(profile, from_attributes=True)
