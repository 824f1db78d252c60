from pydantic import BaseModel, EmailStr
from typing import Optional

from datenova.models.user import UserRead


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    email: Optional[str] = None


class UserRegister(BaseModel):
    email: EmailStr
    password: str


class AccountRead(BaseModel):
    id: str
    email: str
    created_at: Optional[str] = None


class SessionRead(BaseModel):
    account: AccountRead
    profile: Optional[UserRead] = None
    needs_activation: bool = False


class ActivateRequest(BaseModel):
    nombre: str
    password: str
    confirm_password: str
