"""
Auth Account Model Module

Identity records (e-mail + password hash). Profiles live in the usuarios table
and reuse the account id.
"""
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid
from datetime import datetime


class AuthAccount(SQLModel, table=True):
    __tablename__ = "auth_users"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True, nullable=False)
    password: Optional[str] = None  # Hashed password (pbkdf2_sha256)
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
