from pydantic import BaseModel
from typing import Optional

from datenova.models.company import CompanyRead
from datenova.models.user import UserRead


# Properties accepted when an administrator edits a profile
class UserUpdate(BaseModel):
    nombre: Optional[str] = None
    rol: Optional[str] = None
    empresa_id: Optional[str] = None
    tarifa_hora: Optional[float] = None
    billable_rate: Optional[float] = None
    avatar_url: Optional[str] = None


# Properties to return to client
class UserReadWithCompany(UserRead):
    empresa: Optional[CompanyRead] = None
