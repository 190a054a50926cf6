from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from albaranes.schemas.common import Address, CamelModel, UserRef


class ClientCreate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = ""
    address: Optional[Address] = None
    cif: str = Field(min_length=1)


class ClientUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    cif: Optional[str] = None


class ClientOut(CamelModel):
    id: int
    name: str
    email: str
    phone: str = ""
    address: Optional[Address] = None
    cif: str
    created_by_id: int
    created_by: Optional[UserRef] = None
    created_at: datetime
    updated_at: datetime
    deleted: bool = False
    deleted_at: Optional[datetime] = None
