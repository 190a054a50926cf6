from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from albaranes.schemas.common import Address, CamelModel, UserRef


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1)
    project_code: str = Field(min_length=1)
    email: EmailStr
    code: str = ""
    address: Optional[Address] = None
    client_id: int


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    project_code: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    code: Optional[str] = None
    address: Optional[Address] = None
    client_id: Optional[int] = None


class ClientSummary(CamelModel):
    id: int
    name: str
    email: str
    cif: str


class ProjectOut(CamelModel):
    id: int
    name: str
    project_code: str
    email: str
    code: str = ""
    address: Optional[Address] = None
    client_id: Optional[int] = None
    client: Optional[ClientSummary] = None
    created_by_id: int
    created_by: Optional[UserRef] = None
    company_cif: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted: bool = False
    deleted_at: Optional[datetime] = None
