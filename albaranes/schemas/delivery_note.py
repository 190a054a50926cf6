from pydantic import Field
from typing import List, Optional
from datetime import datetime

from albaranes.schemas.common import Address, CamelModel, UserRef
from albaranes.schemas.project import ClientSummary


class WorkEntry(CamelModel):
    person: str = Field(min_length=1)
    hours: float = Field(ge=0)


class MaterialEntry(CamelModel):
    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)


class DeliveryNoteCreate(CamelModel):
    project_id: int
    description: str = ""
    work_entries: List[WorkEntry] = []
    material_entries: List[MaterialEntry] = []
    date: Optional[datetime] = None


class DeliveryNoteUpdate(CamelModel):
    project_id: Optional[int] = None
    description: Optional[str] = None
    work_entries: Optional[List[WorkEntry]] = None
    material_entries: Optional[List[MaterialEntry]] = None
    date: Optional[datetime] = None


class ProjectSummary(CamelModel):
    id: int
    name: str
    project_code: str
    address: Optional[Address] = None
    client: Optional[ClientSummary] = None


class DeliveryNoteOut(CamelModel):
    id: int
    project_id: int
    project: Optional[ProjectSummary] = None
    created_by_id: int
    created_by: Optional[UserRef] = None
    description: str = ""
    work_entries: List[WorkEntry] = []
    material_entries: List[MaterialEntry] = []
    date: datetime
    signature: str = ""
    pdf_url: str = ""
    created_at: datetime
    updated_at: datetime
