from sqlmodel import Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import Column, JSON

from albaranes.models.mixins import AUTOINCREMENT, TimestampFields, utcnow

if TYPE_CHECKING:
    from albaranes.models.user import User
    from albaranes.models.project import Project


class DeliveryNote(TimestampFields, table=True):
    __tablename__ = "delivery_note"
    __table_args__ = AUTOINCREMENT

    id: Optional[int] = Field(default=None, primary_key=True)

    project_id: int = Field(foreign_key="project.id", index=True)
    project: Optional["Project"] = Relationship()

    created_by_id: int = Field(foreign_key="user.id", index=True)
    created_by: Optional["User"] = Relationship()

    description: str = ""

    # [{"person": str, "hours": float}]
    work_entries: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    # [{"name": str, "quantity": float}]
    material_entries: List[dict] = Field(default_factory=list, sa_column=Column(JSON))

    date: datetime = Field(default_factory=utcnow)

    signature: str = ""  # URL de la firma; no vacía = albarán firmado
    pdf_url: str = ""

    @property
    def is_signed(self) -> bool:
        return bool(self.signature and self.signature.strip())
