from sqlmodel import Field, Relationship
from typing import Optional, TYPE_CHECKING
from sqlalchemy import Column, JSON

from albaranes.models.mixins import AUTOINCREMENT, SoftDeleteFields, TimestampFields

if TYPE_CHECKING:
    from albaranes.models.user import User
    from albaranes.models.client import Client


class Project(TimestampFields, SoftDeleteFields, table=True):
    __tablename__ = "project"
    __table_args__ = AUTOINCREMENT

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(index=True)
    project_code: str = Field(index=True)
    email: str
    code: str = ""  # código externo
    address: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    client_id: Optional[int] = Field(
        default=None, foreign_key="client.id", ondelete="SET NULL"
    )
    client: Optional["Client"] = Relationship()

    created_by_id: int = Field(foreign_key="user.id", index=True)
    created_by: Optional["User"] = Relationship()

    # Copiado de la empresa del creador; no es propiedad, solo visibilidad
    company_cif: Optional[str] = Field(default=None, index=True)
