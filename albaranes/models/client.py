from sqlmodel import Field, Relationship
from typing import Optional, TYPE_CHECKING
from sqlalchemy import Column, JSON

from albaranes.models.mixins import AUTOINCREMENT, SoftDeleteFields, TimestampFields

if TYPE_CHECKING:
    from albaranes.models.user import User


class Client(TimestampFields, SoftDeleteFields, table=True):
    __tablename__ = "client"
    __table_args__ = AUTOINCREMENT

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    email: str
    phone: str = ""
    address: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Identificación fiscal; abre la lectura a usuarios de la misma empresa
    cif: str = Field(index=True)

    created_by_id: int = Field(foreign_key="user.id", index=True)
    created_by: Optional["User"] = Relationship()
