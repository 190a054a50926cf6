from sqlmodel import SQLModel, Field
from typing import Optional
from sqlalchemy import Column, JSON

from albaranes.models.mixins import AUTOINCREMENT, SoftDeleteFields


class User(SoftDeleteFields, table=True):
    __table_args__ = AUTOINCREMENT

    id: Optional[int] = Field(default=None, primary_key=True)

    email: str = Field(index=True, unique=True)
    password_hash: str

    status: int = 0  # 0 pendiente de verificación | 1 verificado
    role: str = "user"  # user | admin | guest
    is_autonomo: bool = False

    verification_code: Optional[str] = None
    attempts: int = 3

    # Datos personales
    name: str = ""
    surnames: str = ""
    nif: str = ""
    address: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Datos de empresa: name, cif, street, number, postal, city, province
    company: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Solo invitados: usuario que los invitó
    company_owner_id: Optional[int] = Field(default=None, foreign_key="user.id")

    logo: str = ""
    password_recovery_code: str = ""
    recovery_attempts: int = 3

    @property
    def company_cif(self) -> Optional[str]:
        cif = (self.company or {}).get("cif")
        return (cif or "").strip() or None
