"""
Política de acceso compartida por clientes, proyectos y albaranes.

Lectura
    - Siempre: registros creados por el usuario (created_by_id).
    - Cliente: además los de su mismo CIF de empresa (Client.cif).
    - Proyecto: además los de su mismo CIF de empresa (Project.company_cif).
    - Albarán: solo los propios.
    La rama de CIF se omite por completo si el usuario no tiene CIF; nunca
    se añade una condición que pueda casar con registros sin etiquetar.

Escritura
    - Cliente y albarán: solo el creador.
    - Proyecto: creador o mismo company_cif.

PDF de albaranes
    - Creador, o invitado cuyo invitador es el creador del albarán.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session

from albaranes.core.errors import Forbidden
from albaranes.models.client import Client
from albaranes.models.delivery_note import DeliveryNote
from albaranes.models.project import Project
from albaranes.models.user import User


class ResourceKind(str, Enum):
    CLIENT = "client"
    PROJECT = "project"
    DELIVERY_NOTE = "delivery_note"


MODELS = {
    ResourceKind.CLIENT: Client,
    ResourceKind.PROJECT: Project,
    ResourceKind.DELIVERY_NOTE: DeliveryNote,
}

# Columna que etiqueta el registro con el CIF de una empresa
SHARED_SCOPE_COLUMN = {
    ResourceKind.CLIENT: Client.cif,
    ResourceKind.PROJECT: Project.company_cif,
}

# Recursos cuya edición también se comparte dentro de la empresa
SHARED_WRITE = {ResourceKind.PROJECT}


def normalize_cif(value) -> Optional[str]:
    # "" y None significan lo mismo: sin empresa
    return (value or "").strip() or None


@dataclass(frozen=True)
class Principal:
    id: int
    role: str = "user"
    invited_by: Optional[int] = None
    company_cif: Optional[str] = None

    @property
    def is_guest(self) -> bool:
        return self.role == "guest"

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(id=user.id, role=user.role or "user", invited_by=user.company_owner_id)


def resolve_company_cif(session: Session, principal: Principal) -> Optional[str]:
    """CIF efectivo del usuario; un invitado hereda el de quien lo invitó."""
    user = session.get(User, principal.id)
    if not user or user.deleted:
        return None

    if user.role == "guest" and user.company_owner_id:
        owner = session.get(User, user.company_owner_id)
        return owner.company_cif if owner else None

    return user.company_cif


def with_company_scope(session: Session, principal: Principal) -> Principal:
    return replace(principal, company_cif=resolve_company_cif(session, principal))


def _shared_clause(principal: Principal, kind: ResourceKind):
    column = SHARED_SCOPE_COLUMN.get(kind)
    cif = normalize_cif(principal.company_cif)
    if column is None or cif is None:
        return None
    return column == cif


def visibility_filter(principal: Principal, kind: ResourceKind):
    model = MODELS[kind]
    clauses = [model.created_by_id == principal.id]

    shared = _shared_clause(principal, kind)
    if shared is not None:
        clauses.append(shared)

    return or_(*clauses)


def mutation_filter(principal: Principal, kind: ResourceKind):
    model = MODELS[kind]
    clauses = [model.created_by_id == principal.id]

    if kind in SHARED_WRITE:
        shared = _shared_clause(principal, kind)
        if shared is not None:
            clauses.append(shared)

    return or_(*clauses)


def authorize_pdf_read(principal: Principal, note: DeliveryNote) -> None:
    if principal.id == note.created_by_id:
        return
    if principal.is_guest and principal.invited_by == note.created_by_id:
        return
    raise Forbidden("No autorizado")


def ensure_member(principal: Principal) -> None:
    # Los invitados solo leen PDFs de albaranes de quien los invitó
    if principal.is_guest:
        raise Forbidden("Los usuarios invitados no pueden realizar esta operación")
