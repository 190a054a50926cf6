from fastapi import APIRouter, Depends
from sqlmodel import Session

from albaranes.db.session import get_session
from albaranes.deps.auth import require_member
from albaranes.schemas.client import ClientCreate, ClientOut, ClientUpdate
from albaranes.services import client_service
from albaranes.services.access_policy import Principal

router = APIRouter(prefix="/clients", tags=["Clientes"])


def _out(client) -> ClientOut:
    return ClientOut.model_validate(client)


# CREAR CLIENTE
@router.post("", status_code=201)
def clients_create(
    payload: ClientCreate,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    client = client_service.create_client(session, principal, payload)
    return {"message": "Cliente creado correctamente", "client": _out(client)}


# LISTADO CLIENTES
@router.get("")
def clients_list(
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return [_out(c) for c in client_service.list_clients(session, principal)]


# ARCHIVADOS
@router.get("/archive")
def clients_archived(
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return [_out(c) for c in client_service.list_archived_clients(session, principal)]


@router.get("/{client_id}")
def clients_get(
    client_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return _out(client_service.get_client(session, principal, client_id))


@router.put("/{client_id}")
def clients_update(
    client_id: str,
    payload: ClientUpdate,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    client = client_service.update_client(session, principal, client_id, payload)
    return {"message": "Cliente actualizado correctamente", "client": _out(client)}


# BORRADO DEFINITIVO
@router.delete("/{client_id}")
def clients_destroy(
    client_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    client_service.destroy_client(session, principal, client_id)
    return {"message": "Cliente eliminado permanentemente"}


# ARCHIVAR (soft delete)
@router.delete("/archive/{client_id}")
def clients_archive(
    client_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    client = client_service.archive_client(session, principal, client_id)
    return {"message": "Cliente archivado correctamente", "client": _out(client)}


@router.patch("/restore/{client_id}")
def clients_restore(
    client_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    client = client_service.restore_client(session, principal, client_id)
    return {"message": "Cliente restaurado correctamente", "client": _out(client)}
