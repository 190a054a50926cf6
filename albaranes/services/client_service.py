from sqlmodel import Session

from albaranes.core.errors import NotFoundOrUnauthorized
from albaranes.core.logger import logger
from albaranes.models.client import Client
from albaranes.schemas.client import ClientCreate, ClientUpdate
from albaranes.services.access_policy import (
    Principal,
    ResourceKind,
    mutation_filter,
    visibility_filter,
    with_company_scope,
)
from albaranes.services.repository import SoftDeleteRepository, store_errors
from albaranes.utils.ids import parse_id

KIND = ResourceKind.CLIENT

# null explícito solo borra estas columnas
NULLABLE = {"address"}


def _repo(session: Session) -> SoftDeleteRepository[Client]:
    return SoftDeleteRepository(session, Client)


def _dump(payload, **kwargs) -> dict:
    return payload.model_dump(by_alias=False, **kwargs)


def create_client(session: Session, principal: Principal, payload: ClientCreate) -> Client:
    # El CIF viene del cuerpo tal cual, no se deriva del usuario
    client = Client(**_dump(payload), created_by_id=principal.id)

    with store_errors(session, "No se pudo crear el cliente"):
        client = _repo(session).insert(client)

    logger.info(f"Cliente {client.id} creado por usuario {principal.id}")
    return client


def list_clients(session: Session, principal: Principal) -> list[Client]:
    principal = with_company_scope(session, principal)
    with store_errors(session, "No se pudieron obtener los clientes"):
        return _repo(session).find_many(visibility_filter(principal, KIND))


def list_archived_clients(session: Session, principal: Principal) -> list[Client]:
    principal = with_company_scope(session, principal)
    with store_errors(session, "No se pudieron obtener los clientes archivados"):
        return _repo(session).find_deleted(visibility_filter(principal, KIND))


def get_client(session: Session, principal: Principal, client_id) -> Client:
    cid = parse_id(client_id)
    principal = with_company_scope(session, principal)

    with store_errors(session, "Error al obtener el cliente"):
        client = _repo(session).find_one(
            Client.id == cid, visibility_filter(principal, KIND)
        )

    if not client:
        raise NotFoundOrUnauthorized("Cliente no encontrado o acceso denegado")
    return client


def _get_owned(session: Session, principal: Principal, client_id) -> Client:
    cid = parse_id(client_id, "ID de cliente inválido")

    with store_errors(session, "Error al obtener el cliente"):
        client = _repo(session).find_one(
            Client.id == cid, mutation_filter(principal, KIND)
        )

    if not client:
        raise NotFoundOrUnauthorized("Cliente no encontrado o no autorizado")
    return client


def update_client(
    session: Session, principal: Principal, client_id, payload: ClientUpdate
) -> Client:
    client = _get_owned(session, principal, client_id)

    # Solo los campos enviados; los ausentes conservan su valor
    for field, value in _dump(payload, exclude_unset=True).items():
        if value is None and field not in NULLABLE:
            continue
        setattr(client, field, value)

    with store_errors(session, "No se pudo actualizar el cliente"):
        return _repo(session).save(client)


def archive_client(session: Session, principal: Principal, client_id) -> Client:
    client = _get_owned(session, principal, client_id)

    with store_errors(session, "No se pudo archivar el cliente"):
        client = _repo(session).soft_delete(client)

    logger.info(f"Cliente {client.id} archivado")
    return client


def restore_client(session: Session, principal: Principal, client_id) -> Client:
    cid = parse_id(client_id)

    with store_errors(session, "No se pudo restaurar el cliente"):
        repo = _repo(session)
        client = repo.find_one_deleted(Client.id == cid, mutation_filter(principal, KIND))
        if not client:
            raise NotFoundOrUnauthorized("Cliente no encontrado o no archivado")
        return repo.restore(client)


def destroy_client(session: Session, principal: Principal, client_id) -> None:
    cid = parse_id(client_id)

    with store_errors(session, "No se pudo eliminar el cliente"):
        repo = _repo(session)
        client = repo.find_one_any(Client.id == cid, mutation_filter(principal, KIND))
        if not client:
            raise NotFoundOrUnauthorized("Cliente no encontrado o acceso denegado")
        repo.delete(client)

    logger.info(f"Cliente {cid} eliminado permanentemente")
