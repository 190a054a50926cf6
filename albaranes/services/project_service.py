from sqlalchemy import or_
from sqlmodel import Session

from albaranes.core.errors import Conflict, NotFoundOrUnauthorized
from albaranes.core.logger import logger
from albaranes.models.client import Client
from albaranes.models.project import Project
from albaranes.schemas.project import ProjectCreate, ProjectUpdate
from albaranes.services.access_policy import (
    Principal,
    ResourceKind,
    mutation_filter,
    visibility_filter,
    with_company_scope,
)
from albaranes.services.repository import SoftDeleteRepository, store_errors
from albaranes.utils.ids import parse_id

KIND = ResourceKind.PROJECT

# null explícito solo borra estas columnas
NULLABLE = {"address", "client_id"}


def _repo(session: Session) -> SoftDeleteRepository[Project]:
    return SoftDeleteRepository(session, Project)


def _ensure_unique(
    session: Session,
    principal: Principal,
    name: str,
    project_code: str,
    exclude_id: int | None = None,
) -> None:
    """
    Nombre y código deben ser únicos dentro de lo que el usuario ve
    (sus proyectos + los de su CIF). Basta con que coincida uno de los dos.
    Comprobación previa a la escritura, no atómica.
    """
    where = [
        visibility_filter(principal, KIND),
        or_(Project.name == name, Project.project_code == project_code),
    ]
    if exclude_id is not None:
        where.append(Project.id != exclude_id)

    existing = _repo(session).find_one(*where)
    if existing:
        raise Conflict("Ya existe un proyecto con ese nombre o código")


def _ensure_client_visible(session: Session, principal: Principal, client_id) -> None:
    cid = parse_id(client_id, "ID de cliente inválido")
    client = SoftDeleteRepository(session, Client).find_one(
        Client.id == cid, visibility_filter(principal, ResourceKind.CLIENT)
    )
    if not client:
        raise NotFoundOrUnauthorized("Cliente no encontrado o acceso denegado")


def create_project(session: Session, principal: Principal, payload: ProjectCreate) -> Project:
    principal = with_company_scope(session, principal)

    with store_errors(session, "Error al crear el proyecto"):
        _ensure_client_visible(session, principal, payload.client_id)
        _ensure_unique(session, principal, payload.name, payload.project_code)

        # companyCif sale del usuario, nunca del cuerpo
        project = Project(
            **payload.model_dump(by_alias=False),
            created_by_id=principal.id,
            company_cif=principal.company_cif,
        )
        project = _repo(session).insert(project)

    logger.info(f"Proyecto {project.id} creado por usuario {principal.id}")
    return project


def list_projects(session: Session, principal: Principal) -> list[Project]:
    principal = with_company_scope(session, principal)
    with store_errors(session, "No se pudieron obtener los proyectos"):
        return _repo(session).find_many(visibility_filter(principal, KIND))


def list_archived_projects(session: Session, principal: Principal) -> list[Project]:
    principal = with_company_scope(session, principal)
    with store_errors(session, "No se pudieron obtener los proyectos archivados"):
        return _repo(session).find_deleted(visibility_filter(principal, KIND))


def get_project(session: Session, principal: Principal, project_id) -> Project:
    pid = parse_id(project_id)
    principal = with_company_scope(session, principal)

    with store_errors(session, "Error al obtener el proyecto"):
        project = _repo(session).find_one(
            Project.id == pid, visibility_filter(principal, KIND)
        )

    if not project:
        raise NotFoundOrUnauthorized("Proyecto no encontrado o no autorizado")
    return project


def _get_editable(session: Session, principal: Principal, project_id) -> Project:
    pid = parse_id(project_id, "ID de proyecto inválido")

    with store_errors(session, "Error al obtener el proyecto"):
        project = _repo(session).find_one(
            Project.id == pid, mutation_filter(principal, KIND)
        )

    if not project:
        raise NotFoundOrUnauthorized("Proyecto no encontrado o no autorizado")
    return project


def update_project(
    session: Session, principal: Principal, project_id, payload: ProjectUpdate
) -> Project:
    principal = with_company_scope(session, principal)
    project = _get_editable(session, principal, project_id)
    changes = payload.model_dump(by_alias=False, exclude_unset=True)

    with store_errors(session, "Error al actualizar el proyecto"):
        if "name" in changes or "project_code" in changes:
            _ensure_unique(
                session,
                principal,
                changes.get("name", project.name),
                changes.get("project_code", project.project_code),
                exclude_id=project.id,
            )
        if changes.get("client_id") is not None:
            _ensure_client_visible(session, principal, changes["client_id"])

        for field, value in changes.items():
            if value is None and field not in NULLABLE:
                continue
            setattr(project, field, value)
        project.company_cif = principal.company_cif

        return _repo(session).save(project)


def archive_project(session: Session, principal: Principal, project_id) -> Project:
    principal = with_company_scope(session, principal)
    project = _get_editable(session, principal, project_id)

    with store_errors(session, "No se pudo archivar el proyecto"):
        project = _repo(session).soft_delete(project)

    logger.info(f"Proyecto {project.id} archivado")
    return project


def restore_project(session: Session, principal: Principal, project_id) -> Project:
    pid = parse_id(project_id)
    principal = with_company_scope(session, principal)

    with store_errors(session, "No se pudo restaurar el proyecto"):
        repo = _repo(session)
        project = repo.find_one_deleted(Project.id == pid, mutation_filter(principal, KIND))
        if not project:
            raise NotFoundOrUnauthorized("Proyecto no encontrado o no archivado")
        return repo.restore(project)


def destroy_project(session: Session, principal: Principal, project_id) -> None:
    pid = parse_id(project_id)
    principal = with_company_scope(session, principal)

    with store_errors(session, "No se pudo eliminar el proyecto"):
        repo = _repo(session)
        project = repo.find_one_any(Project.id == pid, mutation_filter(principal, KIND))
        if not project:
            raise NotFoundOrUnauthorized("Proyecto no encontrado o no autorizado")
        repo.delete(project)

    logger.info(f"Proyecto {pid} eliminado permanentemente")
