from fastapi import APIRouter, Depends
from sqlmodel import Session

from albaranes.db.session import get_session
from albaranes.deps.auth import require_member
from albaranes.schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from albaranes.services import project_service
from albaranes.services.access_policy import Principal

router = APIRouter(prefix="/projects", tags=["Proyectos"])


def _out(project) -> ProjectOut:
    return ProjectOut.model_validate(project)


@router.post("", status_code=201)
def projects_create(
    payload: ProjectCreate,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    project = project_service.create_project(session, principal, payload)
    return {"message": "Proyecto creado correctamente", "project": _out(project)}


@router.get("")
def projects_list(
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return [_out(p) for p in project_service.list_projects(session, principal)]


@router.get("/archive")
def projects_archived(
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return [_out(p) for p in project_service.list_archived_projects(session, principal)]


@router.get("/{project_id}")
def projects_get(
    project_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return _out(project_service.get_project(session, principal, project_id))


@router.put("/{project_id}")
def projects_update(
    project_id: str,
    payload: ProjectUpdate,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    project = project_service.update_project(session, principal, project_id, payload)
    return {"message": "Proyecto actualizado correctamente", "project": _out(project)}


@router.delete("/{project_id}")
def projects_destroy(
    project_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    project_service.destroy_project(session, principal, project_id)
    return {"message": "Proyecto eliminado permanentemente"}


@router.delete("/archive/{project_id}")
def projects_archive(
    project_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    project = project_service.archive_project(session, principal, project_id)
    return {"message": "Proyecto archivado correctamente", "project": _out(project)}


@router.patch("/restore/{project_id}")
def projects_restore(
    project_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    project = project_service.restore_project(session, principal, project_id)
    return {"message": "Proyecto restaurado correctamente", "project": _out(project)}
