"""
Albaranes: alta, consulta, edición, borrado, PDF y firma.

Un albarán firmado (signature no vacía) ya no se puede editar ni borrar.

La firma no es atómica: se sube la imagen, se regenera el PDF, se sube el
PDF y por último se guardan ambas URLs. Si algo falla a mitad, los
artefactos ya subidos quedan huérfanos y el albarán no cambia en BD.
"""
from sqlmodel import Session

from albaranes.core.config import settings
from albaranes.core.errors import Forbidden, Internal, InvalidArgument, NotFoundOrUnauthorized
from albaranes.core.logger import logger
from albaranes.models.delivery_note import DeliveryNote
from albaranes.models.mixins import as_utc
from albaranes.models.project import Project
from albaranes.schemas.delivery_note import DeliveryNoteCreate, DeliveryNoteUpdate
from albaranes.services.access_policy import (
    Principal,
    ResourceKind,
    authorize_pdf_read,
    mutation_filter,
    visibility_filter,
    with_company_scope,
)
from albaranes.services.artifact_store import ArtifactStoreError
from albaranes.services.note_documents import NoteDocuments
from albaranes.services.repository import Repository, SoftDeleteRepository, store_errors
from albaranes.utils.ids import parse_id

KIND = ResourceKind.DELIVERY_NOTE


def _repo(session: Session) -> Repository[DeliveryNote]:
    return Repository(session, DeliveryNote)


def _ensure_project_visible(session: Session, principal: Principal, project_id) -> None:
    pid = parse_id(project_id, "ID de proyecto inválido")
    scoped = with_company_scope(session, principal)
    project = SoftDeleteRepository(session, Project).find_one(
        Project.id == pid, visibility_filter(scoped, ResourceKind.PROJECT)
    )
    if not project:
        raise NotFoundOrUnauthorized("Proyecto no encontrado o no autorizado")


def _get_owned(session: Session, principal: Principal, note_id) -> DeliveryNote:
    nid = parse_id(note_id)

    with store_errors(session, "Error al obtener el albarán"):
        note = _repo(session).find_one(
            DeliveryNote.id == nid, mutation_filter(principal, KIND)
        )

    if not note:
        raise NotFoundOrUnauthorized("Albarán no encontrado o no autorizado")
    return note


def _entries(items) -> list[dict]:
    return [item.model_dump(by_alias=False) for item in items or []]


def create_delivery_note(
    session: Session, principal: Principal, payload: DeliveryNoteCreate
) -> DeliveryNote:
    with store_errors(session, "Error al crear el albarán"):
        _ensure_project_visible(session, principal, payload.project_id)

        note = DeliveryNote(
            project_id=payload.project_id,
            created_by_id=principal.id,
            description=payload.description or "",
            work_entries=_entries(payload.work_entries),
            material_entries=_entries(payload.material_entries),
        )
        if payload.date is not None:
            note.date = as_utc(payload.date)

        note = _repo(session).insert(note)

    logger.info(f"Albarán {note.id} creado por usuario {principal.id}")
    return note


def list_delivery_notes(session: Session, principal: Principal) -> list[DeliveryNote]:
    with store_errors(session, "No se pudieron obtener los albaranes"):
        return _repo(session).find_many(visibility_filter(principal, KIND))


def get_delivery_note(session: Session, principal: Principal, note_id) -> DeliveryNote:
    nid = parse_id(note_id)

    with store_errors(session, "Error al obtener el albarán"):
        note = _repo(session).find_one(
            DeliveryNote.id == nid, visibility_filter(principal, KIND)
        )

    if not note:
        raise NotFoundOrUnauthorized("Albarán no encontrado o no autorizado")
    return note


def update_delivery_note(
    session: Session, principal: Principal, note_id, payload: DeliveryNoteUpdate
) -> DeliveryNote:
    note = _get_owned(session, principal, note_id)

    if note.is_signed:
        raise Forbidden("No se puede modificar un albarán firmado")

    changes = payload.model_dump(by_alias=False, exclude_unset=True)

    with store_errors(session, "Error al actualizar el albarán"):
        if changes.get("project_id") is not None:
            _ensure_project_visible(session, principal, changes["project_id"])

        for field, value in changes.items():
            if field in ("work_entries", "material_entries"):
                value = list(value or [])
            elif value is None and field in ("project_id", "date"):
                # columnas obligatorias: null explícito no las borra
                continue
            elif value is None and field == "description":
                value = ""
            elif field == "date":
                value = as_utc(value)
            setattr(note, field, value)

        return _repo(session).save(note)


def destroy_delivery_note(session: Session, principal: Principal, note_id) -> None:
    note = _get_owned(session, principal, note_id)

    if note.is_signed:
        raise Forbidden("No se puede eliminar un albarán firmado")

    with store_errors(session, "Error al eliminar el albarán"):
        _repo(session).delete(note)

    logger.info(f"Albarán {note_id} eliminado")


# =========================
# PDF
# =========================
def pdf_filename(note_id: int, signed: bool = False) -> str:
    return f"albaran-{note_id}-firmado.pdf" if signed else f"albaran-{note_id}.pdf"


async def get_delivery_note_pdf(
    session: Session, principal: Principal, note_id, documents: NoteDocuments
) -> tuple[bytes, str]:
    """
    Regenera el PDF en cada lectura y lo vuelve a subir, de modo que pdfUrl
    siempre apunta al último render.
    """
    nid = parse_id(note_id)

    with store_errors(session, "Error al obtener el albarán"):
        note = session.get(DeliveryNote, nid)

    if not note:
        raise NotFoundOrUnauthorized("Albarán no encontrado")

    authorize_pdf_read(principal, note)

    filename = pdf_filename(nid)
    try:
        data = await documents.render(note)
        note.pdf_url = await documents.publish(data, filename)
    except ArtifactStoreError as e:
        logger.error(f"PDF albarán {nid}: {e}")
        raise Internal("Error al generar el PDF") from e

    with store_errors(session, "Error al guardar el PDF del albarán"):
        _repo(session).save(note)

    return data, filename


async def sign_delivery_note(
    session: Session,
    principal: Principal,
    note_id,
    image: bytes | None,
    documents: NoteDocuments,
) -> tuple[bytes, str]:
    nid = parse_id(note_id)

    if not image:
        raise InvalidArgument("No se ha subido la firma")
    if len(image) > settings.MAX_UPLOAD_BYTES:
        raise InvalidArgument("La imagen de la firma supera el tamaño máximo")

    note = _get_owned(session, principal, nid)

    filename = pdf_filename(nid, signed=True)
    try:
        # 1) imagen de la firma
        note.signature = await documents.publish(image, f"firma-{nid}.png")

        # 2) PDF con la firma ya incrustada
        data = await documents.render(note, signature_image=image)

        # 3) PDF firmado
        note.pdf_url = await documents.publish(data, filename)
    except ArtifactStoreError as e:
        session.rollback()
        logger.error(f"Firma albarán {nid}: {e}")
        raise Internal("Error al firmar el albarán") from e

    with store_errors(session, "Error al guardar la firma del albarán"):
        _repo(session).save(note)

    logger.info(f"Albarán {nid} firmado por usuario {principal.id}")
    return data, filename
