from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from sqlmodel import Session

from albaranes.db.session import get_session
from albaranes.deps.auth import get_current_principal, get_note_documents, require_member
from albaranes.schemas.delivery_note import (
    DeliveryNoteCreate,
    DeliveryNoteOut,
    DeliveryNoteUpdate,
)
from albaranes.services import delivery_note_service
from albaranes.services.access_policy import Principal
from albaranes.services.note_documents import NoteDocuments

router = APIRouter(prefix="/deliverynotes", tags=["Albaranes"])


def _out(note) -> DeliveryNoteOut:
    return DeliveryNoteOut.model_validate(note)


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("", status_code=201)
def notes_create(
    payload: DeliveryNoteCreate,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    note = delivery_note_service.create_delivery_note(session, principal, payload)
    return {"message": "Albarán creado correctamente", "deliveryNote": _out(note)}


@router.get("")
def notes_list(
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return [_out(n) for n in delivery_note_service.list_delivery_notes(session, principal)]


# =========================
# PDF (también invitados)
# =========================
@router.get("/pdf/{note_id}")
async def notes_pdf(
    note_id: str,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
    documents: NoteDocuments = Depends(get_note_documents),
):
    content, filename = await delivery_note_service.get_delivery_note_pdf(
        session, principal, note_id, documents
    )
    return _pdf_response(content, filename)


# =========================
# FIRMA
# =========================
@router.patch("/sign/{note_id}")
async def notes_sign(
    note_id: str,
    image: UploadFile | None = File(None),
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
    documents: NoteDocuments = Depends(get_note_documents),
):
    data = await image.read() if image else None

    content, filename = await delivery_note_service.sign_delivery_note(
        session, principal, note_id, data, documents
    )
    return _pdf_response(content, filename)


@router.get("/{note_id}")
def notes_get(
    note_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    return _out(delivery_note_service.get_delivery_note(session, principal, note_id))


@router.put("/{note_id}")
def notes_update(
    note_id: str,
    payload: DeliveryNoteUpdate,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    note = delivery_note_service.update_delivery_note(session, principal, note_id, payload)
    return {"message": "Albarán actualizado correctamente", "deliveryNote": _out(note)}


@router.delete("/{note_id}")
def notes_destroy(
    note_id: str,
    principal: Principal = Depends(require_member),
    session: Session = Depends(get_session),
):
    delivery_note_service.destroy_delivery_note(session, principal, note_id)
    return {"message": "Albarán eliminado correctamente"}
