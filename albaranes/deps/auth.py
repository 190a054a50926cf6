from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from albaranes.core.errors import Forbidden, Unauthenticated
from albaranes.core.security import decode_token
from albaranes.db.session import get_session
from albaranes.models.user import User
from albaranes.services.access_policy import Principal, ensure_member
from albaranes.services.artifact_store import (
    PinataArtifactStore,
    build_artifact_store,
    fetch_image,
)
from albaranes.services.note_documents import ImageFetcher, NoteDocuments

bearer = HTTPBearer(auto_error=False)


def _claims(credentials: HTTPAuthorizationCredentials | None) -> dict:
    if not credentials or not credentials.credentials:
        raise Unauthenticated("Token no proporcionado")

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise Unauthenticated("Token inválido o expirado")

    try:
        int(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthenticated("Token inválido")

    return payload


def _principal(session: Session, payload: dict) -> Principal:
    """
    El token solo identifica; el usuario tiene que seguir existiendo y activo.
    Rol e invitador se toman de la BD, no de los claims.
    """
    user = session.get(User, int(payload["sub"]))
    if not user or user.deleted:
        raise Unauthenticated("Usuario no encontrado o dado de baja")

    return Principal.from_user(user)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    session: Session = Depends(get_session),
) -> Principal:
    payload = _claims(credentials)

    # El token de recuperación solo abre /users/recover/reset
    if payload.get("recover"):
        raise Unauthenticated("Token inválido")

    return _principal(session, payload)


def require_member(principal: Principal = Depends(get_current_principal)) -> Principal:
    ensure_member(principal)
    return principal


def get_recovery_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    session: Session = Depends(get_session),
) -> Principal:
    payload = _claims(credentials)

    if not payload.get("recover"):
        raise Forbidden("Token no es de recuperación")

    return _principal(session, payload)


# =========================
# COLABORADORES EXTERNOS
# =========================
def get_artifact_store() -> PinataArtifactStore:
    return build_artifact_store()


def get_image_fetcher() -> ImageFetcher:
    return fetch_image


def get_note_documents(
    store: PinataArtifactStore = Depends(get_artifact_store),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
) -> NoteDocuments:
    return NoteDocuments(store, fetcher)
