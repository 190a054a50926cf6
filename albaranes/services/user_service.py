"""
Ciclo de vida del usuario: registro, validación del email, login, datos
personales y de empresa, logo, invitados, recuperación de contraseña y baja.

Los correos no se envían aquí: cada operación devuelve lo necesario para
que el router los programe en segundo plano.
"""
import secrets
import string
from typing import Optional

from sqlmodel import Session, select

from albaranes.core.config import settings
from albaranes.core.errors import (
    Conflict,
    Forbidden,
    Internal,
    InvalidArgument,
    NotFoundOrUnauthorized,
    Unauthenticated,
    ValidationFailed,
)
from albaranes.core.logger import logger
from albaranes.models.mixins import utcnow
from albaranes.core.security import get_password_hash, verify_password
from albaranes.models.user import User
from albaranes.schemas.user import (
    CompanyDataRequest,
    PersonalDataRequest,
    RegisterRequest,
)
from albaranes.services.access_policy import Principal
from albaranes.services.artifact_store import ArtifactStoreError, PinataArtifactStore
from albaranes.services.repository import Repository, store_errors

COMPANY_FIELDS = {
    "company_name": "companyName",
    "cif": "cif",
    "street": "street",
    "number": "number",
    "postal": "postal",
    "city": "city",
    "province": "province",
}

TEMP_PASSWORD_LENGTH = 10


def generate_code() -> str:
    """Código numérico de 6 dígitos (verificación y recuperación)."""
    return f"{secrets.randbelow(900000) + 100000}"


def generate_temp_password() -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(TEMP_PASSWORD_LENGTH))


def _repo(session: Session) -> Repository[User]:
    return Repository(session, User)


def _by_email(session: Session, email: str) -> Optional[User]:
    # Incluye bajas lógicas: el email sigue ocupado
    return session.exec(select(User).where(User.email == email)).first()


def get_active_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user or user.deleted:
        raise NotFoundOrUnauthorized("Usuario no encontrado")
    return user


# =========================
# REGISTRO / LOGIN
# =========================
def register(session: Session, payload: RegisterRequest) -> User:
    email = payload.email.lower()
    if _by_email(session, email):
        raise Conflict("El usuario ya existe")

    user = User(
        email=email,
        password_hash=get_password_hash(payload.password),
        verification_code=generate_code(),
        attempts=settings.MAX_ATTEMPTS,
        is_autonomo=payload.autonomo,
    )

    with store_errors(session, "Error al registrar el usuario"):
        user = _repo(session).insert(user)

    logger.info(f"Usuario {user.id} registrado")
    return user


def validate_email(session: Session, principal: Principal, code: str) -> User:
    user = get_active_user(session, principal.id)

    if user.status == 1:
        raise Conflict("El email ya está validado")

    if user.attempts <= 0:
        raise Forbidden("Número máximo de intentos alcanzado")

    with store_errors(session, "Error al validar el email"):
        if user.verification_code == code:
            user.status = 1
            user.verification_code = None
            return _repo(session).insert(user)

        user.attempts = max(user.attempts - 1, 0)
        _repo(session).insert(user)

    if user.attempts == 0:
        logger.warning(f"Usuario {user.id}: intentos de validación agotados")
        raise Forbidden("Número máximo de intentos alcanzado")

    raise InvalidArgument(f"Código inválido. Quedan {user.attempts} intentos")


def login(session: Session, email: str, password: str) -> User:
    user = _by_email(session, email.lower())

    if not user or user.deleted or not verify_password(password, user.password_hash):
        raise Unauthenticated("Credenciales incorrectas")

    return user


# =========================
# PERFIL
# =========================
def update_personal_data(
    session: Session, principal: Principal, payload: PersonalDataRequest
) -> User:
    user = get_active_user(session, principal.id)

    user.name = payload.name
    user.surnames = payload.surnames
    user.nif = payload.nif
    user.address = payload.address.model_dump(by_alias=False)

    with store_errors(session, "Error al actualizar los datos personales"):
        return _repo(session).insert(user)


def update_company_data(
    session: Session, principal: Principal, payload: CompanyDataRequest
) -> dict:
    user = get_active_user(session, principal.id)

    if user.role == "guest":
        raise Forbidden("Los usuarios invitados no pueden modificar la compañía")

    if user.is_autonomo:
        # El autónomo es su propia empresa
        address = user.address or {}
        company = {
            "name": " ".join(p for p in (user.name, user.surnames) if p),
            "cif": user.nif,
            "street": address.get("street") or "",
            "number": address.get("number"),
            "postal": address.get("postal"),
            "city": address.get("city") or "",
            "province": address.get("province") or "",
        }
    else:
        data = payload.model_dump(by_alias=False)
        missing = [
            {"field": alias, "message": "Campo obligatorio"}
            for field, alias in COMPANY_FIELDS.items()
            if data.get(field) in (None, "")
        ]
        if missing:
            raise ValidationFailed(missing, "Faltan datos de la compañía")

        company = {
            "name": data["company_name"],
            "cif": data["cif"].strip(),
            "street": data["street"],
            "number": data["number"],
            "postal": data["postal"],
            "city": data["city"],
            "province": data["province"],
        }

    user.company = company

    with store_errors(session, "Error al actualizar la compañía"):
        _repo(session).insert(user)

    logger.info(f"Usuario {user.id}: compañía actualizada")
    return company


async def update_logo(
    session: Session,
    principal: Principal,
    data: bytes,
    filename: str,
    store: PinataArtifactStore,
) -> str:
    if not data:
        raise InvalidArgument("No se ha proporcionado ninguna imagen")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise InvalidArgument("La imagen supera el tamaño máximo")

    user = get_active_user(session, principal.id)

    try:
        content_hash = await store.upload(data, filename or f"logo-{user.id}")
    except ArtifactStoreError as e:
        logger.error(f"Logo usuario {user.id}: {e}")
        raise Internal("Error al subir el logo") from e

    user.logo = store.url_for(content_hash)

    with store_errors(session, "Error al guardar el logo"):
        _repo(session).insert(user)

    return user.logo


def get_profile(session: Session, principal: Principal) -> dict:
    user = get_active_user(session, principal.id)

    company = user.company
    if user.role == "guest" and user.company_owner_id:
        owner = session.get(User, user.company_owner_id)
        company = owner.company if owner else None

    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "status": user.status,
        "is_autonomo": user.is_autonomo,
        "name": user.name,
        "surnames": user.surnames,
        "nif": user.nif,
        "address": user.address,
        "company": company,
        "logo": user.logo,
    }


def delete_user(session: Session, principal: Principal, soft: bool = True) -> None:
    user = session.get(User, principal.id)
    if not user or (soft and user.deleted):
        raise NotFoundOrUnauthorized("Usuario no encontrado")

    with store_errors(session, "Error al eliminar el usuario"):
        if soft:
            user.deleted = True
            user.deleted_at = utcnow()
            _repo(session).insert(user)
        else:
            _repo(session).delete(user)

    logger.info(f"Usuario {principal.id} eliminado ({'soft' if soft else 'hard'})")


# =========================
# INVITADOS
# =========================
def invite_user(session: Session, principal: Principal, email: str) -> tuple[User, str, User]:
    inviter = get_active_user(session, principal.id)

    if inviter.role == "guest":
        raise Forbidden("Los usuarios invitados no pueden invitar")

    email = email.lower()
    if _by_email(session, email):
        raise Conflict("El usuario ya existe")

    temp_password = generate_temp_password()
    guest = User(
        email=email,
        password_hash=get_password_hash(temp_password),
        role="guest",
        company_owner_id=inviter.id,
        attempts=settings.MAX_ATTEMPTS,
    )

    with store_errors(session, "Error al invitar al usuario"):
        guest = _repo(session).insert(guest)

    logger.info(f"Usuario {inviter.id} invitó a {guest.id}")
    return guest, temp_password, inviter


# =========================
# RECUPERACIÓN DE CONTRASEÑA
# =========================
def request_password_recovery(session: Session, email: str) -> User:
    user = _by_email(session, email.lower())
    if not user or user.deleted:
        raise NotFoundOrUnauthorized("Usuario no encontrado")

    user.password_recovery_code = generate_code()
    user.recovery_attempts = settings.MAX_ATTEMPTS

    with store_errors(session, "Error al solicitar la recuperación"):
        return _repo(session).insert(user)


def reset_password(
    session: Session, principal: Principal, code: str, new_password: str
) -> None:
    user = get_active_user(session, principal.id)

    if not user.password_recovery_code or user.recovery_attempts <= 0:
        raise Forbidden("Solicita un nuevo código de recuperación")

    if user.password_recovery_code != code:
        user.recovery_attempts = max(user.recovery_attempts - 1, 0)
        if user.recovery_attempts == 0:
            # Código quemado: hay que pedir otro
            user.password_recovery_code = ""

        with store_errors(session, "Error al actualizar la contraseña"):
            _repo(session).insert(user)

        if user.recovery_attempts == 0:
            logger.warning(f"Usuario {user.id}: intentos de recuperación agotados")
            raise Forbidden("Número máximo de intentos alcanzado")
        raise InvalidArgument(f"Código incorrecto. Quedan {user.recovery_attempts} intentos")

    user.password_hash = get_password_hash(new_password)
    user.password_recovery_code = ""

    with store_errors(session, "Error al actualizar la contraseña"):
        _repo(session).insert(user)

    logger.info(f"Usuario {user.id}: contraseña restablecida")
