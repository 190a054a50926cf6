from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile
from sqlmodel import Session

from albaranes.core.security import recovery_token_for_user, token_for_user
from albaranes.db.session import get_session
from albaranes.deps.auth import get_artifact_store, get_current_principal, get_recovery_principal
from albaranes.schemas.user import (
    Company,
    CompanyDataRequest,
    InviteRequest,
    LoginRequest,
    PasswordResetRequest,
    PersonalDataRequest,
    ProfileOut,
    RecoveryRequest,
    RegisterRequest,
    SessionUser,
    ValidationCodeRequest,
)
from albaranes.services import email_service, user_service
from albaranes.services.access_policy import Principal
from albaranes.services.artifact_store import PinataArtifactStore

router = APIRouter(prefix="/users", tags=["Usuarios"])


def _session_payload(user) -> dict:
    return {"token": token_for_user(user), "user": SessionUser.model_validate(user)}


# =========================
# REGISTRO / LOGIN
# =========================
@router.post("/register", status_code=201)
def users_register(
    payload: RegisterRequest,
    background: BackgroundTasks,
    session: Session = Depends(get_session),
):
    user = user_service.register(session, payload)
    background.add_task(
        email_service.notify,
        email_service.send_verification_email,
        user.email,
        user.verification_code,
    )
    return _session_payload(user)


@router.put("/validation")
def users_validate(
    payload: ValidationCodeRequest,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    user_service.validate_email(session, principal, payload.code)
    return {"message": "Email validado correctamente"}


@router.post("/login")
def users_login(payload: LoginRequest, session: Session = Depends(get_session)):
    user = user_service.login(session, payload.email, payload.password)
    return _session_payload(user)


# =========================
# ONBOARDING / PERFIL
# =========================
@router.put("/onboarding/personal")
def users_personal(
    payload: PersonalDataRequest,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    user_service.update_personal_data(session, principal, payload)
    return {
        "message": "Datos personales actualizados correctamente",
        "user": ProfileOut.model_validate(user_service.get_profile(session, principal)),
    }


@router.patch("/onboarding/company")
def users_company(
    payload: CompanyDataRequest,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    company = user_service.update_company_data(session, principal, payload)
    return {
        "message": "Datos de la compañía actualizados correctamente",
        "company": Company.model_validate(company),
    }


@router.patch("/logo")
async def users_logo(
    image: UploadFile | None = File(None),
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
    store: PinataArtifactStore = Depends(get_artifact_store),
):
    data = await image.read() if image else b""
    filename = image.filename if image else ""

    logo = await user_service.update_logo(session, principal, data, filename, store)
    return {"message": "Logo actualizado correctamente", "logo": logo}


@router.get("/me")
def users_me(
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    return {"user": ProfileOut.model_validate(user_service.get_profile(session, principal))}


@router.delete("")
def users_delete(
    soft: bool = True,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    user_service.delete_user(session, principal, soft=soft)
    kind = "soft delete" if soft else "hard delete"
    return {"message": f"Usuario eliminado ({kind})"}


# =========================
# INVITADOS
# =========================
@router.post("/invite", status_code=201)
def users_invite(
    payload: InviteRequest,
    background: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    guest, temp_password, inviter = user_service.invite_user(session, principal, payload.email)
    background.add_task(
        email_service.notify,
        email_service.send_invitation_email,
        guest.email,
        inviter.email,
        temp_password,
    )
    return {
        "message": "Usuario invitado correctamente",
        "user": SessionUser.model_validate(guest),
        "tempPassword": temp_password,
    }


# =========================
# RECUPERACIÓN DE CONTRASEÑA
# =========================
@router.post("/recover/request")
def users_recover_request(
    payload: RecoveryRequest,
    background: BackgroundTasks,
    session: Session = Depends(get_session),
):
    user = user_service.request_password_recovery(session, payload.email)
    background.add_task(
        email_service.notify,
        email_service.send_recovery_email,
        user.email,
        user.password_recovery_code,
    )
    return {
        "message": "Código de recuperación enviado",
        "recoveryToken": recovery_token_for_user(user),
    }


@router.put("/recover/reset")
def users_recover_reset(
    payload: PasswordResetRequest,
    principal: Principal = Depends(get_recovery_principal),
    session: Session = Depends(get_session),
):
    user_service.reset_password(session, principal, payload.code, payload.new_password)
    return {"message": "Contraseña actualizada correctamente"}
