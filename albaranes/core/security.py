import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional

from passlib.context import CryptContext

from albaranes.core.config import settings


pwd_context = CryptContext(schemes=[settings.PWD_SCHEME], deprecated="auto")

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(settings.ACCESS_TOKEN_EXPIRE_MINUTES)
RECOVERY_TOKEN_EXPIRE_MINUTES = int(settings.RECOVERY_TOKEN_EXPIRE_MINUTES)


# ================= PASSWORD =================
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


# ================= JWT ======================
def create_access_token(user_id: int,
                        extra_data: Optional[dict] = None,
                        expires_delta: Optional[timedelta] = None) -> str:

    data = extra_data.copy() if extra_data else {}
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    # PyJWT exige que "sub" sea una cadena
    payload = {
        "sub": str(user_id),
        "exp": expire,
        **data,
    }

    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def token_for_user(user) -> str:
    """Token de sesión normal: rol e invitador viajan en el propio token."""
    return create_access_token(
        user.id,
        extra_data={
            "role": user.role,
            "invited_by": str(user.company_owner_id) if user.company_owner_id else None,
        },
    )


def recovery_token_for_user(user) -> str:
    """Token de recuperación: solo sirve para /users/recover/reset."""
    return create_access_token(
        user.id,
        extra_data={"role": user.role, "recover": True},
        expires_delta=timedelta(minutes=RECOVERY_TOKEN_EXPIRE_MINUTES),
    )


def decode_token(token: str):
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
