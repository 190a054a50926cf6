from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Fechas sin zona se interpretan como UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Los ids nunca se reutilizan tras un borrado físico
AUTOINCREMENT = {"sqlite_autoincrement": True}


class TimestampFields(SQLModel):
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class SoftDeleteFields(SQLModel):
    # Archivado: el registro sigue en BD pero queda fuera de las lecturas activas
    deleted: bool = Field(default=False, index=True)
    deleted_at: Optional[datetime] = None
