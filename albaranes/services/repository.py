"""
Acceso a la base de datos para las entidades de negocio.

El archivado es explícito: toda lectura "activa" filtra deleted == False
y toda lectura de archivados filtra deleted == True. No hay reescritura
implícita de consultas.
"""
from contextlib import contextmanager
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from albaranes.core.errors import Conflict, Internal
from albaranes.core.logger import logger
from albaranes.models.mixins import utcnow

T = TypeVar("T", bound=SQLModel)


@contextmanager
def store_errors(session: Session, message: str):
    """Traduce los fallos de la BD a errores de la API (y deshace la transacción)."""
    try:
        yield
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"{message}: {e.orig}")
        raise Conflict("La operación viola una restricción de integridad") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(message)
        raise Internal(message) from e


class Repository(Generic[T]):
    def __init__(self, session: Session, model: Type[T]):
        self.session = session
        self.model = model

    def _select(self, *where):
        query = select(self.model)
        for clause in where:
            query = query.where(clause)
        return query

    def find_many(self, *where) -> list[T]:
        return list(self.session.exec(self._select(*where).order_by(self.model.id)).all())

    def find_one(self, *where) -> Optional[T]:
        return self.session.exec(self._select(*where)).first()

    def insert(self, obj: T) -> T:
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def save(self, obj: T) -> T:
        if hasattr(obj, "updated_at"):
            obj.updated_at = utcnow()
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def delete(self, obj: T) -> None:
        self.session.delete(obj)
        self.session.commit()


class SoftDeleteRepository(Repository[T]):
    """Repositorio para modelos con SoftDeleteFields."""

    def find_many(self, *where) -> list[T]:
        return super().find_many(self.model.deleted == False, *where)  # noqa: E712

    def find_one(self, *where) -> Optional[T]:
        return super().find_one(self.model.deleted == False, *where)  # noqa: E712

    def find_deleted(self, *where) -> list[T]:
        return super().find_many(self.model.deleted == True, *where)  # noqa: E712

    def find_one_deleted(self, *where) -> Optional[T]:
        return super().find_one(self.model.deleted == True, *where)  # noqa: E712

    def find_one_any(self, *where) -> Optional[T]:
        # Activos y archivados (destroy no distingue)
        return super().find_one(*where)

    def soft_delete(self, obj: T) -> T:
        obj.deleted = True
        obj.deleted_at = utcnow()
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def restore(self, obj: T) -> T:
        obj.deleted = False
        obj.deleted_at = None
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj
