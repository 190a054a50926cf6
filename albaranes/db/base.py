from sqlmodel import SQLModel

from albaranes.models.user import User
from albaranes.models.client import Client
from albaranes.models.project import Project
from albaranes.models.delivery_note import DeliveryNote


def init_db(engine=None):
    if engine is None:
        from albaranes.db.session import engine
    SQLModel.metadata.create_all(engine)
