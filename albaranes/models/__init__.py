from .user import User
from .client import Client
from .project import Project
from .delivery_note import DeliveryNote

__all__ = [
    "User",
    "Client",
    "Project",
    "DeliveryNote",
]
