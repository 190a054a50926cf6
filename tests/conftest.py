import hashlib
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from albaranes.core.error_sink import LoggerSink
from albaranes.core.security import get_password_hash, recovery_token_for_user, token_for_user
from albaranes.db.base import init_db
from albaranes.db.session import get_session
from albaranes.deps.auth import get_artifact_store, get_image_fetcher
from albaranes.main import create_app
from albaranes.models import Client, DeliveryNote, Project, User
from albaranes.services.access_policy import Principal
from albaranes.services.artifact_store import PinataArtifactStore

PASSWORD = "password123"


def png_bytes(size=(60, 30), color="black") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeArtifactStore(PinataArtifactStore):
    """Almacén en memoria: el hash es el sha256 del contenido."""

    def __init__(self):
        super().__init__(jwt_token="test", gateway="gateway.test")
        self.uploads = []

    async def upload(self, data: bytes, filename: str) -> str:
        content_hash = "Qm" + hashlib.sha256(data).hexdigest()[:32]
        self.uploads.append((filename, content_hash))
        return content_hash


async def fake_fetch_image(url: str) -> bytes:
    return png_bytes()


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture():
    return FakeArtifactStore()


@pytest.fixture(name="api")
def api_fixture(session, store):
    app = create_app(error_sink=LoggerSink())
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_artifact_store] = lambda: store
    app.dependency_overrides[get_image_fetcher] = lambda: fake_fetch_image
    return TestClient(app)


# =========================
# FACTORÍAS
# =========================
def make_user(session, email, cif=None, role="user", owner=None, status=1, **extra):
    user = User(
        email=email,
        password_hash=get_password_hash(PASSWORD),
        status=status,
        role=role,
        company={"name": f"Empresa {cif}", "cif": cif} if cif is not None else None,
        company_owner_id=owner.id if owner else None,
        **extra,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_client(session, owner, cif="B00000000", name="Cliente", **extra):
    client = Client(
        name=name,
        email="cliente@example.com",
        cif=cif,
        created_by_id=owner.id,
        **extra,
    )
    session.add(client)
    session.commit()
    session.refresh(client)
    return client


def make_project(session, owner, client=None, name="Obra", project_code="P-1", company_cif=None, **extra):
    project = Project(
        name=name,
        project_code=project_code,
        email="obra@example.com",
        address={"street": "Calle Mayor", "number": 3, "postal": 28013, "city": "Madrid", "province": "Madrid"},
        client_id=client.id if client else None,
        created_by_id=owner.id,
        company_cif=company_cif,
        **extra,
    )
    session.add(project)
    session.commit()
    session.refresh(project)
    return project


def make_note(session, owner, project, signature="", **extra):
    fields = {
        "description": "Montaje",
        "work_entries": [{"person": "Ana", "hours": 8}],
        "material_entries": [{"name": "Tornillos", "quantity": 100}],
    }
    fields.update(extra)
    note = DeliveryNote(
        project_id=project.id,
        created_by_id=owner.id,
        signature=signature,
        **fields,
    )
    session.add(note)
    session.commit()
    session.refresh(note)
    return note


def principal_for(user, company_cif=None) -> Principal:
    return Principal(
        id=user.id,
        role=user.role,
        invited_by=user.company_owner_id,
        company_cif=company_cif,
    )


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {token_for_user(user)}"}


def recovery_headers(user) -> dict:
    return {"Authorization": f"Bearer {recovery_token_for_user(user)}"}
