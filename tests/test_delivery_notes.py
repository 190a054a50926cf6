from datetime import datetime, timezone
from unittest import mock

from albaranes.models import DeliveryNote
from albaranes.models.mixins import as_utc
from albaranes.services.artifact_store import ArtifactStoreError

from conftest import auth_headers, make_client, make_note, make_project, make_user, png_bytes


def note_body(project_id, **overrides):
    body = {
        "projectId": project_id,
        "description": "Instalación eléctrica",
        "workEntries": [{"person": "Luis", "hours": 6.5}],
        "materialEntries": [{"name": "Cable", "quantity": 25}],
    }
    body.update(overrides)
    return body


def test_create_note(api, session):
    user = make_user(session, "a@example.com")
    project = make_project(session, user, make_client(session, user))

    resp = api.post("/api/deliverynotes", json=note_body(project.id), headers=auth_headers(user))

    assert resp.status_code == 201
    data = resp.json()["deliveryNote"]
    assert data["createdById"] == user.id
    assert data["workEntries"] == [{"person": "Luis", "hours": 6.5}]
    assert data["signature"] == ""
    assert data["project"]["client"]["name"] == "Cliente"
    assert data["date"]


def test_create_note_on_invisible_project(api, session):
    user = make_user(session, "a@example.com")
    other = make_user(session, "b@example.com")
    project = make_project(session, other)

    resp = api.post("/api/deliverynotes", json=note_body(project.id), headers=auth_headers(user))

    assert resp.status_code == 404


def test_create_note_rejects_negative_hours(api, session):
    user = make_user(session, "a@example.com")
    project = make_project(session, user)
    body = note_body(project.id, workEntries=[{"person": "Luis", "hours": -1}])

    resp = api.post("/api/deliverynotes", json=body, headers=auth_headers(user))

    assert resp.status_code == 422


def test_notes_are_creator_only_even_within_company(api, session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B111")
    project = make_project(session, b, company_cif="B111")
    note = make_note(session, b, project)

    assert api.get("/api/deliverynotes", headers=auth_headers(a)).json() == []
    assert api.get(f"/api/deliverynotes/{note.id}", headers=auth_headers(a)).status_code == 404
    assert [n["id"] for n in api.get("/api/deliverynotes", headers=auth_headers(b)).json()] == [note.id]


def test_partial_update(api, session):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user))

    resp = api.put(
        f"/api/deliverynotes/{note.id}",
        json={"description": "Revisado"},
        headers=auth_headers(user),
    )

    assert resp.status_code == 200
    data = resp.json()["deliveryNote"]
    assert data["description"] == "Revisado"
    assert data["materialEntries"] == [{"name": "Tornillos", "quantity": 100}]


def test_signed_note_is_locked(api, session):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user), signature="https://gateway.test/ipfs/Qmfirma")
    headers = auth_headers(user)

    resp = api.put(f"/api/deliverynotes/{note.id}", json={"description": "X"}, headers=headers)
    assert resp.status_code == 403

    resp = api.delete(f"/api/deliverynotes/{note.id}", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["message"] == "No se puede eliminar un albarán firmado"
    assert session.get(DeliveryNote, note.id) is not None


def test_destroy_unsigned_note(api, session):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user))
    headers = auth_headers(user)

    assert api.delete(f"/api/deliverynotes/{note.id}", headers=headers).status_code == 200
    assert api.get(f"/api/deliverynotes/{note.id}", headers=headers).status_code == 404


def test_guest_cannot_manage_notes(api, session):
    owner = make_user(session, "owner@example.com")
    guest = make_user(session, "guest@example.com", role="guest", owner=owner)
    project = make_project(session, owner)
    note = make_note(session, owner, project)
    headers = auth_headers(guest)

    assert api.get("/api/deliverynotes", headers=headers).status_code == 403
    assert api.post("/api/deliverynotes", json=note_body(project.id), headers=headers).status_code == 403
    assert api.delete(f"/api/deliverynotes/{note.id}", headers=headers).status_code == 403


# =========================
# PDF
# =========================
def test_pdf_download_regenerates_and_uploads(api, session, store):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user))

    resp = api.get(f"/api/deliverynotes/pdf/{note.id}", headers=auth_headers(user))

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == f"attachment; filename=albaran-{note.id}.pdf"
    assert resp.content.startswith(b"%PDF")

    filename, content_hash = store.uploads[-1]
    assert filename == f"albaran-{note.id}.pdf"
    session.refresh(note)
    assert note.pdf_url == f"https://gateway.test/ipfs/{content_hash}"

    api.get(f"/api/deliverynotes/pdf/{note.id}", headers=auth_headers(user))
    assert len(store.uploads) == 2


def test_guest_reads_inviter_pdf_only(api, session):
    owner = make_user(session, "owner@example.com")
    other = make_user(session, "other@example.com")
    guest = make_user(session, "guest@example.com", role="guest", owner=owner)
    mine = make_note(session, owner, make_project(session, owner))
    foreign = make_note(session, other, make_project(session, other, name="Ajena", project_code="AJ"))

    assert api.get(f"/api/deliverynotes/pdf/{mine.id}", headers=auth_headers(guest)).status_code == 200

    resp = api.get(f"/api/deliverynotes/pdf/{foreign.id}", headers=auth_headers(guest))
    assert resp.status_code == 403
    assert resp.json()["error"] == "FORBIDDEN"


def test_unrelated_user_cannot_read_pdf(api, session):
    owner = make_user(session, "owner@example.com")
    other = make_user(session, "other@example.com")
    note = make_note(session, owner, make_project(session, owner))

    resp = api.get(f"/api/deliverynotes/pdf/{note.id}", headers=auth_headers(other))

    assert resp.status_code == 403


def test_pdf_of_missing_note(api, session):
    user = make_user(session, "a@example.com")

    assert api.get("/api/deliverynotes/pdf/999", headers=auth_headers(user)).status_code == 404
    assert api.get("/api/deliverynotes/pdf/xyz", headers=auth_headers(user)).status_code == 400


def test_pdf_upload_failure_is_internal(api, session, store):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user))

    with mock.patch.object(store, "upload", side_effect=ArtifactStoreError("caído")):
        resp = api.get(f"/api/deliverynotes/pdf/{note.id}", headers=auth_headers(user))

    assert resp.status_code == 500
    assert resp.json() == {"error": "INTERNAL", "message": "Error al generar el PDF"}


# =========================
# FIRMA
# =========================
def test_sign_note(api, session, store):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user))
    image = png_bytes()

    resp = api.patch(
        f"/api/deliverynotes/sign/{note.id}",
        files={"image": ("firma.png", image, "image/png")},
        headers=auth_headers(user),
    )

    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == f"attachment; filename=albaran-{note.id}-firmado.pdf"
    assert resp.content.startswith(b"%PDF")

    assert [name for name, _ in store.uploads] == [
        f"firma-{note.id}.png",
        f"albaran-{note.id}-firmado.pdf",
    ]
    session.refresh(note)
    assert note.signature == f"https://gateway.test/ipfs/{store.uploads[0][1]}"
    assert note.pdf_url == f"https://gateway.test/ipfs/{store.uploads[1][1]}"
    assert note.is_signed


def test_sign_without_image(api, session, store):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user))

    resp = api.patch(f"/api/deliverynotes/sign/{note.id}", headers=auth_headers(user))

    assert resp.status_code == 400
    assert resp.json()["message"] == "No se ha subido la firma"
    assert store.uploads == []


def test_sign_requires_creator(api, session, store):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B111")
    note = make_note(session, b, make_project(session, b, company_cif="B111"))

    resp = api.patch(
        f"/api/deliverynotes/sign/{note.id}",
        files={"image": ("firma.png", png_bytes(), "image/png")},
        headers=auth_headers(a),
    )

    assert resp.status_code == 404
    assert store.uploads == []


def test_sign_upload_failure_leaves_note_unsigned(api, session, store):
    user = make_user(session, "a@example.com")
    note = make_note(session, user, make_project(session, user))

    with mock.patch.object(store, "upload", side_effect=ArtifactStoreError("caído")):
        resp = api.patch(
            f"/api/deliverynotes/sign/{note.id}",
            files={"image": ("firma.png", png_bytes(), "image/png")},
            headers=auth_headers(user),
        )

    assert resp.status_code == 500
    session.refresh(note)
    assert note.signature == ""


def test_timestamps_are_utc_aware():
    note = DeliveryNote(project_id=1, created_by_id=1)

    assert note.created_at.tzinfo is timezone.utc
    assert note.updated_at.tzinfo is timezone.utc
    assert note.date.tzinfo is timezone.utc


def test_naive_date_is_read_as_utc():
    naive = datetime(2024, 3, 5, 10, 0)

    assert as_utc(naive) == datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)
    assert as_utc(None) is None


def test_create_with_naive_date(api, session):
    user = make_user(session, "a@example.com")
    project = make_project(session, user)

    resp = api.post(
        "/api/deliverynotes",
        json=note_body(project.id, date="2024-03-05T10:00:00"),
        headers=auth_headers(user),
    )

    assert resp.status_code == 201
    assert resp.json()["deliveryNote"]["date"].startswith("2024-03-05T10:00:00")
