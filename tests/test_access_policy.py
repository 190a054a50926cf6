import pytest

from albaranes.core.errors import Forbidden, NotFoundOrUnauthorized
from albaranes.schemas.client import ClientUpdate
from albaranes.schemas.project import ProjectUpdate
from albaranes.services import client_service, project_service
from albaranes.services.access_policy import (
    Principal,
    authorize_pdf_read,
    ensure_member,
    normalize_cif,
    resolve_company_cif,
)

from conftest import make_client, make_note, make_project, make_user, principal_for


@pytest.mark.parametrize("value, expected", [
    (None, None),
    ("", None),
    ("   ", None),
    (" B123 ", "B123"),
])
def test_normalize_cif(value, expected):
    assert normalize_cif(value) == expected


def test_principal_from_guest(session):
    owner = make_user(session, "owner@example.com")
    guest = make_user(session, "guest@example.com", role="guest", owner=owner)

    principal = Principal.from_user(guest)

    assert principal.id == guest.id
    assert principal.is_guest
    assert principal.invited_by == owner.id


def test_principal_from_user_defaults(session):
    principal = Principal.from_user(make_user(session, "a@example.com"))

    assert principal.role == "user"
    assert principal.invited_by is None
    assert not principal.is_guest


def test_guest_inherits_owner_cif(session):
    owner = make_user(session, "owner@example.com", cif="B111")
    guest = make_user(session, "guest@example.com", role="guest", owner=owner)

    assert resolve_company_cif(session, principal_for(owner)) == "B111"
    assert resolve_company_cif(session, principal_for(guest)) == "B111"


def test_deleted_user_has_no_cif(session):
    user = make_user(session, "gone@example.com", cif="B111", deleted=True)

    assert resolve_company_cif(session, principal_for(user)) is None


def test_same_cif_reads_but_cannot_write_client(session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B111")
    record = make_client(session, b, cif="B111")

    ids = [c.id for c in client_service.list_clients(session, principal_for(a))]
    assert record.id in ids
    assert client_service.get_client(session, principal_for(a), record.id).id == record.id

    with pytest.raises(NotFoundOrUnauthorized):
        client_service.update_client(session, principal_for(a), record.id, ClientUpdate(name="X"))
    with pytest.raises(NotFoundOrUnauthorized):
        client_service.archive_client(session, principal_for(a), record.id)


def test_same_cif_can_write_project(session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B111")
    project = make_project(session, b, company_cif="B111")

    updated = project_service.update_project(
        session, principal_for(a), project.id, ProjectUpdate(code="EXT-9")
    )

    assert updated.code == "EXT-9"


def test_user_without_cif_never_matches_untagged_records(session):
    a = make_user(session, "a@example.com")
    b = make_user(session, "b@example.com", cif="")
    make_client(session, b, cif="")
    make_project(session, b, company_cif=None)

    assert client_service.list_clients(session, principal_for(a)) == []
    assert project_service.list_projects(session, principal_for(a)) == []


def test_other_company_sees_nothing(session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B222")
    make_client(session, b, cif="B222")

    assert client_service.list_clients(session, principal_for(a)) == []


def test_pdf_read_rules(session):
    owner = make_user(session, "owner@example.com")
    other = make_user(session, "other@example.com")
    guest = make_user(session, "guest@example.com", role="guest", owner=owner)
    stranger_guest = make_user(session, "sg@example.com", role="guest", owner=other)
    note = make_note(session, owner, make_project(session, owner))

    authorize_pdf_read(principal_for(owner), note)
    authorize_pdf_read(principal_for(guest), note)

    with pytest.raises(Forbidden):
        authorize_pdf_read(principal_for(other), note)
    with pytest.raises(Forbidden):
        authorize_pdf_read(principal_for(stranger_guest), note)


def test_ensure_member_blocks_guests():
    ensure_member(Principal(id=1))

    with pytest.raises(Forbidden):
        ensure_member(Principal(id=2, role="guest", invited_by=1))
