from conftest import auth_headers, make_client, make_note, make_project, make_user


def project_body(client_id, **overrides):
    body = {
        "name": "Reforma Local",
        "projectCode": "RL-01",
        "email": "obra@example.com",
        "code": "EXT-1",
        "address": {"street": "Alcalá", "number": 10, "postal": 28014, "city": "Madrid", "province": "Madrid"},
        "clientId": client_id,
        "companyCif": "INYECTADO",
    }
    body.update(overrides)
    return body


def test_create_project_takes_cif_from_user(api, session):
    user = make_user(session, "a@example.com", cif="B111")
    client = make_client(session, user)

    resp = api.post("/api/projects", json=project_body(client.id), headers=auth_headers(user))

    assert resp.status_code == 201
    data = resp.json()["project"]
    assert data["companyCif"] == "B111"
    assert data["projectCode"] == "RL-01"
    assert data["client"]["id"] == client.id
    assert data["createdBy"]["id"] == user.id


def test_create_project_without_company(api, session):
    user = make_user(session, "a@example.com")
    client = make_client(session, user)

    resp = api.post("/api/projects", json=project_body(client.id), headers=auth_headers(user))

    assert resp.status_code == 201
    assert resp.json()["project"]["companyCif"] is None


def test_create_project_for_invisible_client(api, session):
    user = make_user(session, "a@example.com", cif="B111")
    other = make_user(session, "b@example.com", cif="B222")
    foreign = make_client(session, other, cif="B222")

    resp = api.post("/api/projects", json=project_body(foreign.id), headers=auth_headers(user))

    assert resp.status_code == 404


def test_duplicate_name_conflicts(api, session):
    user = make_user(session, "a@example.com")
    client = make_client(session, user)
    make_project(session, user, client, name="Reforma Local", project_code="OTRO")

    resp = api.post("/api/projects", json=project_body(client.id), headers=auth_headers(user))

    assert resp.status_code == 409
    assert resp.json()["error"] == "CONFLICT"


def test_duplicate_code_conflicts_within_company(api, session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B111")
    client = make_client(session, a, cif="B111")
    make_project(session, b, name="Otra", project_code="RL-01", company_cif="B111")

    resp = api.post("/api/projects", json=project_body(client.id), headers=auth_headers(a))

    assert resp.status_code == 409


def test_same_name_in_other_company_is_allowed(api, session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B222")
    client = make_client(session, a, cif="B111")
    make_project(session, b, name="Reforma Local", project_code="RL-01", company_cif="B222")

    resp = api.post("/api/projects", json=project_body(client.id), headers=auth_headers(a))

    assert resp.status_code == 201


def test_update_checks_uniqueness_excluding_itself(api, session):
    user = make_user(session, "a@example.com")
    project = make_project(session, user, name="Uno", project_code="P-1")
    make_project(session, user, name="Dos", project_code="P-2")
    headers = auth_headers(user)

    resp = api.put(f"/api/projects/{project.id}", json={"name": "Uno", "code": "X"}, headers=headers)
    assert resp.status_code == 200

    resp = api.put(f"/api/projects/{project.id}", json={"projectCode": "P-2"}, headers=headers)
    assert resp.status_code == 409

    resp = api.put(f"/api/projects/{project.id}", json={"name": "Tres"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["project"]["name"] == "Tres"
    assert resp.json()["project"]["projectCode"] == "P-1"


def test_peer_in_company_can_update_and_archive(api, session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B111")
    project = make_project(session, b, company_cif="B111")
    headers = auth_headers(a)

    resp = api.put(f"/api/projects/{project.id}", json={"email": "nuevo@example.com"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["project"]["email"] == "nuevo@example.com"

    resp = api.delete(f"/api/projects/archive/{project.id}", headers=headers)
    assert resp.status_code == 200


def test_outsider_cannot_update(api, session):
    a = make_user(session, "a@example.com", cif="B111")
    b = make_user(session, "b@example.com", cif="B222")
    project = make_project(session, b, company_cif="B222")

    resp = api.put(f"/api/projects/{project.id}", json={"name": "X"}, headers=auth_headers(a))

    assert resp.status_code == 404


def test_archive_restore_and_destroy(api, session):
    user = make_user(session, "a@example.com")
    project = make_project(session, user)
    headers = auth_headers(user)

    api.delete(f"/api/projects/archive/{project.id}", headers=headers)
    assert api.get("/api/projects", headers=headers).json() == []
    assert [p["id"] for p in api.get("/api/projects/archive", headers=headers).json()] == [project.id]

    resp = api.patch(f"/api/projects/restore/{project.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["project"]["deleted"] is False

    assert api.delete(f"/api/projects/{project.id}", headers=headers).status_code == 200
    assert api.get(f"/api/projects/{project.id}", headers=headers).status_code == 404


def test_archived_project_does_not_block_name(api, session):
    user = make_user(session, "a@example.com")
    client = make_client(session, user)
    make_project(session, user, client, name="Reforma Local", project_code="RL-01", deleted=True)

    resp = api.post("/api/projects", json=project_body(client.id), headers=auth_headers(user))

    assert resp.status_code == 201


def test_project_malformed_id(api, session):
    user = make_user(session, "a@example.com")

    resp = api.get("/api/projects/no-valido", headers=auth_headers(user))

    assert resp.status_code == 400


def test_guest_cannot_touch_projects(api, session):
    owner = make_user(session, "owner@example.com", cif="B111")
    guest = make_user(session, "guest@example.com", role="guest", owner=owner)
    client = make_client(session, owner)
    project = make_project(session, owner, client, company_cif="B111")
    headers = auth_headers(guest)

    assert api.post("/api/projects", json=project_body(client.id), headers=headers).status_code == 403
    assert api.put(f"/api/projects/{project.id}", json={"name": "X"}, headers=headers).status_code == 403
    assert api.delete(f"/api/projects/{project.id}", headers=headers).status_code == 403
    assert api.delete(f"/api/projects/archive/{project.id}", headers=headers).status_code == 403

    session.refresh(project)
    assert project.name == "Obra"
    assert project.deleted is False


def test_destroy_project_with_notes_conflicts(api, session):
    user = make_user(session, "a@example.com")
    project = make_project(session, user)
    make_note(session, user, project)

    resp = api.delete(f"/api/projects/{project.id}", headers=auth_headers(user))

    assert resp.status_code == 409
    assert api.get(f"/api/projects/{project.id}", headers=auth_headers(user)).status_code == 200
