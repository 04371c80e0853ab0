from tests.support import add_enrollment, auth_header, login


def register(client, token, seed_data, **fields):
    payload = {
        "user_id": seed_data.ana_user_id,
        "template_id": seed_data.template_id,
        "semester": 1,
        "year": 2025,
    }
    payload.update(fields)
    return client.post("/contracts", headers=auth_header(token), json=payload)


def test_admin_registers_contract_with_file(client, seed_data):
    enrollment_id = add_enrollment(seed_data.ana_id, seed_data.systems_id)
    admin = login(client, "admin@example.com")

    r = register(
        client,
        admin,
        seed_data,
        enrollment_id=enrollment_id,
        file_path="/contracts/ana-2025-1.pdf",
        file_name="ana-2025-1.pdf",
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["enrollment_id"] == enrollment_id
    assert body["file_name"] == "ana-2025-1.pdf"
    assert body["accepted_at"] is None


def test_file_path_and_name_go_together(client, seed_data):
    admin = login(client, "admin@example.com")

    r = register(client, admin, seed_data, file_path="/contracts/orphan.pdf")
    assert r.status_code == 422, r.text

    r = register(client, admin, seed_data, file_name="orphan.pdf")
    assert r.status_code == 422, r.text


def test_contract_enrollment_must_belong_to_the_user(client, seed_data):
    bruno_enrollment = add_enrollment(seed_data.bruno_id, seed_data.nursing_id)
    admin = login(client, "admin@example.com")

    r = register(client, admin, seed_data, enrollment_id=bruno_enrollment)
    assert r.status_code == 422, r.text


def test_register_with_unknown_references_is_404(client, seed_data):
    admin = login(client, "admin@example.com")

    assert register(client, admin, seed_data, user_id=999_999).status_code == 404
    assert register(client, admin, seed_data, template_id=999_999).status_code == 404
    assert register(client, admin, seed_data, enrollment_id=999_999).status_code == 404


def test_register_is_admin_only(client, seed_data):
    ana = login(client, "ana@example.com")

    r = register(client, ana, seed_data)
    assert r.status_code == 403, r.text


def test_owner_accepts_contract_once(client, seed_data):
    admin = login(client, "admin@example.com")
    contract_id = register(client, admin, seed_data).json()["id"]
    ana = login(client, "ana@example.com")

    r = client.post(f"/contracts/{contract_id}/accept", headers=auth_header(ana))
    assert r.status_code == 200, r.text
    assert r.json()["accepted_at"] is not None

    r = client.post(f"/contracts/{contract_id}/accept", headers=auth_header(ana))
    assert r.status_code == 422, r.text
    assert r.json()["detail"] == "This contract has already been accepted"


def test_only_the_owner_accepts(client, seed_data):
    admin = login(client, "admin@example.com")
    contract_id = register(client, admin, seed_data).json()["id"]
    bruno = login(client, "bruno@example.com")

    r = client.post(f"/contracts/{contract_id}/accept", headers=auth_header(bruno))
    assert r.status_code == 403, r.text

    r = client.get(f"/contracts/{contract_id}", headers=auth_header(bruno))
    assert r.status_code == 403, r.text


def test_my_contracts_lists_only_mine(client, seed_data):
    admin = login(client, "admin@example.com")
    ana_contract = register(client, admin, seed_data).json()["id"]
    bruno_contract = register(client, admin, seed_data, user_id=seed_data.bruno_user_id).json()["id"]

    ana = login(client, "ana@example.com")
    r = client.get("/contracts/me", headers=auth_header(ana))
    assert r.status_code == 200, r.text
    ids = [c["id"] for c in r.json()]
    assert ana_contract in ids
    assert bruno_contract not in ids


def test_deleted_contract_disappears(client, seed_data):
    enrollment_id = add_enrollment(seed_data.ana_id, seed_data.systems_id)
    admin = login(client, "admin@example.com")
    contract_id = register(client, admin, seed_data, enrollment_id=enrollment_id).json()["id"]

    r = client.delete(f"/contracts/{contract_id}", headers=auth_header(admin))
    assert r.status_code == 204, r.text

    assert client.get(f"/contracts/{contract_id}", headers=auth_header(admin)).status_code == 404

    ana = login(client, "ana@example.com")
    assert client.get("/contracts/me", headers=auth_header(ana)).json() == []

    # with its only contract gone the enrollment can be deleted
    r = client.delete(f"/enrollments/{enrollment_id}", headers=auth_header(admin))
    assert r.status_code == 204, r.text
