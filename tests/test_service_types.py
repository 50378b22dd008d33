# tests/test_service_types.py


def test_create_service_type_generates_slug(client, auth_headers):
    response = client.post(
        "/api/service-types",
        json={"name": "CCTV Installation", "description": "Cameras and DVRs"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["slug"] == "cctv-installation"

    by_slug = client.get("/api/service-types/slug/cctv-installation", headers=auth_headers)
    assert by_slug.status_code == 200
    assert by_slug.json()["name"] == "CCTV Installation"


def test_duplicate_service_type_conflicts(client, auth_headers):
    client.post("/api/service-types", json={"name": "Networking"}, headers=auth_headers)

    same_name = client.post("/api/service-types", json={"name": "Networking"}, headers=auth_headers)
    assert same_name.status_code == 409

    same_slug = client.post(
        "/api/service-types",
        json={"name": "Networking Plus", "slug": "Networking"},
        headers=auth_headers,
    )
    assert same_slug.status_code == 409


def test_rename_service_type_reslugs(client, auth_headers, make_service_type):
    service_type = make_service_type(name="Old Name")
    response = client.put(
        f"/api/service-types/{service_type.id}",
        json={"name": "Printer Repair"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["slug"] == "printer-repair"


def test_delete_service_type_in_use_conflicts(client, auth_headers, make_service_type, make_order):
    used = make_service_type()
    unused = make_service_type()
    make_order(service_type_id=used.id)

    assert client.delete(f"/api/service-types/{used.id}", headers=auth_headers).status_code == 409
    assert client.delete(f"/api/service-types/{unused.id}", headers=auth_headers).status_code == 200


def test_service_types_by_customer_and_items(
    client, auth_headers, make_customer, make_service_type, make_order
):
    customer = make_customer()
    main_type = make_service_type(name="Main")
    part_type = make_service_type(name="Parts")
    make_order(
        customer_id=customer.id,
        service_type_id=main_type.id,
        items=[(part_type.id, 2, "150.00")],
    )

    by_customer = client.get(
        f"/api/service-types/by-customer/{customer.id}", headers=auth_headers
    )
    assert by_customer.status_code == 200
    assert [s["name"] for s in by_customer.json()] == ["Main"]

    items = client.get(f"/api/service-types/{part_type.id}/items", headers=auth_headers).json()
    assert len(items) == 1
    assert items[0]["quantity"] == 2


def test_skill_mapping_lifecycle(client, auth_headers, make_employee, make_service_type):
    employee = make_employee()
    networking = make_service_type(name="Networking")
    cctv = make_service_type(name="CCTV")

    created = client.post(
        "/api/technician-service-types",
        json={"employee_id": employee.id, "service_type_id": networking.id},
        headers=auth_headers,
    )
    assert created.status_code == 201
    assert created.json()["service_type_name"] == "Networking"

    duplicate = client.post(
        "/api/technician-service-types",
        json={"employee_id": employee.id, "service_type_id": networking.id},
        headers=auth_headers,
    )
    assert duplicate.status_code == 409

    moved = client.put(
        f"/api/technician-service-types/{employee.id}/{networking.id}",
        json={"service_type_id": cctv.id},
        headers=auth_headers,
    )
    assert moved.status_code == 200
    assert moved.json()["service_type_id"] == cctv.id

    assert (
        client.get(
            f"/api/technician-service-types/{employee.id}/{networking.id}", headers=auth_headers
        ).status_code
        == 404
    )

    skills = client.get(f"/api/service-types/by-employee/{employee.id}", headers=auth_headers)
    assert [s["name"] for s in skills.json()] == ["CCTV"]

    deleted = client.delete(
        f"/api/technician-service-types/{employee.id}/{cctv.id}", headers=auth_headers
    )
    assert deleted.status_code == 200
    assert client.get("/api/technician-service-types", headers=auth_headers).json() == []


def test_skill_mapping_requires_existing_targets(client, auth_headers, make_service_type):
    service_type = make_service_type()
    response = client.post(
        "/api/technician-service-types",
        json={"employee_id": 999, "service_type_id": service_type.id},
        headers=auth_headers,
    )
    assert response.status_code == 404
