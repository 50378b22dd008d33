# tests/test_customers.py


def test_create_and_get_customer(client, auth_headers):
    response = client.post(
        "/api/customers",
        json={
            "name": "  Abebe Kebede ",
            "email": "Abebe@Example.com",
            "phone": "+251 911 222 333",
            "company": "Kebede Trading",
            "tin_number": "0012345678",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    customer = response.json()
    assert customer["name"] == "Abebe Kebede"
    assert customer["email"] == "abebe@example.com"
    assert customer["phone"] == "+251911222333"

    fetched = client.get(f"/api/customers/{customer['id']}", headers=auth_headers)
    assert fetched.status_code == 200
    assert fetched.json()["company"] == "Kebede Trading"


def test_create_customer_validates_input(client, auth_headers):
    response = client.post(
        "/api/customers", json={"name": "X", "email": "nope"}, headers=auth_headers
    )
    assert response.status_code == 422

    response = client.post("/api/customers", json={"name": "   "}, headers=auth_headers)
    assert response.status_code == 422


def test_get_missing_customer_returns_404(client, auth_headers):
    response = client.get("/api/customers/999", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Customer not found"


def test_list_customers_search_and_pagination(client, auth_headers, make_customer):
    make_customer(name="Alpha Clinic", company="Health Co")
    make_customer(name="Beta Bakery", company="Food Co")
    make_customer(name="Gamma Garage", company="Auto Co")

    response = client.get(
        "/api/customers",
        params={"limit": 2, "sortBy": "name", "sortOrder": "DESC"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert [c["name"] for c in body["data"]] == ["Gamma Garage", "Beta Bakery"]
    assert body["pagination"] == {"total": 3, "page": 1, "limit": 2, "total_pages": 2}

    search = client.get(
        "/api/customers", params={"search": "food"}, headers=auth_headers
    ).json()
    assert [c["name"] for c in search["data"]] == ["Beta Bakery"]


def test_list_customers_empty_page_is_ok(client, auth_headers):
    response = client.get("/api/customers", params={"page": 5}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"] == []


def test_list_customers_rejects_unknown_sort_field(client, auth_headers):
    response = client.get("/api/customers", params={"sortBy": "tin_number"}, headers=auth_headers)
    assert response.status_code == 400


def test_update_customer(client, auth_headers, make_customer):
    customer = make_customer()
    response = client.put(
        f"/api/customers/{customer.id}",
        json={"company": "New Company", "address": "Bole, Addis Ababa"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["company"] == "New Company"
    assert body["address"] == "Bole, Addis Ababa"
    assert body["name"] == customer.name


def test_delete_customer_requires_admin(client, staff_headers, make_customer):
    customer = make_customer()
    response = client.delete(f"/api/customers/{customer.id}", headers=staff_headers)
    assert response.status_code == 403


def test_delete_customer(client, auth_headers, make_customer):
    customer = make_customer()
    response = client.delete(f"/api/customers/{customer.id}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"/api/customers/{customer.id}", headers=auth_headers).status_code == 404


def test_delete_customer_with_orders_conflicts(client, auth_headers, make_customer, make_order):
    customer = make_customer()
    make_order(customer_id=customer.id)

    response = client.delete(f"/api/customers/{customer.id}", headers=auth_headers)
    assert response.status_code == 409
    assert "1 service order" in response.json()["detail"]


def test_customer_service_orders(client, auth_headers, make_customer, make_order):
    customer = make_customer()
    other = make_customer()
    first = make_order(customer_id=customer.id)
    second = make_order(customer_id=customer.id)
    make_order(customer_id=other.id)

    response = client.get(f"/api/customers/{customer.id}/service-orders", headers=auth_headers)
    assert response.status_code == 200
    assert sorted(o["id"] for o in response.json()) == sorted([first.id, second.id])
