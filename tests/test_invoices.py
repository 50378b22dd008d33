# tests/test_invoices.py

from datetime import datetime, timedelta

import pytest

from techflow.domain.invoices.schemas import InvoiceItemCreate
from techflow.domain.invoices.service import InvoiceService, calculate_totals
from techflow.models_invoice import Invoice


def _item(quantity: int, unit_price_cents: int) -> InvoiceItemCreate:
    return InvoiceItemCreate(
        description="Line", quantity=quantity, unit_price_cents=unit_price_cents
    )


def test_calculate_totals_applies_discount_before_tax():
    totals = calculate_totals([_item(2, 1000), _item(1, 550)], tax_rate=15, discount_rate=10)
    assert totals == {
        "subtotal_cents": 2550,
        "discount_cents": 255,
        "tax_cents": 344,
        "total_cents": 2639,
    }


@pytest.mark.parametrize(
    "unit_price_cents, tax_rate, expected_tax",
    [
        (50, 5, 3),  # 2.5 rounds up
        (30, 5, 2),  # 1.5 rounds up
        (10, 4, 0),  # 0.4 rounds down
    ],
)
def test_calculate_totals_rounds_half_up(unit_price_cents, tax_rate, expected_tax):
    totals = calculate_totals([_item(1, unit_price_cents)], tax_rate=tax_rate, discount_rate=0)
    assert totals["tax_cents"] == expected_tax


def test_calculate_totals_without_items():
    assert calculate_totals([], tax_rate=15, discount_rate=0)["total_cents"] == 0


def test_next_invoice_number_continues_the_year(db, make_order):
    order = make_order()
    for number in ("INV-2026-0009", "INV-2026-0002", "INV-2025-0040"):
        db.add(
            Invoice(
                invoice_number=number,
                service_order_id=order.id,
                customer_id=order.customer_id,
                currency="ETB",
            )
        )
    db.commit()

    service = InvoiceService(db)
    assert service.next_invoice_number(datetime(2026, 6, 1)) == "INV-2026-0010"
    assert service.next_invoice_number(datetime(2027, 1, 1)) == "INV-2027-0001"


def test_create_invoice_from_order_items(client, auth_headers, make_order, make_service_type):
    service_type = make_service_type(name="Server Maintenance")
    order = make_order(items=[(service_type.id, 2, "120.50")])

    response = client.post(
        "/api/invoices", json={"service_order_id": order.id}, headers=auth_headers
    )
    assert response.status_code == 201
    invoice = response.json()

    year = datetime.utcnow().year
    assert invoice["invoice_number"] == f"INV-{year}-0001"
    assert invoice["status"] == "draft"
    assert invoice["currency"] == "ETB"
    assert invoice["customer_id"] == order.customer_id
    assert invoice["items"] == [
        {
            "id": invoice["items"][0]["id"],
            "description": "Server Maintenance",
            "quantity": 2,
            "unit_price_cents": 12050,
            "total_cents": 24100,
        }
    ]
    assert invoice["subtotal_cents"] == 24100
    assert invoice["tax_cents"] == 3615
    assert invoice["total_cents"] == 27715
    assert invoice["due_at"] is not None

    second = client.post(
        "/api/invoices", json={"service_order_id": order.id}, headers=auth_headers
    ).json()
    assert second["invoice_number"] == f"INV-{year}-0002"


def test_create_invoice_with_explicit_items(client, auth_headers, make_order):
    order = make_order()
    issued = datetime(2026, 5, 1, 12, 0)
    response = client.post(
        "/api/invoices",
        json={
            "service_order_id": order.id,
            "currency": "usd",
            "tax_rate": 0,
            "issued_at": issued.isoformat(),
            "items": [{"description": "Call-out fee", "quantity": 1, "unit_price_cents": 5000}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    invoice = response.json()
    assert invoice["currency"] == "USD"
    assert invoice["total_cents"] == 5000
    assert invoice["due_at"] == (issued + timedelta(days=15)).isoformat()


def test_create_invoice_needs_items(client, auth_headers, make_order):
    order = make_order()
    response = client.post(
        "/api/invoices", json={"service_order_id": order.id}, headers=auth_headers
    )
    assert response.status_code == 400

    missing = client.post("/api/invoices", json={"service_order_id": 999}, headers=auth_headers)
    assert missing.status_code == 404


def _draft(client, headers, order_id) -> dict:
    return client.post(
        "/api/invoices",
        json={
            "service_order_id": order_id,
            "items": [{"description": "Labour", "quantity": 3, "unit_price_cents": 2000}],
        },
        headers=headers,
    ).json()


def test_update_draft_recalculates(client, auth_headers, make_order):
    invoice = _draft(client, auth_headers, make_order().id)
    response = client.put(
        f"/api/invoices/{invoice['id']}",
        json={"discount_rate": 50, "tax_rate": 10, "notes": "Loyalty discount"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["subtotal_cents"] == 6000
    assert body["discount_cents"] == 3000
    assert body["tax_cents"] == 300
    assert body["total_cents"] == 3300
    assert body["notes"] == "Loyalty discount"


def test_invoice_status_flow(client, auth_headers, make_order):
    invoice = _draft(client, auth_headers, make_order().id)
    url = f"/api/invoices/{invoice['id']}"

    sent = client.post(f"{url}/status", json={"status": "sent"}, headers=auth_headers)
    assert sent.status_code == 200
    assert sent.json()["issued_at"] is not None

    locked = client.put(url, json={"notes": "too late"}, headers=auth_headers)
    assert locked.status_code == 400

    paid = client.post(f"{url}/status", json={"status": "paid"}, headers=auth_headers)
    assert paid.json()["paid_at"] is not None

    back = client.post(f"{url}/status", json={"status": "void"}, headers=auth_headers)
    assert back.status_code == 400

    assert client.delete(url, headers=auth_headers).status_code == 409


def test_draft_cannot_be_paid_directly(client, auth_headers, make_order):
    invoice = _draft(client, auth_headers, make_order().id)
    response = client.post(
        f"/api/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=auth_headers
    )
    assert response.status_code == 400


def test_delete_draft_invoice(client, auth_headers, make_order):
    invoice = _draft(client, auth_headers, make_order().id)
    assert client.delete(f"/api/invoices/{invoice['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/invoices/{invoice['id']}", headers=auth_headers).status_code == 404


def test_overdue_flag_on_sent_invoice(client, auth_headers, make_order):
    order = make_order()
    invoice = client.post(
        "/api/invoices",
        json={
            "service_order_id": order.id,
            "due_at": "2020-01-01T00:00:00",
            "items": [{"description": "Labour", "quantity": 1, "unit_price_cents": 100}],
        },
        headers=auth_headers,
    ).json()
    assert invoice["is_overdue"] is False

    sent = client.post(
        f"/api/invoices/{invoice['id']}/status", json={"status": "sent"}, headers=auth_headers
    ).json()
    assert sent["is_overdue"] is True


def test_list_invoices_filters(client, auth_headers, make_order):
    first = make_order()
    second = make_order()
    _draft(client, auth_headers, first.id)
    other = _draft(client, auth_headers, second.id)
    client.post(f"/api/invoices/{other['id']}/status", json={"status": "sent"}, headers=auth_headers)

    sent = client.get("/api/invoices", params={"status": "sent"}, headers=auth_headers).json()
    assert [i["id"] for i in sent["data"]] == [other["id"]]

    by_order = client.get(
        "/api/invoices", params={"service_order_id": first.id}, headers=auth_headers
    ).json()
    assert by_order["pagination"]["total"] == 1


def test_invoice_pdf(client, auth_headers, make_order):
    invoice = _draft(client, auth_headers, make_order().id)
    response = client.get(f"/api/invoices/{invoice['id']}/pdf", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert invoice["invoice_number"] in response.headers["content-disposition"]
