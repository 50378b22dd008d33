# tests/test_notifications.py

from datetime import datetime, timedelta

import pytest

from techflow.models import Notification
from techflow.services.notification_service import create_notification, notify_assigned


@pytest.fixture()
def notifications(db, make_employee):
    employee = make_employee()
    base = datetime(2026, 3, 1, 9, 0)
    rows = [
        Notification(type="new_order", message="first", created_at=base),
        Notification(
            type="assigned", message="second", employee_id=employee.id,
            created_at=base + timedelta(hours=1),
        ),
        Notification(
            type="completed", message="old", read=True, created_at=base - timedelta(days=1)
        ),
    ]
    db.add_all(rows)
    db.commit()
    return {"employee": employee, "rows": rows}


def test_create_notification_rejects_unknown_type(db):
    assert create_notification(db, "birthday", "Happy birthday") is None
    assert db.query(Notification).count() == 0


def test_notify_assigned_records_recipient(db, make_employee, make_order):
    employee = make_employee(name="Hana")
    order = make_order()
    notification = notify_assigned(db, order.id, employee.id, employee.name)

    assert notification.employee_id == employee.id
    assert notification.read is False
    assert notification.message == f"Hana assigned to service order #{order.id}"


def test_list_unread_newest_first(client, auth_headers, notifications):
    response = client.get("/api/notifications", headers=auth_headers)
    assert response.status_code == 200
    assert [n["message"] for n in response.json()] == ["second", "first"]

    everything = client.get(
        "/api/notifications", params={"include_read": True, "limit": 2}, headers=auth_headers
    ).json()
    assert [n["message"] for n in everything] == ["second", "first"]

    mine = client.get(
        "/api/notifications",
        params={"employee_id": notifications["employee"].id},
        headers=auth_headers,
    ).json()
    assert [n["message"] for n in mine] == ["second"]


def test_unread_count_and_mark_read(client, auth_headers, notifications):
    assert client.get("/api/notifications/unread-count", headers=auth_headers).json() == {
        "unread": 2
    }

    first_id = notifications["rows"][0].id
    response = client.put(f"/api/notifications/{first_id}/read", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["read"] is True

    assert client.get("/api/notifications/unread-count", headers=auth_headers).json() == {
        "unread": 1
    }
    assert client.put("/api/notifications/999/read", headers=auth_headers).status_code == 404


def test_mark_all_read(client, auth_headers, notifications):
    response = client.put("/api/notifications/read-all", headers=auth_headers)
    assert response.json() == {"updated": 2}
    assert client.get("/api/notifications", headers=auth_headers).json() == []
