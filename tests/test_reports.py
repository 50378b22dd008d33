# tests/test_reports.py

import csv
import io
from datetime import datetime

import pytest

from techflow.domain.reports.service import ReportService, month_starts, technician_efficiency
from techflow.models import Notification
from techflow.models_invoice import Invoice

NOW = datetime(2026, 3, 5, 12, 0, 0)


@pytest.fixture()
def report_data(db, make_customer, make_employee, make_service_type, make_order):
    """Four orders across two service types and two technicians"""
    customer = make_customer(name="Report Customer")
    networking = make_service_type(name="Networking")
    cctv = make_service_type(name="CCTV")
    unused = make_service_type(name="Unused")
    alice = make_employee(name="Alice")
    bekele = make_employee(name="Bekele")

    common = {"customer_id": customer.id}
    orders = {
        "done_a": make_order(
            assignees=[alice],
            service_type_id=networking.id,
            status="completed",
            created_at=datetime(2026, 3, 1),
            completed_at=datetime(2026, 3, 3),
            **common,
        ),
        "busy_a": make_order(
            assignees=[alice],
            service_type_id=networking.id,
            status="in_progress",
            created_at=datetime(2026, 3, 2),
            **common,
        ),
        "done_b": make_order(
            assignees=[bekele],
            service_type_id=cctv.id,
            status="completed",
            created_at=datetime(2026, 3, 1),
            completed_at=datetime(2026, 3, 5),
            **common,
        ),
        "late": make_order(
            service_type_id=cctv.id,
            status="new",
            created_at=datetime(2026, 1, 15),
            due_date=datetime(2026, 2, 1),
            **common,
        ),
    }

    db.add(Notification(type="new_order", message="New service order", read=False))
    for currency, status, total in [
        ("ETB", "sent", 1000),
        ("ETB", "paid", 500),
        ("ETB", "draft", 200),
        ("USD", "void", 300),
    ]:
        db.add(
            Invoice(
                invoice_number=f"INV-2026-{total:04d}",
                service_order_id=orders["done_a"].id,
                customer_id=customer.id,
                currency=currency,
                status=status,
                total_cents=total,
            )
        )
    db.commit()

    return {
        "orders": orders,
        "types": {"networking": networking, "cctv": cctv, "unused": unused},
        "employees": {"alice": alice, "bekele": bekele},
    }


def test_month_starts_spans_six_months():
    starts = month_starts(datetime(2026, 3, 5, 12, 0))
    assert [s.strftime("%Y-%m") for s in starts] == [
        "2025-10",
        "2025-11",
        "2025-12",
        "2026-01",
        "2026-02",
        "2026-03",
    ]
    assert starts[-1] == datetime(2026, 3, 1)


def test_technician_efficiency_counts_distinct_orders():
    rows = [(1, "Alice", 10, "completed"), (1, "Alice", 10, "completed"), (1, "Alice", 11, "new")]
    assert technician_efficiency(rows) == [
        {
            "employee_id": 1,
            "employee_name": "Alice",
            "assigned_orders": 2,
            "completed_orders": 1,
            "efficiency_percentage": 50.0,
        }
    ]


def test_dashboard_counters(db, report_data):
    dashboard = ReportService(db).get_dashboard(days=7, now=NOW)

    assert dashboard["total_orders"] == 4
    assert dashboard["in_progress"] == 1
    assert dashboard["completed_today"] == 1
    assert dashboard["active_technicians"] == 1
    assert dashboard["overdue_orders"] == 1
    assert dashboard["unread_notifications"] == 1

    orders = report_data["orders"]
    assert {o.id for o in dashboard["recent_orders"]} == {
        orders["done_a"].id,
        orders["busy_a"].id,
        orders["done_b"].id,
    }


def test_analytics_rollups(db, report_data):
    analytics = ReportService(db).get_analytics(now=NOW)
    alice = report_data["employees"]["alice"]
    bekele = report_data["employees"]["bekele"]

    assert analytics["total_orders"] == 4
    assert analytics["completed_orders"] == 2
    assert analytics["completion_rate"] == 50.0
    assert analytics["avg_completion_time_days"] == 3.0

    efficiency = {e["employee_id"]: e for e in analytics["technician_efficiency"]}
    assert efficiency[alice.id]["assigned_orders"] == 2
    assert efficiency[alice.id]["efficiency_percentage"] == 50.0
    assert efficiency[bekele.id]["efficiency_percentage"] == 100.0
    assert analytics["top_performer"]["employee_id"] == bekele.id

    counts = {c["name"]: c["count"] for c in analytics["counts_by_service_type"]}
    assert counts == {"Networking": 2, "CCTV": 2, "Unused": 0}

    assert analytics["status_percentages"] == {
        "new": 25.0,
        "assigned": 0.0,
        "in_progress": 25.0,
        "completed": 50.0,
        "closed": 0.0,
    }

    trends = {t["month"]: t for t in analytics["monthly_trends"]}
    assert len(trends) == 6
    assert trends["2026-03"] == {
        "month": "2026-03",
        "total": 3,
        "completed": 2,
        "completion_rate": 66.67,
    }
    assert trends["2026-01"]["total"] == 1
    assert trends["2025-12"]["total"] == 0

    assert analytics["revenue"]["ETB"] == {
        "invoiced_cents": 1700,
        "paid_cents": 500,
        "outstanding_cents": 1000,
    }
    assert analytics["revenue"]["USD"]["invoiced_cents"] == 0


def test_analytics_on_empty_database(db):
    analytics = ReportService(db).get_analytics(now=NOW)
    assert analytics["total_orders"] == 0
    assert analytics["completion_rate"] == 0.0
    assert analytics["avg_completion_time_days"] == 0.0
    assert analytics["top_performer"] == {
        "employee_id": None,
        "employee_name": None,
        "efficiency_percentage": 0,
    }
    assert analytics["revenue"] == {}


def test_dashboard_and_analytics_endpoints(client, auth_headers, report_data):
    dashboard = client.get("/api/dashboard", params={"days": 3650}, headers=auth_headers)
    assert dashboard.status_code == 200
    assert dashboard.json()["total_orders"] == 4
    assert len(dashboard.json()["recent_orders"]) == 4

    analytics = client.get("/api/analytics", headers=auth_headers)
    assert analytics.status_code == 200
    assert analytics.json()["completed_orders"] == 2


def test_service_order_report(client, auth_headers, report_data):
    response = client.get(
        "/api/reports/service-orders",
        params={"status": "completed", "sortBy": "id"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 2
    assert {row["customer_name"] for row in body["data"]} == {"Report Customer"}


def test_service_order_csv_export(client, auth_headers, report_data):
    response = client.get(
        "/api/reports/service-orders/export",
        params={"created_from": "2026-03-01T00:00:00"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=service_orders_" in response.headers["content-disposition"]
    assert response.headers["cache-control"] == "no-cache"

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][:3] == ["ID", "Description", "Status"]
    assert len(rows) == 4
    assert {row[4] for row in rows[1:]} == {"Report Customer"}
