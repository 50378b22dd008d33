"""Reporting service - Dashboard counters and analytics rollups"""

import csv
import logging
from datetime import datetime, timedelta
from io import StringIO
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...cache import get_analytics_cached, set_analytics_cached
from ...config import ANALYTICS_CACHE_TTL, RECENT_ORDERS_DAYS
from ...models import ORDER_STATUSES
from ...shared.pagination import Pagination, paginate, pagination_meta
from ..service_orders.repository import SORT_COLUMNS
from ..service_orders.serializers import order_summary
from .repository import ReportRepository
from .schemas import ServiceOrderReportRow

logger = logging.getLogger(__name__)

TREND_MONTHS = 6


def _percentage(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def month_starts(now: datetime, months: int = TREND_MONTHS) -> list[datetime]:
    """First day of each of the last `months` calendar months, oldest first"""
    current = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return [current - relativedelta(months=offset) for offset in range(months - 1, -1, -1)]


def technician_efficiency(rows: list[tuple]) -> list[dict]:
    """Per employee: distinct orders assigned, distinct orders completed, efficiency"""
    stats: dict[int, dict] = {}
    for employee_id, name, order_id, status in rows:
        entry = stats.setdefault(
            employee_id, {"employee_name": name, "assigned": set(), "completed": set()}
        )
        entry["assigned"].add(order_id)
        if status == "completed":
            entry["completed"].add(order_id)

    return [
        {
            "employee_id": employee_id,
            "employee_name": entry["employee_name"],
            "assigned_orders": len(entry["assigned"]),
            "completed_orders": len(entry["completed"]),
            "efficiency_percentage": _percentage(len(entry["completed"]), len(entry["assigned"])),
        }
        for employee_id, entry in stats.items()
    ]


def top_performer(efficiency: list[dict]) -> dict:
    best = None
    for entry in efficiency:
        if best is None or entry["efficiency_percentage"] > best["efficiency_percentage"]:
            best = entry
    if best is None:
        return {"employee_id": None, "employee_name": None, "efficiency_percentage": 0}
    return {
        "employee_id": best["employee_id"],
        "employee_name": best["employee_name"],
        "efficiency_percentage": best["efficiency_percentage"],
    }


def monthly_trends(rows: list[tuple], now: datetime) -> list[dict]:
    """Orders created per calendar month, zero-filled"""
    buckets = {start.strftime("%Y-%m"): {"total": 0, "completed": 0} for start in month_starts(now)}
    for created_at, status in rows:
        if created_at is None:
            continue
        bucket = buckets.get(created_at.strftime("%Y-%m"))
        if bucket is None:
            continue
        bucket["total"] += 1
        if status == "completed":
            bucket["completed"] += 1

    return [
        {
            "month": month,
            "total": counts["total"],
            "completed": counts["completed"],
            "completion_rate": _percentage(counts["completed"], counts["total"]),
        }
        for month, counts in buckets.items()
    ]


def revenue_by_currency(rows: list[tuple]) -> dict:
    """Invoiced (not void), paid and outstanding (sent) totals per currency"""
    revenue: dict[str, dict] = {}
    for currency, status, total in rows:
        entry = revenue.setdefault(
            currency, {"invoiced_cents": 0, "paid_cents": 0, "outstanding_cents": 0}
        )
        total = int(total or 0)
        if status != "void":
            entry["invoiced_cents"] += total
        if status == "paid":
            entry["paid_cents"] += total
        elif status == "sent":
            entry["outstanding_cents"] += total
    return revenue


class ReportService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ReportRepository()

    def get_dashboard(self, days: Optional[int] = None, now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()
        days = days if days and days > 0 else RECENT_ORDERS_DAYS
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

        recent = self.repo.recent_orders(self.db, now - timedelta(days=days))
        return {
            "total_orders": self.repo.count_orders(self.db),
            "in_progress": self.repo.count_orders(self.db, "in_progress"),
            "completed_today": self.repo.count_completed_since(self.db, midnight),
            "active_technicians": self.repo.count_active_technicians(self.db),
            "overdue_orders": self.repo.count_overdue(self.db, now),
            "unread_notifications": self.repo.count_unread_notifications(self.db),
            "recent_orders": [order_summary(o) for o in recent],
        }

    def get_analytics(self, now: Optional[datetime] = None) -> dict:
        """Analytics rollups, served from Redis when the cache is enabled"""
        use_cache = now is None
        if use_cache:
            cached = get_analytics_cached("summary")
            if cached is not None:
                return cached

        analytics = self._compute_analytics(now or datetime.utcnow())
        if use_cache:
            set_analytics_cached("summary", analytics, ANALYTICS_CACHE_TTL)
        return analytics

    def _compute_analytics(self, now: datetime) -> dict:
        status_counts = self.repo.status_counts(self.db)
        total = sum(status_counts.values())
        completed = status_counts.get("completed", 0)

        durations = [
            (completed_at - created_at).total_seconds() / 86400
            for created_at, completed_at in self.repo.completion_durations(self.db)
            if created_at is not None
        ]
        avg_days = round(sum(durations) / len(durations), 2) if durations else 0.0

        efficiency = technician_efficiency(self.repo.technician_rows(self.db))
        first_month = month_starts(now)[0]

        logger.info(f"📊 Analytics computed over {total} service order(s)")
        return {
            "total_orders": total,
            "completed_orders": completed,
            "completion_rate": _percentage(completed, total),
            "avg_completion_time_days": avg_days,
            "technician_efficiency": efficiency,
            "top_performer": top_performer(efficiency),
            "counts_by_service_type": [
                {"id": type_id, "name": name, "count": count}
                for type_id, name, count in self.repo.counts_by_service_type(self.db)
            ],
            "status_percentages": {
                status: _percentage(status_counts.get(status, 0), total)
                for status in ORDER_STATUSES
            },
            "monthly_trends": monthly_trends(
                self.repo.orders_created_since(self.db, first_month), now
            ),
            "revenue": revenue_by_currency(self.repo.invoice_totals(self.db)),
        }

    # ------------------------------------------------------------------
    # Service order report
    # ------------------------------------------------------------------

    @staticmethod
    def _report_row(order) -> ServiceOrderReportRow:
        return ServiceOrderReportRow(
            id=order.id,
            description=order.description,
            status=order.status,
            priority=order.priority,
            customer_name=order.customer.name if order.customer else None,
            service_type_name=order.service_type.name if order.service_type else None,
            created_at=order.created_at,
            completed_at=order.completed_at,
        )

    def service_order_report(self, pagination: Pagination, **filters) -> dict:
        query = self.repo.report_query(self.db, **filters)
        orders, total = paginate(query, pagination, SORT_COLUMNS)
        return {
            "data": [self._report_row(o) for o in orders],
            "pagination": pagination_meta(total, pagination),
        }

    def export_service_orders_csv(self, **filters) -> StreamingResponse:
        """Export the filtered service order report as CSV"""
        orders = (
            self.repo.report_query(self.db, **filters)
            .order_by(SORT_COLUMNS["created_at"].desc())
            .all()
        )

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "ID",
                "Description",
                "Status",
                "Priority",
                "Customer",
                "Service Type",
                "Created At",
                "Completed At",
            ]
        )
        for order in orders:
            row = self._report_row(order)
            writer.writerow(
                [
                    row.id,
                    row.description or "",
                    row.status,
                    row.priority,
                    row.customer_name or "",
                    row.service_type_name or "",
                    row.created_at.strftime("%Y-%m-%d %H:%M:%S") if row.created_at else "",
                    row.completed_at.strftime("%Y-%m-%d %H:%M:%S") if row.completed_at else "",
                ]
            )

        filename = f"service_orders_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.csv"
        logger.info(f"✅ CSV export: {filename} ({len(orders)} service orders)")

        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Cache-Control": "no-cache",
            },
        )
