"""
Invoice PDF Generator
Renders a customer invoice with line items and totals using reportlab
"""

import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..config import BUSINESS_NAME
from ..models_invoice import Invoice

logger = logging.getLogger(__name__)

BRAND_COLOR = colors.HexColor("#0f766e")
DARK_GRAY = colors.HexColor("#1e293b")
LIGHT_GRAY = colors.HexColor("#f1f5f9")


def format_money(cents: int, currency: str) -> str:
    return f"{currency} {cents / 100:,.2f}"


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y") if value else "-"


def render_invoice_pdf(invoice: Invoice) -> bytes:
    """Generate the invoice PDF and return its bytes"""
    logger.info(f"📄 Generating PDF for invoice {invoice.invoice_number}")

    buffer = io.BytesIO()
    margin = 0.75 * inch
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=margin,
        leftMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=f"Invoice {invoice.invoice_number}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "InvoiceTitle",
        parent=styles["Heading1"],
        fontSize=22,
        textColor=BRAND_COLOR,
        spaceAfter=12,
    )
    body_style = ParagraphStyle(
        "InvoiceBody", parent=styles["Normal"], fontSize=10, textColor=DARK_GRAY
    )

    currency = invoice.currency
    customer = invoice.customer
    story = [
        Paragraph(escape(BUSINESS_NAME), title_style),
        Paragraph(f"INVOICE {escape(invoice.invoice_number)}", styles["Heading2"]),
        Spacer(1, 0.2 * inch),
    ]

    info_data = [
        ["Bill to:", customer.name if customer else "-"],
        ["Company:", (customer.company if customer else None) or "-"],
        ["TIN:", (customer.tin_number if customer else None) or "-"],
        ["Service order:", f"#{invoice.service_order_id}"],
        ["Status:", invoice.status.upper()],
        ["Issued:", _format_date(invoice.issued_at)],
        ["Due:", _format_date(invoice.due_at)],
    ]
    info_table = Table(info_data, colWidths=[1.5 * inch, 4.5 * inch])
    info_table.setStyle(
        TableStyle(
            [
                ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 10),
                ("FONT", (1, 0), (1, -1), "Helvetica", 10),
                ("TEXTCOLOR", (0, 0), (-1, -1), DARK_GRAY),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    story.extend([info_table, Spacer(1, 0.3 * inch)])

    rows = [["Description", "Qty", "Unit price", "Amount"]]
    for item in invoice.items:
        rows.append(
            [
                Paragraph(escape(item.description), body_style),
                str(item.quantity),
                format_money(item.unit_price_cents, currency),
                format_money(item.total_cents, currency),
            ]
        )

    rows.append(["", "", "Subtotal", format_money(invoice.subtotal_cents, currency)])
    if invoice.discount_cents:
        rows.append(
            [
                "",
                "",
                f"Discount ({invoice.discount_rate:g}%)",
                f"-{format_money(invoice.discount_cents, currency)}",
            ]
        )
    rows.append(["", "", f"Tax ({invoice.tax_rate:g}%)", format_money(invoice.tax_cents, currency)])
    rows.append(["", "", "Total", format_money(invoice.total_cents, currency)])

    item_count = len(invoice.items)
    items_table = Table(rows, colWidths=[3.0 * inch, 0.6 * inch, 1.4 * inch, 1.4 * inch])
    items_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
                ("FONT", (0, 1), (-1, -1), "Helvetica", 10),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ROWBACKGROUNDS", (0, 1), (-1, item_count), [colors.white, LIGHT_GRAY]),
                ("LINEABOVE", (2, item_count + 1), (-1, item_count + 1), 0.5, DARK_GRAY),
                ("FONT", (2, -1), (-1, -1), "Helvetica-Bold", 11),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    story.append(items_table)

    if invoice.notes:
        story.extend([Spacer(1, 0.3 * inch), Paragraph(escape(invoice.notes), body_style)])

    doc.build(story)
    return buffer.getvalue()
