"""
PDF invoice for a sale.

One page per invoice: shop header, customer, the merged item lines and the
running balance, so a tab shows what is still owed.
"""
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from tillpoint.core.config import settings
from tillpoint.core.time_utils import utcnow
from tillpoint.models.enums import SaleStatus
from tillpoint.models.sale import Sale
from tillpoint.services.sale_service import to_money


def _money(value) -> str:
    return f"{settings.CURRENCY_SYMBOL}{to_money(value):,.2f}"


def render_invoice_pdf(sale: Sale) -> BytesIO:
    """Render `sale` as a PDF and return the buffer, rewound."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=0.5 * inch, bottomMargin=0.5 * inch)

    elements = []
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "InvoiceTitle",
        parent=styles["Heading1"],
        fontSize=22,
        textColor=colors.HexColor("#1a56db"),
        alignment=TA_CENTER,
        spaceAfter=12,
    )
    heading_style = ParagraphStyle(
        "InvoiceHeading",
        parent=styles["Heading2"],
        fontSize=13,
        textColor=colors.HexColor("#1f2937"),
        spaceAfter=6,
    )
    normal_style = ParagraphStyle(
        "InvoiceNormal",
        parent=styles["Normal"],
        fontSize=10,
        textColor=colors.HexColor("#374151"),
    )
    footer_style = ParagraphStyle(
        "InvoiceFooter",
        parent=styles["Normal"],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER,
    )

    elements.append(Paragraph("INVOICE", title_style))
    elements.append(Spacer(1, 0.2 * inch))

    created = sale.created_at.strftime("%d %b %Y, %I:%M %p") if sale.created_at else ""
    info_table = Table(
        [[
            Paragraph(f"<b>{escape(settings.SHOP_NAME)}</b>", normal_style),
            Paragraph(
                f"<b>Invoice #:</b> {sale.invoice_id}<br/>"
                f"<b>Date:</b> {created}<br/>"
                f"<b>Status:</b> {sale.status}",
                normal_style,
            ),
        ]],
        colWidths=[3.5 * inch, 3 * inch],
    )
    info_table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.3 * inch))

    elements.append(Paragraph("<b>Bill To:</b>", heading_style))
    customer_info = f"<b>{escape(sale.customer_name)}</b>"
    if sale.customer_phone:
        customer_info += f"<br/>Phone: {escape(sale.customer_phone)}"
    elements.append(Paragraph(customer_info, normal_style))
    elements.append(Spacer(1, 0.3 * inch))

    rows = [["Item", "Qty", "Price", "Amount"]]
    for item in sale.items or []:
        rows.append([
            Paragraph(escape(item["name"]), normal_style),
            str(item["quantity"]),
            _money(item["price"]),
            _money(item["total"]),
        ])
    items_table = Table(rows, colWidths=[3 * inch, 0.8 * inch, 1.2 * inch, 1.5 * inch])
    items_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2 * inch))

    totals = [
        ["", "Subtotal:", _money(sale.subtotal)],
        ["", "Total:", _money(sale.total)],
        ["", f"Paid ({sale.payment_method}):", _money(sale.amount_paid)],
    ]
    if sale.status == SaleStatus.PARTIAL_PAYMENT.value:
        totals.append(["", "Balance due:", _money(sale.remaining_balance)])
    totals_table = Table(totals, colWidths=[3 * inch, 2 * inch, 1.5 * inch])
    totals_table.setStyle(TableStyle([
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("FONTNAME", (1, 1), (-1, 1), "Helvetica-Bold"),
        ("LINEABOVE", (1, 1), (-1, 1), 1, colors.black),
    ]))
    elements.append(totals_table)
    elements.append(Spacer(1, 0.8 * inch))

    elements.append(Paragraph("Thank you for your business!", footer_style))
    elements.append(Paragraph(f"Printed {utcnow().strftime('%d %b %Y at %H:%M')} UTC", footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer
