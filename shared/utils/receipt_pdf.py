from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from xml.sax.saxutils import escape

from pydantic import BaseModel
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Table, TableStyle, Spacer
)

MONTHS = [
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
]


class OwnerInfo(BaseModel):
    name: str
    company: str = ""
    address: str = ""
    postal_code: str = ""
    city: str = ""
    siret: str = ""


class ReceiptPdfData(BaseModel):
    payment_id: str
    period: date
    payment_date: datetime
    tenant_name: str
    property_name: str
    property_address: str
    property_postal_code: str
    property_city: str
    room_number: str
    rent_amount: Decimal
    charges_amount: Decimal
    total_amount: Decimal
    verification_hash: str
    verification_url: str


def period_label(period: date) -> str:
    return f"{MONTHS[period.month - 1]} {period.year}"


def _money(value: Decimal) -> str:
    return f"{value:,.2f} EUR"


def _qr_code(payload: str, size: float = 100) -> Drawing:
    widget = QrCodeWidget(payload)
    x1, y1, x2, y2 = widget.getBounds()
    drawing = Drawing(size, size, transform=[
        size / (x2 - x1), 0, 0, size / (y2 - y1), 0, 0])
    drawing.add(widget)
    return drawing


def generate_receipt_pdf(receipt: ReceiptPdfData, owner: OwnerInfo) -> bytes:
    """Render a rent receipt and return the PDF bytes."""
    buffer = BytesIO()
    label = period_label(receipt.period)

    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=50,
        leftMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=f"Rent receipt - {receipt.tenant_name}",
        author=owner.name,
        subject="Rent receipt",
        keywords="receipt, rent, lease",
    )

    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="Centered", alignment=TA_CENTER))
    styles.add(ParagraphStyle(name="Small", fontSize=8,
               leading=10, alignment=TA_CENTER))
    elements = []

    # ==================================================
    # HEADER
    # ==================================================
    elements.append(Paragraph("<b>RENT RECEIPT</b>", styles["Title"]))
    elements.append(Paragraph(label, styles["Centered"]))
    elements.append(Spacer(1, 20))

    # ==================================================
    # LANDLORD / TENANT
    # ==================================================
    landlord = "<br/>".join(filter(None, [
        f"<b>{escape(owner.name)}</b>",
        escape(owner.company),
        escape(owner.address),
        escape(f"{owner.postal_code} {owner.city}".strip()),
        f"SIRET: {owner.siret}" if owner.siret else "",
    ]))
    tenant = "<br/>".join([
        f"<b>{escape(receipt.tenant_name)}</b>",
        escape(f"{receipt.property_name} - Room {receipt.room_number}"),
        escape(receipt.property_address),
        f"{receipt.property_postal_code} {receipt.property_city}",
    ])
    parties = Table(
        [[Paragraph("LANDLORD", styles["Heading4"]), Paragraph("TENANT", styles["Heading4"])],
         [Paragraph(landlord, styles["Normal"]), Paragraph(tenant, styles["Normal"])]],
        colWidths=[250, 250]
    )
    parties.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
    ]))
    elements.append(parties)
    elements.append(Spacer(1, 20))

    # ==================================================
    # AMOUNTS
    # ==================================================
    elements.append(Paragraph("<b>Payment details</b>", styles["Heading2"]))
    amounts = Table(
        [
            ["Description", "Period", "Amount"],
            ["Rent", label, _money(receipt.rent_amount)],
            ["Charges", label, _money(receipt.charges_amount)],
            ["Total", "", _money(receipt.total_amount)],
        ],
        colWidths=[220, 160, 120]
    )
    amounts.setStyle(TableStyle([
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    elements.append(amounts)
    elements.append(Spacer(1, 20))

    # ==================================================
    # ACKNOWLEDGEMENT
    # ==================================================
    elements.append(Paragraph(
        f"I, the undersigned {owner.name}, owner of the accommodation described above, "
        f"acknowledge receipt from {escape(receipt.tenant_name)} of the sum of "
        f"{_money(receipt.total_amount)} (rent: {_money(receipt.rent_amount)}, "
        f"charges: {_money(receipt.charges_amount)}) in payment of the rent and charges "
        f"for the period from the first to the last day of {label}. "
        f"This receipt cancels any previous receipt for the same period and does not "
        f"imply the release of sums still owed.",
        styles["Normal"]))
    elements.append(Spacer(1, 15))
    elements.append(Paragraph(
        f"Issued at {owner.city}, on {receipt.payment_date.strftime('%d/%m/%Y')}",
        styles["Normal"]))
    elements.append(Spacer(1, 25))

    # ==================================================
    # VERIFICATION
    # ==================================================
    elements.append(_qr_code(receipt.verification_url))
    elements.append(Spacer(1, 6))
    elements.append(Paragraph(
        "Scan the QR code above to check the authenticity of this document", styles["Small"]))
    elements.append(Paragraph(
        f"or visit {receipt.verification_url}", styles["Small"]))
    elements.append(Paragraph(
        f"Verification ID: {receipt.verification_hash[:8]}", styles["Small"]))

    doc.build(elements)
    return buffer.getvalue()
