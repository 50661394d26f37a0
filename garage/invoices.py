"""
Printable PDF invoices for GST and non-GST bills.
"""
from io import BytesIO
from typing import Sequence

from num2words import num2words
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from garage.billing import gst_breakdown
from garage.branding import Branding
from garage.models.bill import GstBill, NonGstBill

W, H = A4
MARGIN = 40
CONTENT_W = W - 2 * MARGIN
ROW_H = 18
BOTTOM = 70

INK = HexColor("#000000")
MUTED = HexColor("#888888")
RULE = HexColor("#E0E0E0")
HEADER_FILL = HexColor("#F0F0F0")
ACCENT = HexColor("#1A237E")

FOOTER_TEXT = "This is a computer generated invoice. No signature required."

# (heading, x offset from the left margin, right-aligned)
GST_COLUMNS = (
    ("Description", 5, False),
    ("HSN", 150, False),
    ("Qty", 215, True),
    ("Rate", 275, True),
    ("GST%", 320, True),
    ("Actual", 385, True),
    ("GST", 445, True),
    ("Total", 510, True),
)
NON_GST_COLUMNS = (
    ("Description", 5, False),
    ("HSN", 220, False),
    ("Qty", 320, True),
    ("Rate", 410, True),
    ("Amount", 510, True),
)


def amount_in_words(amount: float) -> str:
    """``1234.4`` -> ``One Thousand, Two Hundred And Thirty-Four Rupees Only``."""
    return f"{num2words(round(amount), lang='en_IN').title()} Rupees Only"


def _rs(value: float) -> str:
    return f"Rs.{value:,.2f}"


class InvoiceDocument:
    """Thin layer over a reportlab canvas that lays out one invoice top-down."""

    def __init__(self, title: str):
        self.buffer = BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=A4)
        self.c.setTitle(title)
        self.y = H - MARGIN
        self.columns: Sequence[tuple] = ()

    # drawing primitives

    def text(self, x, y, value, size=10, bold=False, color=INK, right=False):
        self.c.setFillColor(color)
        self.c.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        if right:
            self.c.drawRightString(x, y, str(value))
        else:
            self.c.drawString(x, y, str(value))

    def rule(self, y, color=INK, width=0.8):
        self.c.saveState()
        self.c.setStrokeColor(color)
        self.c.setLineWidth(width)
        self.c.line(MARGIN, y, W - MARGIN, y)
        self.c.restoreState()

    def footer(self):
        self.text(W / 2 - self.c.stringWidth(FOOTER_TEXT, "Helvetica", 9) / 2, 40, FOOTER_TEXT, size=9, color=MUTED)

    def new_page(self):
        self.footer()
        self.c.showPage()
        self.y = H - MARGIN
        if self.columns:
            self.table_header()

    def ensure_room(self, height):
        if self.y - height < BOTTOM:
            self.new_page()

    # sections

    def letterhead(self, garage_name: str, lines: Sequence[str]):
        self.text(MARGIN, self.y - 22, garage_name, size=20, bold=True)
        self.text(W - MARGIN, self.y - 22, "Invoice", size=14, right=True)
        self.y -= 40
        self.rule(self.y)
        self.y -= 16
        top = self.y
        for line in lines:
            self.text(MARGIN, self.y, line)
            self.y -= 14
        return top

    def block(self, x, top, heading, lines):
        """A titled column of lines starting at ``top``; returns the y below it."""
        y = top
        self.text(x, y, heading, bold=True)
        for line in lines:
            y -= 14
            self.text(x, y, line)
        return y - 14

    def table_header(self):
        self.c.saveState()
        self.c.setFillColor(HEADER_FILL)
        self.c.rect(MARGIN, self.y - 6, CONTENT_W, ROW_H + 4, fill=1, stroke=0)
        self.c.restoreState()
        for heading, offset, right in self.columns:
            self.text(MARGIN + offset, self.y, heading, bold=True, right=right)
        self.y -= ROW_H + 4

    def table(self, columns, rows):
        self.columns = columns
        self.ensure_room(ROW_H * 2)
        self.table_header()
        for row in rows:
            self.ensure_room(ROW_H)
            for (_, offset, right), value in zip(columns, row):
                self.text(MARGIN + offset, self.y, value, right=right)
            self.rule(self.y - 6, color=RULE, width=0.5)
            self.y -= ROW_H
        self.columns = ()
        self.y -= 8

    def totals(self, rows):
        """Right-aligned label/value rows; the last one is the grand total."""
        for index, (label, value) in enumerate(rows):
            last = index == len(rows) - 1
            self.ensure_room(ROW_H)
            self.text(W - MARGIN, self.y, f"{label}: {_rs(value)}", size=12 if last else 10,
                      bold=True, color=ACCENT if last else INK, right=True)
            self.y -= ROW_H

    def finish(self) -> bytes:
        self.footer()
        self.c.save()
        return self.buffer.getvalue()


def _bill_to(bill) -> list[str]:
    customer = bill.customer
    return [f"Name: {customer.name}", f"Mobile: {customer.mobile}"] if customer else []


def _vehicle(bill) -> list[str]:
    vehicle = bill.vehicle
    if vehicle is None:
        return []
    model = " ".join(part for part in (vehicle.brand, vehicle.model) if part)
    return [f"Number: {vehicle.vehicle_number}", f"Model: {model or 'N/A'}"]


def _invoice_details(bill) -> list[str]:
    return [f"Invoice No: {bill.invoice_no}", f"Date: {bill.invoice_date.strftime('%d/%m/%Y')}"]


def render_gst_invoice(bill: GstBill, garage: Branding) -> bytes:
    """PDF for a GST bill under the garage's current letterhead."""
    doc = InvoiceDocument(f"Invoice {bill.invoice_no}")

    garage_lines = [line for line in (garage.address, garage.locality) if line]
    if garage.gst_number:
        garage_lines.append(f"GSTIN: {garage.gst_number}")
    if garage.phone:
        garage_lines.append(f"Phone: {garage.phone}")
    if garage.email:
        garage_lines.append(f"Email: {garage.email}")

    top = doc.letterhead(garage.name, garage_lines)
    right_x = MARGIN + 310
    below = doc.block(right_x, top, "Invoice Details", _invoice_details(bill))
    below = doc.block(right_x, below, "Bill To", _bill_to(bill) + [f"GSTIN: {bill.gstin or 'N/A'}"])
    doc.y = min(doc.y, below) - 4
    doc.y = doc.block(MARGIN, doc.y, "Vehicle Details", _vehicle(bill))
    doc.rule(doc.y + 6)
    doc.y -= 12

    doc.table(GST_COLUMNS, [
        (
            line.item.description if line.item else "",
            line.item.hsn_code if line.item else "",
            line.quantity,
            _rs(line.rate),
            f"{line.gst_percent}%",
            _rs(line.actual_amount),
            _rs(line.gst_amount),
            _rs(line.total_amount),
        )
        for line in bill.items
    ])

    slabs = gst_breakdown(bill.items)
    if slabs:
        doc.ensure_room(ROW_H * (len(slabs) + 1))
        doc.text(MARGIN, doc.y, "GST Breakdown:", bold=True)
        for slab in slabs:
            doc.y -= 14
            doc.text(MARGIN, doc.y, f"GST @ {slab['percent']}%: {_rs(slab['amount'])}")
        doc.y -= ROW_H

    subtotal = round(sum(line.actual_amount for line in bill.items), 2)
    rows = [("Subtotal", subtotal), ("Total GST", bill.gst)]
    if bill.mechanic_charge:
        rows.append(("Mechanic Charge", bill.mechanic_charge))
    rows.append(("Grand Total", bill.total_amount))
    doc.totals(rows)

    doc.ensure_room(ROW_H)
    doc.text(MARGIN, doc.y, f"Amount in Words: {amount_in_words(bill.total_amount)}")
    if garage.footer:
        doc.y -= ROW_H
        doc.ensure_room(ROW_H)
        doc.text(MARGIN, doc.y, garage.footer, size=9, color=MUTED)

    return doc.finish()


def render_non_gst_invoice(bill: NonGstBill) -> bytes:
    """PDF for a non-GST bill, using the garage details frozen on the bill."""
    doc = InvoiceDocument(f"Invoice {bill.invoice_no}")
    snapshot = bill.garage or {}

    garage_lines = [line for line in (snapshot.get("address"), snapshot.get("state")) if line]
    if snapshot.get("gstin"):
        garage_lines.append(f"GSTIN: {snapshot['gstin']}")

    top = doc.letterhead(snapshot.get("name", ""), garage_lines)
    right_x = MARGIN + 310
    below = doc.block(right_x, top, "Invoice Details", _invoice_details(bill))
    below = doc.block(right_x, below, "Bill To", _bill_to(bill))
    doc.y = min(doc.y, below) - 4
    doc.y = doc.block(MARGIN, doc.y, "Vehicle Details", _vehicle(bill))
    doc.rule(doc.y + 6)
    doc.y -= 12

    doc.table(NON_GST_COLUMNS, [
        (item.description, item.hsn_code, item.quantity, _rs(item.rate), _rs(round(item.quantity * item.rate, 2)))
        for item in bill.items
    ])

    subtotal = round(bill.total_amount - bill.mechanic_charge, 2)
    rows = [("Subtotal", subtotal)]
    if bill.mechanic_charge:
        rows.append(("Mechanic Charge", bill.mechanic_charge))
    rows.append(("Grand Total", bill.total_amount))
    doc.totals(rows)

    doc.ensure_room(ROW_H)
    doc.text(MARGIN, doc.y, f"Amount in Words: {amount_in_words(bill.total_amount)}")
    if bill.additional_notes:
        doc.y -= ROW_H
        doc.ensure_room(ROW_H)
        doc.text(MARGIN, doc.y, f"Notes: {bill.additional_notes}")

    return doc.finish()
