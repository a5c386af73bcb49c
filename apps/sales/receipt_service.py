"""
Invoice rendering for POS sales.

- PDF invoices in A4 (standard) and 80mm (thermal) layouts
- HTML invoices for browser printing
- Invoice barcode PNG
- QR code in the PDF footer carrying the invoice number and total
"""

import io
import logging
from typing import Optional

from django.template.loader import render_to_string
from django.utils import timezone

import qrcode
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable

from apps.core.models import StoreSettings
from apps.inventory.barcode_utils import generate_barcode_image

from .models import Sale

logger = logging.getLogger(__name__)

STANDARD = "standard"
THERMAL = "thermal"
FORMATS = (STANDARD, THERMAL)


class ReceiptGenerator:
    """
    Renders one sale as an invoice.

    Formats:
    - standard: A4 page with a full item table and QR code
    - thermal: 80mm roll with a compact item table
    """

    THERMAL_WIDTH = 80 * mm
    THERMAL_MARGIN = 4 * mm
    STANDARD_MARGIN = 18 * mm

    def __init__(self, sale: Sale, store: Optional[StoreSettings] = None):
        self.sale = sale
        self.store = store or StoreSettings.load()
        self.currency = self.store.currency
        self.styles = getSampleStyleSheet()
        self._create_styles()

    def _create_styles(self):
        base = self.styles["Normal"]
        self.title_style = {
            STANDARD: ParagraphStyle(
                "InvoiceTitle", parent=base, fontSize=18, alignment=1, fontName="Helvetica-Bold"
            ),
            THERMAL: ParagraphStyle(
                "ThermalTitle", parent=base, fontSize=12, alignment=1, fontName="Helvetica-Bold"
            ),
        }
        self.body_style = {
            STANDARD: ParagraphStyle("InvoiceBody", parent=base, fontSize=10, spaceAfter=4),
            THERMAL: ParagraphStyle("ThermalBody", parent=base, fontSize=7, spaceAfter=2),
        }
        self.center_style = {
            key: ParagraphStyle(f"{style.name}Center", parent=style, alignment=1)
            for key, style in self.body_style.items()
        }
        self.total_style = {
            STANDARD: ParagraphStyle(
                "InvoiceTotal", parent=base, fontSize=12, alignment=2, fontName="Helvetica-Bold"
            ),
            THERMAL: ParagraphStyle(
                "ThermalTotal", parent=base, fontSize=9, alignment=2, fontName="Helvetica-Bold"
            ),
        }

    def money(self, amount):
        return f"{amount:.2f} {self.currency}"

    def generate_pdf_receipt(self, format_type: str = STANDARD) -> bytes:
        """
        Render the invoice as PDF.

        Args:
            format_type: 'standard' for A4, 'thermal' for 80mm paper

        Returns:
            PDF bytes
        """
        if format_type not in FORMATS:
            raise ValueError(f"Unsupported receipt format: {format_type}")

        buffer = io.BytesIO()
        if format_type == THERMAL:
            # Roll paper: grow the page with the number of lines
            height = 110 * mm + self.sale.items.count() * 6 * mm
            doc = SimpleDocTemplate(
                buffer,
                pagesize=(self.THERMAL_WIDTH, height),
                rightMargin=self.THERMAL_MARGIN,
                leftMargin=self.THERMAL_MARGIN,
                topMargin=self.THERMAL_MARGIN,
                bottomMargin=self.THERMAL_MARGIN,
            )
        else:
            doc = SimpleDocTemplate(
                buffer,
                pagesize=A4,
                rightMargin=self.STANDARD_MARGIN,
                leftMargin=self.STANDARD_MARGIN,
                topMargin=self.STANDARD_MARGIN,
                bottomMargin=self.STANDARD_MARGIN,
            )

        story = []
        story.extend(self._build_store_header(format_type))
        story.extend(self._build_sale_info(format_type))
        story.extend(self._build_items_table(format_type))
        story.extend(self._build_totals(format_type))
        story.extend(self._build_payment_info(format_type))
        story.extend(self._build_footer(format_type))
        doc.build(story)

        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes

    def _separator(self, format_type):
        gap = 6 if format_type == THERMAL else 10
        return [
            Spacer(1, gap),
            HRFlowable(width="100%", thickness=1, color=colors.black),
            Spacer(1, gap),
        ]

    def _build_store_header(self, format_type):
        elements = [Paragraph(self.store.store_name, self.title_style[format_type])]
        center = self.center_style[format_type]
        branch = self.sale.branch
        address = branch.address if branch and branch.address else self.store.address
        phone = branch.phone if branch and branch.phone else self.store.phone
        if branch:
            elements.append(Paragraph(branch.name, center))
        if address:
            elements.append(Paragraph(address, center))
        if phone:
            elements.append(Paragraph(f"Tel: {phone}", center))
        elements.extend(self._separator(format_type))
        return elements

    def _build_sale_info(self, format_type):
        body = self.body_style[format_type]
        date = timezone.localtime(self.sale.date)
        lines = [
            f"Invoice #: {self.sale.invoice_number}",
            f"Date: {date.strftime('%Y-%m-%d %H:%M')}",
        ]
        if self.sale.cashier:
            lines.append(f"Cashier: {self.sale.cashier.get_full_name() or self.sale.cashier.username}")
        if self.sale.customer_name:
            lines.append(f"Customer: {self.sale.customer_name}")
        if self.sale.customer_phone:
            lines.append(f"Phone: {self.sale.customer_phone}")

        elements = [Paragraph(line, body) for line in lines]
        elements.extend(self._separator(format_type))
        return elements

    def _build_items_table(self, format_type):
        thermal = format_type == THERMAL
        if thermal:
            data = [["Item", "Qty", "Price", "Total"]]
            col_widths = [32 * mm, 10 * mm, 14 * mm, 16 * mm]
            font_size = 7
        else:
            data = [["Item", "Qty", "Unit Price", "Discount", "Total"]]
            col_widths = [70 * mm, 20 * mm, 28 * mm, 25 * mm, 30 * mm]
            font_size = 9

        for item in self.sale.items.all():
            quantity = f"{item.quantity.normalize():f}"
            if thermal:
                name = item.product_name[:18] + ("..." if len(item.product_name) > 18 else "")
                data.append([name, quantity, f"{item.unit_price:.2f}", f"{item.total:.2f}"])
            else:
                data.append(
                    [
                        item.product_name,
                        quantity,
                        f"{item.unit_price:.2f}",
                        f"{item.discount:.2f}" if item.discount > 0 else "-",
                        f"{item.total:.2f}",
                    ]
                )

        table = Table(data, colWidths=col_widths)
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                    ("FONTSIZE", (0, 0), (-1, -1), font_size),
                    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                    ("LINEBELOW", (0, 0), (-1, 0), 1, colors.black),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
                + ([] if thermal else [("GRID", (0, 0), (-1, -1), 0.5, colors.grey)])
            )
        )
        return [table, Spacer(1, 6 if thermal else 12)]

    def _build_totals(self, format_type):
        body = self.body_style[format_type]
        right = ParagraphStyle(f"{body.name}Right", parent=body, alignment=2)
        elements = [Paragraph(f"Subtotal: {self.money(self.sale.subtotal)}", right)]
        if self.sale.discount > 0:
            elements.append(Paragraph(f"Discount: -{self.money(self.sale.discount)}", right))
        elements.append(HRFlowable(width="100%", thickness=2, color=colors.black))
        elements.append(
            Paragraph(f"TOTAL: {self.money(self.sale.total)}", self.total_style[format_type])
        )
        return elements

    def _build_payment_info(self, format_type):
        body = self.body_style[format_type]
        elements = [Spacer(1, 6), Paragraph(f"Payment: {self.sale.get_payment_method_display()}", body)]
        if self.sale.payment_method == Sale.MIXED:
            elements.append(Paragraph(f"Cash: {self.money(self.sale.cash_amount)}", body))
            elements.append(Paragraph(f"Card: {self.money(self.sale.card_amount)}", body))
        return elements

    def _build_footer(self, format_type):
        center = self.center_style[format_type]
        elements = self._separator(format_type)
        footer = self.store.invoice_footer or "Thank you for your purchase!"
        for line in footer.splitlines():
            if line.strip():
                elements.append(Paragraph(line.strip(), center))

        qr_image = self._generate_qr_code(size=0.8 * inch if format_type == THERMAL else 1 * inch)
        if qr_image is not None:
            elements.append(Spacer(1, 6))
            elements.append(qr_image)
        return elements

    def qr_payload(self):
        return f"{self.store.store_name}|{self.sale.invoice_number}|{self.sale.total:.2f}"

    def _generate_qr_code(self, size) -> Optional[Image]:
        """QR code with the invoice number and total; None if it cannot be rendered."""
        try:
            qr = qrcode.QRCode(
                version=1,
                error_correction=qrcode.constants.ERROR_CORRECT_L,
                box_size=3,
                border=2,
            )
            qr.add_data(self.qr_payload())
            qr.make(fit=True)
            qr_img = qr.make_image(fill_color="black", back_color="white")

            buffer = io.BytesIO()
            qr_img.save(buffer, format="PNG")
            buffer.seek(0)

            img = Image(buffer, width=size, height=size)
            img.hAlign = "CENTER"
            return img

        except Exception as e:
            logger.error(
                f"Error generating QR code for invoice {self.sale.invoice_number}: {e}",
                exc_info=True,
            )
            return None

    def generate_html_receipt(self, format_type: str = STANDARD) -> str:
        """
        Render the invoice as HTML for browser printing.

        Args:
            format_type: 'standard' or 'thermal'
        """
        if format_type not in FORMATS:
            raise ValueError(f"Unsupported receipt format: {format_type}")
        context = {
            "sale": self.sale,
            "store": self.store,
            "items": self.sale.items.all(),
            "thermal": format_type == THERMAL,
            "currency": self.currency,
            "current_time": timezone.now(),
            "payment_method_display": self.sale.get_payment_method_display(),
        }
        return render_to_string("sales/receipt.html", context)

    def generate_barcode(self) -> bytes:
        """Code 128 PNG of the invoice number."""
        return generate_barcode_image(self.sale.invoice_number, "code128")


class ReceiptService:
    """
    High-level entry points for invoice generation.
    """

    @staticmethod
    def generate_receipt(
        sale: Sale, format_type: str = STANDARD, output_format: str = "pdf"
    ) -> bytes:
        """
        Render an invoice.

        Args:
            sale: Sale instance
            format_type: 'standard' or 'thermal'
            output_format: 'pdf' or 'html'

        Returns:
            PDF bytes or UTF-8 encoded HTML
        """
        generator = ReceiptGenerator(sale)

        if output_format == "pdf":
            return generator.generate_pdf_receipt(format_type)
        elif output_format == "html":
            return generator.generate_html_receipt(format_type).encode("utf-8")
        else:
            raise ValueError(f"Unsupported output format: {output_format}")
