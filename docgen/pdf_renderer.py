"""
PDF rendering for quotations, invoices and delivery challans.

Layout is absolute: a cursor ``y`` starts at the top margin of an A4 page and
moves down as each section is drawn.  When a section would cross the bottom
margin a new page is started; the items table repeats its header row on
continuation pages and the footer is drawn on every page.

The canvas runs in reportlab's invariant mode, so the same record and options
always produce the same bytes.
"""
import io
import logging

from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from models import BusinessRecord, DocumentKind, RenderOptions
from .formatting import (
    BAND_COLOR, MUTED_COLOR, PAID_COLOR,
    clean_text, document_title, format_currency, format_date, format_quantity,
    format_tax_rate, normalize_hex_color, table_columns,
)
from .totals import resolve_document_totals, resolve_line_total

logger = logging.getLogger(__name__)

W, H = A4  # 595.27 x 841.89
MARGIN = 50
CONTENT_W = W - 2 * MARGIN
ROW_H = 25
CELL_PAD = 6
TOTALS_W = 200
TOTALS_H = 80
FOOTER_Y = MARGIN - 20

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
TEXT_COLOR = HexColor("#1f2937")
BORDER_COLOR = HexColor("#b3b3b3")


class _PdfLayout:
    """Single-use canvas wrapper holding the cursor for one render call."""

    def __init__(self, record: BusinessRecord, kind: DocumentKind, options: RenderOptions):
        self.record = record
        self.kind = kind
        self.options = options
        self.brand = HexColor(normalize_hex_color(options.primary_color))
        self.columns = table_columns(kind)
        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=A4, invariant=1)
        self.page_num = 1
        self.y = H - MARGIN

    # ─── DRAWING PRIMITIVES ───

    def draw_rect(self, x, y, w, h, fill=None, stroke=None, stroke_w=0.5):
        self.c.saveState()
        if fill:
            self.c.setFillColor(fill)
        if stroke:
            self.c.setStrokeColor(stroke)
            self.c.setLineWidth(stroke_w)
        self.c.rect(x, y, w, h, fill=1 if fill else 0, stroke=1 if stroke else 0)
        self.c.restoreState()

    def draw_line(self, x1, y1, x2, y2, color=BORDER_COLOR, width=1):
        self.c.saveState()
        self.c.setStrokeColor(color)
        self.c.setLineWidth(width)
        self.c.line(x1, y1, x2, y2)
        self.c.restoreState()

    def draw_text(self, text, x, y, font=FONT, size=10, color=TEXT_COLOR, align="left", max_width=None):
        # One baseline per call
        text = clean_text(text).replace("\n", " ")
        if max_width:
            text = _fit_text(text, font, size, max_width)
        self.c.saveState()
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        if align == "center":
            self.c.drawCentredString(x, y, text)
        elif align == "right":
            self.c.drawRightString(x, y, text)
        else:
            self.c.drawString(x, y, text)
        self.c.restoreState()

    # ─── PAGE INFRASTRUCTURE ───

    def ensure_space(self, needed: float) -> bool:
        """Start a new page if *needed* points would cross the bottom margin."""
        if self.y - needed >= MARGIN:
            return False
        self.new_page()
        return True

    def new_page(self) -> None:
        self.draw_footer()
        self.c.showPage()
        self.page_num += 1
        self.y = H - MARGIN

    # ─── SECTIONS ───

    def draw_header(self) -> None:
        opts = self.options
        if opts.business_name:
            self.draw_text(opts.business_name, MARGIN, self.y - 20, FONT_BOLD, 20, self.brand)
            self.y -= 30
        if opts.business_address:
            self.draw_text(opts.business_address, MARGIN, self.y - 10, size=10)
            self.y -= 15
        if opts.contact_line:
            self.draw_text(opts.contact_line, MARGIN, self.y - 9, size=9, color=HexColor(MUTED_COLOR))
            self.y -= 15
        self.y -= 5
        self.draw_line(MARGIN, self.y, W - MARGIN, self.y, self.brand, 1)
        self.y -= 20

    def draw_title_band(self, title: str) -> None:
        band_h = 32
        self.draw_rect(MARGIN, self.y - band_h, CONTENT_W, band_h, fill=HexColor(BAND_COLOR))
        self.draw_text(title, W / 2, self.y - 22, FONT_BOLD, 18, self.brand, align="center")
        self.y -= band_h + 20

    def draw_metadata(self) -> None:
        baseline = self.y - 10
        self.draw_text(f"Document Number: {self.record.document_number}", MARGIN, baseline)
        self.draw_text(f"Date: {format_date(self.record.created_at)}", W - MARGIN, baseline, align="right")
        self.y -= 30

    def draw_paid_stamp(self) -> None:
        self.c.saveState()
        self.c.translate(W - MARGIN - 70, self.y - 35)
        # -45 degrees in a y-down page space; reads bottom-left to top-right
        self.c.rotate(45)
        self.c.setFillColor(HexColor(PAID_COLOR))
        self.c.setFillAlpha(0.35)
        self.c.setFont(FONT_BOLD, 40)
        self.c.drawCentredString(0, 0, "PAID")
        self.c.restoreState()
        self.y -= 20

    def draw_customer(self) -> None:
        record = self.record
        lines = [record.customer_name, record.customer_address]
        if self.kind == "challan":
            if record.delivery_address:
                lines.append(f"Deliver To: {record.delivery_address}")
        else:
            lines.append(record.customer_email)
        lines = [line for line in lines if line]

        self.ensure_space(16 + 14 * len(lines))
        self.draw_text("Bill To:", MARGIN, self.y - 11, FONT_BOLD, 11)
        self.y -= 16
        for line in lines:
            self.draw_text(line, MARGIN, self.y - 10, max_width=CONTENT_W)
            self.y -= 14
        self.y -= 16

    def draw_table_row(self, cells, font=FONT, color=TEXT_COLOR, fill=None) -> None:
        top = self.y
        if fill:
            self.draw_rect(MARGIN, top - ROW_H, CONTENT_W, ROW_H, fill=fill)
        baseline = top - ROW_H / 2 - 3.5
        x = MARGIN
        for text, (_, fraction, right) in zip(cells, self.columns):
            width = CONTENT_W * fraction
            if right:
                self.draw_text(text, x + width - CELL_PAD, baseline, font, 10, color,
                               align="right", max_width=width - 2 * CELL_PAD)
            else:
                self.draw_text(text, x + CELL_PAD, baseline, font, 10, color,
                               max_width=width - 2 * CELL_PAD)
            x += width
        self.y -= ROW_H

    def draw_table_border(self, top: float) -> None:
        self.draw_rect(MARGIN, self.y, CONTENT_W, top - self.y, stroke=BORDER_COLOR, stroke_w=1)

    def draw_items_table(self) -> None:
        headers = [label for label, _, _ in self.columns]
        band = HexColor(BAND_COLOR)

        self.ensure_space(2 * ROW_H)
        table_top = self.y
        self.draw_table_row(headers, FONT_BOLD, white, fill=self.brand)

        for index, item in enumerate(self.record.items):
            if self.y - ROW_H < MARGIN:
                self.draw_table_border(table_top)
                self.new_page()
                table_top = self.y
                self.draw_table_row(headers, FONT_BOLD, white, fill=self.brand)
            self.draw_table_row(self._row_cells(item), fill=band if index % 2 == 0 else None)

        self.draw_table_border(table_top)
        self.y -= 20

    def _row_cells(self, item) -> list:
        cells = [item.name or "N/A", format_quantity(item.quantity)]
        if self.kind == "challan":
            cells.append(item.unit or "pcs")
        else:
            cells.append(format_currency(item.unit_price or 0.0))
            cells.append(format_currency(resolve_line_total(item)))
        return cells

    def draw_totals(self) -> None:
        totals = resolve_document_totals(self.record.items, self.record.subtotal, self.record.tax_rate)

        self.ensure_space(TOTALS_H + 10)
        x = W - MARGIN - TOTALS_W
        top = self.y
        label_x = x + 10
        value_x = x + TOTALS_W - 10
        self.draw_rect(x, top - TOTALS_H, TOTALS_W, TOTALS_H, fill=HexColor(BAND_COLOR))

        self.draw_text("Subtotal:", label_x, top - 18)
        self.draw_text(format_currency(totals.subtotal), value_x, top - 18, FONT_BOLD, align="right")
        self.draw_text(f"Tax ({format_tax_rate(totals.tax_rate)}):", label_x, top - 36)
        self.draw_text(format_currency(totals.tax_amount), value_x, top - 36, FONT_BOLD, align="right")
        self.draw_line(label_x, top - 46, value_x, top - 46)
        self.draw_text("Total:", label_x, top - 66, FONT_BOLD, 12, self.brand)
        self.draw_text(format_currency(totals.total), value_x, top - 66, FONT_BOLD, 13, self.brand, align="right")

        self.y = top - TOTALS_H - 25

    def draw_notes(self) -> None:
        lines = []
        for paragraph in clean_text(self.record.notes).split("\n"):
            lines.extend(simpleSplit(paragraph, FONT, 9, CONTENT_W) or [""])
        self.ensure_space(16 + 12)
        self.draw_text("Notes:", MARGIN, self.y - 10, FONT_BOLD, 10)
        self.y -= 16
        for line in lines:
            self.ensure_space(12)
            self.draw_text(line, MARGIN, self.y - 9, size=9)
            self.y -= 12
        self.y -= 10

    def draw_footer(self) -> None:
        if not self.options.include_footer:
            return
        self.draw_text(self.options.footer_line, W / 2, FOOTER_Y, size=8,
                       color=HexColor(MUTED_COLOR), align="center", max_width=CONTENT_W)

    # ─── DOCUMENT ───

    def build(self) -> bytes:
        title = document_title(self.kind)
        self.c.setTitle(clean_text(f"{title} {self.record.document_number}"))
        self.c.setSubject(clean_text(self.record.customer_name))
        if self.options.business_name:
            self.c.setAuthor(clean_text(self.options.business_name))

        if self.options.include_header:
            self.draw_header()
        self.draw_title_band(title)
        self.draw_metadata()
        if self.kind == "invoice" and self.record.is_paid:
            self.draw_paid_stamp()
        self.draw_customer()
        self.draw_items_table()
        if self.kind != "challan":
            self.draw_totals()
        if self.record.notes:
            self.draw_notes()

        self.draw_footer()
        self.c.showPage()
        self.c.save()
        return self.buffer.getvalue()


def _fit_text(text: str, font: str, size: float, max_width: float) -> str:
    """Truncate *text* with a trailing ellipsis so it fits *max_width*."""
    if stringWidth(text, font, size) <= max_width:
        return text
    ellipsis = "..."
    while text and stringWidth(text + ellipsis, font, size) > max_width:
        text = text[:-1]
    return text.rstrip() + ellipsis


def render_pdf(record: BusinessRecord, kind: DocumentKind, options: RenderOptions | None = None) -> bytes:
    """Render *record* as an A4 PDF and return the document bytes."""
    layout = _PdfLayout(record, kind, options or RenderOptions())
    content = layout.build()
    logger.debug(
        "Rendered %s %s as PDF (%d page(s), %d bytes)",
        kind, record.document_number, layout.page_num, len(content),
    )
    return content
