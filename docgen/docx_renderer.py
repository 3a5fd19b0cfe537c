"""
Word (.docx) rendering for quotations, invoices and delivery challans.

Mirrors the PDF layout section by section using flow constructs: paragraphs
stack top to bottom, the items table is a real Word table and the footer
lives in the section footer.  Rotation of the PAID stamp has no flow
equivalent and is dropped; colour, weight and size are kept.

python-docx stamps zip entries with the wall clock, so the package is
rewritten with fixed entry timestamps to keep output byte-for-byte stable.
"""
import io
import logging
import zipfile

from docx import Document
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Mm, Pt, RGBColor

from models import BusinessRecord, DocumentKind, RenderOptions
from .formatting import (
    BAND_COLOR, MUTED_COLOR, PAID_COLOR,
    clean_text, document_title, format_currency, format_date, format_quantity,
    format_tax_rate, normalize_hex_color, table_columns,
)
from .totals import resolve_document_totals, resolve_line_total

logger = logging.getLogger(__name__)

PAGE_MARGIN = Pt(50)
CONTENT_WIDTH = Mm(210) - 2 * PAGE_MARGIN
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

# Elements that must follow w:tblBorders inside w:tblPr
_TBL_BORDERS_SUCCESSORS = (
    "w:shd", "w:tblLayout", "w:tblCellMar", "w:tblLook",
    "w:tblCaption", "w:tblDescription", "w:tblPrChange",
)


def _word_color(hex_color: str) -> str:
    return hex_color.lstrip("#").upper()


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(_word_color(hex_color))


def _shading(fill: str):
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), _word_color(fill))
    return shd


def _shade_paragraph(paragraph, fill: str) -> None:
    paragraph._p.get_or_add_pPr().append(_shading(fill))


def _shade_cell(cell, fill: str) -> None:
    cell._tc.get_or_add_tcPr().append(_shading(fill))


def _bottom_rule(paragraph, color: str) -> None:
    """Draw a single bottom border under *paragraph* (the header separator)."""
    border = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "8")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), _word_color(color))
    border.append(bottom)
    paragraph._p.get_or_add_pPr().append(border)


def _grid_borders(table) -> None:
    """Single-line borders on every cell edge."""
    borders = OxmlElement("w:tblBorders")
    for edge in ("top", "left", "bottom", "right", "insideH", "insideV"):
        element = OxmlElement(f"w:{edge}")
        element.set(qn("w:val"), "single")
        element.set(qn("w:sz"), "4")
        element.set(qn("w:space"), "0")
        element.set(qn("w:color"), "000000")
        borders.append(element)
    table._tbl.tblPr.insert_element_before(borders, *_TBL_BORDERS_SUCCESSORS)


def _add_run(paragraph, text, bold=False, size=None, color=None):
    run = paragraph.add_run(clean_text(text))
    run.bold = bold
    if size:
        run.font.size = Pt(size)
    if color:
        run.font.color.rgb = _rgb(color)
    return run


def _spacing(paragraph, after=0, before=0, align=None) -> None:
    fmt = paragraph.paragraph_format
    fmt.space_after = Pt(after)
    fmt.space_before = Pt(before)
    if align is not None:
        paragraph.alignment = align


class _DocxLayout:
    """Single-use python-docx builder for one render call."""

    def __init__(self, record: BusinessRecord, kind: DocumentKind, options: RenderOptions):
        self.record = record
        self.kind = kind
        self.options = options
        self.brand = normalize_hex_color(options.primary_color)
        self.columns = table_columns(kind)
        self.doc = Document()
        self._setup_page()

    def _setup_page(self) -> None:
        section = self.doc.sections[0]
        section.page_width = Mm(210)
        section.page_height = Mm(297)
        section.left_margin = section.right_margin = PAGE_MARGIN
        section.top_margin = section.bottom_margin = PAGE_MARGIN

    def paragraph(self, text=None, bold=False, size=None, color=None, after=4, align=None):
        p = self.doc.add_paragraph()
        if text:
            _add_run(p, text, bold=bold, size=size, color=color)
        _spacing(p, after=after, align=align)
        return p

    # ─── SECTIONS ───

    def add_header(self) -> None:
        opts = self.options
        if opts.business_name:
            self.paragraph(opts.business_name, bold=True, size=16, color=self.brand, after=6)
        if opts.business_address:
            self.paragraph(opts.business_address, size=10, after=2)
        if opts.contact_line:
            self.paragraph(opts.contact_line, size=9, color=MUTED_COLOR, after=2)
        separator = self.doc.add_paragraph()
        _bottom_rule(separator, self.brand)
        _spacing(separator, after=14)

    def add_title(self, title: str) -> None:
        p = self.doc.add_paragraph()
        _shade_paragraph(p, BAND_COLOR)
        _add_run(p, title, bold=True, size=18, color=self.brand)
        _spacing(p, after=14, before=4, align=WD_ALIGN_PARAGRAPH.CENTER)

    def add_metadata(self) -> None:
        number = self.paragraph(after=2)
        _add_run(number, "Document Number: ", bold=True)
        _add_run(number, self.record.document_number)
        date = self.paragraph(after=14, align=WD_ALIGN_PARAGRAPH.RIGHT)
        _add_run(date, "Date: ", bold=True)
        _add_run(date, format_date(self.record.created_at))

    def add_paid_stamp(self) -> None:
        self.paragraph("PAID", bold=True, size=28, color=PAID_COLOR, after=10,
                       align=WD_ALIGN_PARAGRAPH.RIGHT)

    def add_customer(self) -> None:
        record = self.record
        self.paragraph("Bill To:", bold=True, size=11, after=4)
        lines = [record.customer_name, record.customer_address]
        if self.kind == "challan":
            if record.delivery_address:
                lines.append(f"Deliver To: {record.delivery_address}")
        else:
            lines.append(record.customer_email)
        for line in lines:
            if line:
                self.paragraph(line, after=2)
        self.paragraph(after=6)

    def add_items_table(self) -> None:
        widths = [int(CONTENT_WIDTH * fraction) for _, fraction, _ in self.columns]
        table = self.doc.add_table(rows=1, cols=len(self.columns))
        table.autofit = False
        _grid_borders(table)

        header = table.rows[0].cells
        for cell, width, (label, _, right) in zip(header, widths, self.columns):
            self._fill_cell(cell, width, label, right, bold=True, color="#ffffff", fill=self.brand)

        for index, item in enumerate(self.record.items):
            fill = BAND_COLOR if index % 2 == 0 else None
            cells = table.add_row().cells
            for cell, width, text, (_, _, right) in zip(cells, widths, self._row_cells(item), self.columns):
                self._fill_cell(cell, width, text, right, fill=fill)

        self.paragraph(after=6)

    def _fill_cell(self, cell, width, text, right, bold=False, color=None, fill=None) -> None:
        cell.width = width
        if fill:
            _shade_cell(cell, fill)
        cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
        p = cell.paragraphs[0]
        _add_run(p, text, bold=bold, color=color)
        if right:
            p.alignment = WD_ALIGN_PARAGRAPH.RIGHT

    def _row_cells(self, item) -> list:
        cells = [item.name or "N/A", format_quantity(item.quantity)]
        if self.kind == "challan":
            cells.append(item.unit or "pcs")
        else:
            cells.append(format_currency(item.unit_price or 0.0))
            cells.append(format_currency(resolve_line_total(item)))
        return cells

    def add_totals(self) -> None:
        totals = resolve_document_totals(self.record.items, self.record.subtotal, self.record.tax_rate)
        right = WD_ALIGN_PARAGRAPH.RIGHT

        subtotal = self.paragraph(after=4, align=right)
        _add_run(subtotal, "Subtotal: ")
        _add_run(subtotal, format_currency(totals.subtotal), bold=True)

        tax = self.paragraph(after=4, align=right)
        _add_run(tax, f"Tax ({format_tax_rate(totals.tax_rate)}): ")
        _add_run(tax, format_currency(totals.tax_amount), bold=True)

        total = self.paragraph(after=14, align=right)
        _add_run(total, "Total: ", bold=True, size=12, color=self.brand)
        _add_run(total, format_currency(totals.total), bold=True, size=13, color=self.brand)

    def add_notes(self) -> None:
        self.paragraph("Notes:", bold=True, size=10, after=4)
        self.paragraph(self.record.notes, size=9, after=10)

    def add_footer(self) -> None:
        footer = self.doc.sections[0].footer
        p = footer.paragraphs[0] if footer.paragraphs else footer.add_paragraph()
        _add_run(p, self.options.footer_line, size=8, color=MUTED_COLOR)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def set_properties(self, title: str) -> None:
        props = self.doc.core_properties
        props.title = clean_text(f"{title} {self.record.document_number}")
        props.subject = clean_text(self.record.customer_name)
        props.author = clean_text(self.options.business_name)
        props.last_modified_by = clean_text(self.options.business_name)
        props.revision = 1
        props.created = self.record.created_at
        props.modified = self.record.created_at

    # ─── DOCUMENT ───

    def build(self) -> bytes:
        title = document_title(self.kind)
        self.set_properties(title)

        if self.options.include_header:
            self.add_header()
        self.add_title(title)
        self.add_metadata()
        if self.kind == "invoice" and self.record.is_paid:
            self.add_paid_stamp()
        self.add_customer()
        self.add_items_table()
        if self.kind != "challan":
            self.add_totals()
        if self.record.notes:
            self.add_notes()
        if self.options.include_footer:
            self.add_footer()

        buf = io.BytesIO()
        self.doc.save(buf)
        return _freeze_package(buf.getvalue())


def _freeze_package(raw: bytes) -> bytes:
    """Rewrite the OPC zip with fixed entry timestamps, preserving entry order."""
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(raw)) as src, \
            zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as dst:
        for info in src.infolist():
            frozen = zipfile.ZipInfo(info.filename, date_time=ZIP_EPOCH)
            frozen.compress_type = zipfile.ZIP_DEFLATED
            frozen.external_attr = info.external_attr
            dst.writestr(frozen, src.read(info.filename))
    return out.getvalue()


def render_docx(record: BusinessRecord, kind: DocumentKind, options: RenderOptions | None = None) -> bytes:
    """Render *record* as a Word document and return the .docx bytes."""
    content = _DocxLayout(record, kind, options or RenderOptions()).build()
    logger.debug("Rendered %s %s as DOCX (%d bytes)", kind, record.document_number, len(content))
    return content
