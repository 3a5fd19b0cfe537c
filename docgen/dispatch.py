"""
Single entry point for document generation.

Selects a renderer from two independent axes, record kind
(quotation / invoice / challan) and output format (pdf / word), and returns
the bytes together with the MIME type and a suggested download filename.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from models import RECORD_TYPES, BusinessRecord, DocumentKind, OutputFormat, RenderOptions
from .docx_renderer import render_docx
from .formatting import document_filename
from .pdf_renderer import render_pdf

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# format -> (renderer, media type, file extension)
RENDERERS = {
    "pdf":  (render_pdf, PDF_MIME, "pdf"),
    "word": (render_docx, DOCX_MIME, "docx"),
}
DOCUMENT_KINDS = tuple(RECORD_TYPES)
OUTPUT_FORMATS = tuple(RENDERERS)


class DocumentGenerationError(RuntimeError):
    """A renderer failed while building or serialising a document."""


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    media_type: str
    filename: str


def render_document(
    record: BusinessRecord,
    kind: DocumentKind,
    fmt: OutputFormat = "pdf",
    options: Optional[RenderOptions] = None,
) -> RenderedDocument:
    """
    Render *record* as *kind* in *fmt*.

    Raises ValueError for an unknown kind or format and TypeError when the
    record is not the model for *kind*.  Any failure inside the renderer is
    re-raised as DocumentGenerationError with the original as its cause.
    """
    if kind not in RECORD_TYPES:
        raise ValueError(f"Unknown document kind: {kind!r} (expected one of {DOCUMENT_KINDS})")
    if fmt not in RENDERERS:
        raise ValueError(f"Unknown output format: {fmt!r} (expected one of {OUTPUT_FORMATS})")
    if not isinstance(record, RECORD_TYPES[kind]):
        raise TypeError(f"Cannot render {type(record).__name__} as {kind}")

    renderer, media_type, extension = RENDERERS[fmt]
    try:
        content = renderer(record, kind, options or RenderOptions())
    except Exception as exc:
        raise DocumentGenerationError(
            f"Failed to generate {fmt} for {kind} {record.document_number}: {exc}"
        ) from exc

    return RenderedDocument(
        content=content,
        media_type=media_type,
        filename=document_filename(kind, record.document_number, extension),
    )
