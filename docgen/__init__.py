"""
Document generation engine: normalization, PDF and DOCX renderers, dispatch.

Renderers live in their own modules (docgen.pdf_renderer,
docgen.docx_renderer) and are reached through docgen.dispatch.  Only the
normalization layer is re-exported here; models imports it directly.
"""
from .totals import (
    DEFAULT_TAX_RATE,
    ResolvedTotals,
    to_number,
    to_optional_number,
    resolve_line_total,
    resolve_document_totals,
)

__all__ = [
    "DEFAULT_TAX_RATE", "ResolvedTotals",
    "to_number", "to_optional_number",
    "resolve_line_total", "resolve_document_totals",
]
