"""
Document export adapters for generated output.

Design intent:
- Treat each format as an injected capability so session logic stays testable.
- Export nothing when there is no output.
"""

from .base import DocumentExporter, ExportedDocument, export_document
from .docx_export import DocxExporter, render_docx
from .pdf_export import PdfExporter, layout_pages, render_pdf, wrap_line


def default_exporters() -> dict[str, DocumentExporter]:
    return {"pdf": PdfExporter(), "docx": DocxExporter()}


__all__ = [
    "DocumentExporter",
    "ExportedDocument",
    "export_document",
    "default_exporters",
    "DocxExporter",
    "PdfExporter",
    "layout_pages",
    "render_docx",
    "render_pdf",
    "wrap_line",
]
