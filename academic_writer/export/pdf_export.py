from __future__ import annotations

"""
Paginated PDF export of plain-text output.

Lines are word-wrapped by measured string width against the printable width
and flowed onto fixed-margin A4 pages; a new page starts when the next line
would cross the bottom margin.
"""

import io
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

PDF_FILENAME = "academic-paper.pdf"
PDF_MEDIA_TYPE = "application/pdf"

PAGE_SIZE = A4
MARGIN = 15 * mm
FONT_NAME = "Helvetica"
FONT_SIZE = 11
LINE_HEIGHT = FONT_SIZE * 1.4


def _fit_prefix(word: str, *, font_name: str, font_size: float, max_width: float) -> int:
    cut = len(word)
    while cut > 1 and stringWidth(word[:cut], font_name, font_size) > max_width:
        cut -= 1
    return cut


def wrap_line(line: str, *, font_name: str = FONT_NAME, font_size: float = FONT_SIZE, max_width: float) -> list[str]:
    if not line.strip():
        return [""]
    stripped = line.lstrip()
    # Leading indentation carries list nesting; it is kept on the first segment only.
    indent = line[: len(line) - len(stripped)]
    if stringWidth(indent, font_name, font_size) > max_width / 2:
        indent = ""
    wrapped: list[str] = []
    current = ""
    for word in stripped.split():
        candidate = f"{current} {word}" if current else indent + word
        if stringWidth(candidate, font_name, font_size) <= max_width:
            current = candidate
            continue
        if current:
            wrapped.append(current)
            candidate = word
        indent = ""
        while stringWidth(candidate, font_name, font_size) > max_width:
            cut = _fit_prefix(candidate, font_name=font_name, font_size=font_size, max_width=max_width)
            wrapped.append(candidate[:cut])
            candidate = candidate[cut:]
        current = candidate
    if current:
        wrapped.append(current)
    return wrapped


def layout_pages(
    text: str,
    *,
    page_size: tuple[float, float] = PAGE_SIZE,
    margin: float = MARGIN,
    font_name: str = FONT_NAME,
    font_size: float = FONT_SIZE,
    line_height: float = LINE_HEIGHT,
) -> list[list[str]]:
    page_width, page_height = page_size
    max_width = page_width - 2 * margin
    top = page_height - margin - font_size

    pages: list[list[str]] = []
    current: list[str] = []
    y = top
    normalized = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", "    ")
    for source_line in normalized.split("\n"):
        for line in wrap_line(source_line, font_name=font_name, font_size=font_size, max_width=max_width):
            if y < margin:
                pages.append(current)
                current = []
                y = top
            current.append(line)
            y -= line_height
    if current:
        pages.append(current)
    return pages


def render_pdf(text: str) -> Optional[bytes]:
    if not text or not text.strip():
        return None
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
    pdf.setTitle("Academic Paper")
    top = PAGE_SIZE[1] - MARGIN - FONT_SIZE
    for page in layout_pages(text):
        pdf.setFont(FONT_NAME, FONT_SIZE)
        y = top
        for line in page:
            if line:
                pdf.drawString(MARGIN, y, line)
            y -= LINE_HEIGHT
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


class PdfExporter:
    name = "pdf"
    filename = PDF_FILENAME
    media_type = PDF_MEDIA_TYPE

    def render(self, text: str) -> Optional[bytes]:
        return render_pdf(text)
