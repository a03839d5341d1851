from __future__ import annotations

import io
from typing import Optional

from docx import Document

DOCX_FILENAME = "academic-paper.docx"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def render_docx(text: str) -> Optional[bytes]:
    """One paragraph per newline-delimited line of ``text``."""
    if not text or not text.strip():
        return None
    document = Document()
    for line in text.replace("\r\n", "\n").split("\n"):
        document.add_paragraph(line)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class DocxExporter:
    name = "docx"
    filename = DOCX_FILENAME
    media_type = DOCX_MEDIA_TYPE

    def render(self, text: str) -> Optional[bytes]:
        return render_docx(text)
