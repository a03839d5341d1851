from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class ExportedDocument:
    filename: str
    media_type: str
    content: bytes


class DocumentExporter(Protocol):
    name: str
    filename: str
    media_type: str

    def render(self, text: str) -> Optional[bytes]: ...


def export_document(exporter: DocumentExporter, text: str) -> Optional[ExportedDocument]:
    """Render ``text`` with ``exporter``; empty text exports nothing."""
    if not text or not text.strip():
        return None
    content = exporter.render(text)
    if content is None:
        return None
    return ExportedDocument(filename=exporter.filename, media_type=exporter.media_type, content=content)
