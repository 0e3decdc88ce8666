from __future__ import annotations

import logging
from io import BytesIO

from docx import Document
from pypdf import PdfReader

from huntassist.errors import ExtractionError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
SUPPORTED_MIME_TYPES = frozenset({PDF_MIME_TYPE, DOCX_MIME_TYPE})


def extract_text(file_bytes: bytes, mime_type: str) -> str:
    """Return the plain text of a PDF or DOCX résumé held in memory."""
    normalized = (mime_type or "").split(";", 1)[0].strip().lower()
    if normalized not in SUPPORTED_MIME_TYPES:
        raise UnsupportedFormatError(mime_type)

    if normalized == PDF_MIME_TYPE:
        return _extract_pdf_text(file_bytes)
    return _extract_docx_text(file_bytes)


def _extract_pdf_text(file_bytes: bytes) -> str:
    try:
        reader = PdfReader(BytesIO(file_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as exc:
        logger.warning("Failed to parse PDF resume: %s", exc)
        raise ExtractionError("Could not read the PDF document", mime_type=PDF_MIME_TYPE) from exc
    return "\n".join(pages).strip()


def _extract_docx_text(file_bytes: bytes) -> str:
    try:
        document = Document(BytesIO(file_bytes))
    except Exception as exc:
        logger.warning("Failed to parse DOCX resume: %s", exc)
        raise ExtractionError("Could not read the DOCX document", mime_type=DOCX_MIME_TYPE) from exc

    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    return "\n".join(lines).strip()


class ResumeTextExtractor:
    """Injectable wrapper around :func:`extract_text`."""

    supported_mime_types = SUPPORTED_MIME_TYPES

    def extract_text(self, file_bytes: bytes, mime_type: str) -> str:
        return extract_text(file_bytes, mime_type)
