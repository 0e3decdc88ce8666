from io import BytesIO

import pytest
from docx import Document

from huntassist.core.resume_text import (
    DOCX_MIME_TYPE,
    PDF_MIME_TYPE,
    ResumeTextExtractor,
    extract_text,
)
from huntassist.errors import ExtractionError, UnsupportedFormatError


def test_extracts_docx_paragraph_text(resume_docx: bytes) -> None:
    text = extract_text(resume_docx, DOCX_MIME_TYPE)

    assert "Jane Doe" in text
    assert "Built FastAPI services at Acme" in text


def test_extracts_docx_table_cells() -> None:
    document = Document()
    document.add_paragraph("Skills")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Python"
    table.rows[0].cells[1].text = "SQL"
    buffer = BytesIO()
    document.save(buffer)

    text = extract_text(buffer.getvalue(), DOCX_MIME_TYPE)
    assert "Skills" in text
    assert "Python | SQL" in text


def test_extracts_pdf_page_text(resume_pdf: bytes) -> None:
    text = extract_text(resume_pdf, PDF_MIME_TYPE)

    assert "Jane Doe" in text
    assert "Senior Python Engineer" in text


def test_mime_type_parameters_are_ignored(resume_pdf: bytes) -> None:
    text = ResumeTextExtractor().extract_text(resume_pdf, "application/pdf; charset=binary")
    assert "Jane Doe" in text


@pytest.mark.parametrize("mime_type", ["text/plain", "application/msword", "image/png", ""])
def test_unsupported_mime_type_is_rejected_before_parsing(mime_type: str) -> None:
    with pytest.raises(UnsupportedFormatError) as excinfo:
        extract_text(b"%PDF-1.4 not really parsed", mime_type)
    assert excinfo.value.mime_type == mime_type


def test_malformed_pdf_raises_extraction_error() -> None:
    with pytest.raises(ExtractionError) as excinfo:
        extract_text(b"this is not a pdf", PDF_MIME_TYPE)
    assert not isinstance(excinfo.value, UnsupportedFormatError)


def test_malformed_docx_raises_extraction_error() -> None:
    with pytest.raises(ExtractionError):
        extract_text(b"PK\x03\x04 broken zip", DOCX_MIME_TYPE)
