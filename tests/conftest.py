from __future__ import annotations

import os
import tempfile
from io import BytesIO
from pathlib import Path

_TEST_DB = Path(tempfile.gettempdir()) / f"huntassist-test-{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"
os.environ["APP_ENV"] = "test"
os.environ["AI_PROVIDER"] = "primary"
os.environ["OPENAI_API_KEY"] = ""
os.environ["GROQ_API_KEY"] = ""

import pytest  # noqa: E402
from docx import Document  # noqa: E402

from huntassist.db.base import Base  # noqa: E402
from huntassist.db.session import engine  # noqa: E402
from huntassist.db import models  # noqa: E402,F401
from huntassist.errors import GenerationError  # noqa: E402

JOB_DESCRIPTION = (
    "We are hiring a Senior Python Engineer to build FastAPI services, "
    "own PostgreSQL schemas and mentor a small backend team."
)
RESUME_LINES = ["Jane Doe", "Senior Python Engineer", "Built FastAPI services at Acme"]


class FakeGenerator:
    def __init__(
        self,
        insights: str = "You are a **strong** fit for this role.",
        cover_letter: str = "Dear Hiring Manager,\n\nI would love to join *Acme*.",
        fail_on: str | None = None,
    ):
        self.insights = insights
        self.cover_letter = cover_letter
        self.fail_on = fail_on
        self.calls: list[tuple[str, str, str]] = []

    def generate_insights(self, resume_text: str, job_description: str) -> str:
        self.calls.append(("insights", resume_text, job_description))
        if self.fail_on == "insights":
            raise GenerationError("insights", provider="fake")
        return self.insights

    def generate_cover_letter(self, resume_text: str, job_description: str) -> str:
        self.calls.append(("cover_letter", resume_text, job_description))
        if self.fail_on == "cover_letter":
            raise GenerationError("cover_letter", provider="fake")
        return self.cover_letter


def build_docx(lines: list[str]) -> bytes:
    document = Document()
    for line in lines:
        document.add_paragraph(line)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def build_pdf(lines: list[str]) -> bytes:
    """Assemble a one-page PDF with Helvetica text, computing xref offsets by hand."""
    operations = ["BT", "/F1 12 Tf", "72 720 Td"]
    for index, line in enumerate(lines):
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        if index:
            operations.append("0 -16 Td")
        operations.append(f"({escaped}) Tj")
    operations.append("ET")
    stream = "\n".join(operations).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        (
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>"
        ),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
    return bytes(out)


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def resume_docx() -> bytes:
    return build_docx(RESUME_LINES)


@pytest.fixture
def resume_pdf() -> bytes:
    return build_pdf(RESUME_LINES)


@pytest.fixture
def job_description() -> str:
    return JOB_DESCRIPTION


@pytest.fixture
def make_docx():
    return build_docx


@pytest.fixture
def make_pdf():
    return build_pdf
