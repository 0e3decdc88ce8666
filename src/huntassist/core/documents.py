"""Render generated markdown cover letters as Word documents.

The markdown subset is flat: headings, paragraphs, single-level lists and
blank lines. Tokens are produced in one pass and each one maps to exactly one
document paragraph, so no recursive parsing is needed.
"""

from __future__ import annotations

import re
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from io import BytesIO
from typing import Literal, Union

from docx import Document
from docx.shared import Inches

from huntassist.core.resume_text import DOCX_MIME_TYPE

MAX_HEADING_LEVEL = 5
BULLET_GLYPH = "•"
LIST_INDENT = Inches(0.25)
CODE_FONT = "Courier New"
FIXED_TIMESTAMP = datetime(2000, 1, 1, tzinfo=timezone.utc)
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n(.*?)\n\s*```\s*$", re.DOTALL)
_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
_RULE_PATTERN = re.compile(r"^\s*([-*_])(?:\s*\1){2,}\s*$")
_BULLET_PATTERN = re.compile(r"^\s*[-*+]\s+(.*)$")
_ORDERED_PATTERN = re.compile(r"^\s*(\d{1,9})[.)]\s+(.*)$")
_INLINE_PATTERN = re.compile(r"\*\*(.+?)\*\*|\*(.+?)\*|`(.+?)`")

InlineStyle = Literal["plain", "bold", "italic", "code"]


@dataclass(slots=True)
class HeadingToken:
    depth: int
    text: str


@dataclass(slots=True)
class ParagraphToken:
    lines: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ListItemToken:
    text: str
    marker: str = BULLET_GLYPH


@dataclass(slots=True)
class BlankToken:
    pass


Token = Union[HeadingToken, ParagraphToken, ListItemToken, BlankToken]


@dataclass(slots=True, frozen=True)
class InlineSpan:
    text: str
    style: InlineStyle = "plain"


def strip_code_fence(markdown_text: str) -> str:
    """Unwrap output that a model returned inside a single ``` fence."""
    match = _FENCE_PATTERN.match(markdown_text)
    return match.group(1) if match else markdown_text


def tokenize_markdown(markdown_text: str) -> list[Token]:
    text = strip_code_fence(markdown_text.replace("\r\n", "\n").replace("\r", "\n")).strip("\n")
    tokens: list[Token] = []
    paragraph: ParagraphToken | None = None

    for raw_line in text.split("\n"):
        line = raw_line.rstrip()

        if not line.strip() or _RULE_PATTERN.match(line):
            paragraph = None
            if tokens and not isinstance(tokens[-1], BlankToken):
                tokens.append(BlankToken())
            continue

        heading = _HEADING_PATTERN.match(line)
        if heading:
            paragraph = None
            tokens.append(HeadingToken(depth=len(heading.group(1)), text=heading.group(2)))
            continue

        bullet = _BULLET_PATTERN.match(line)
        if bullet:
            paragraph = None
            tokens.append(ListItemToken(text=bullet.group(1).strip()))
            continue

        ordered = _ORDERED_PATTERN.match(line)
        if ordered:
            paragraph = None
            tokens.append(ListItemToken(text=ordered.group(2).strip(), marker=f"{ordered.group(1)}."))
            continue

        if paragraph is None:
            paragraph = ParagraphToken()
            tokens.append(paragraph)
        paragraph.lines.append(line.strip())

    while tokens and isinstance(tokens[-1], BlankToken):
        tokens.pop()
    return tokens


def split_inline(text: str) -> list[InlineSpan]:
    """Split text into plain, bold, italic and code spans, left to right."""
    spans: list[InlineSpan] = []
    position = 0
    for match in _INLINE_PATTERN.finditer(text):
        if match.start() > position:
            spans.append(InlineSpan(text[position:match.start()]))
        bold, italic, code = match.groups()
        if bold is not None:
            spans.append(InlineSpan(bold, "bold"))
        elif italic is not None:
            spans.append(InlineSpan(italic, "italic"))
        else:
            spans.append(InlineSpan(code, "code"))
        position = match.end()
    if position < len(text):
        spans.append(InlineSpan(text[position:]))
    return spans


def render_cover_letter_document(markdown_text: str) -> bytes:
    document = Document()
    document.core_properties.created = FIXED_TIMESTAMP
    document.core_properties.modified = FIXED_TIMESTAMP
    for token in tokenize_markdown(markdown_text):
        _render_token(document, token)

    buffer = BytesIO()
    document.save(buffer)
    return _repack_with_fixed_timestamps(buffer.getvalue())


def cover_letter_filename(company_name: str | None = None) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (company_name or "").lower()).strip("-")
    return f"cover-letter-{slug}.docx" if slug else "cover-letter.docx"


def _render_token(document, token: Token) -> None:
    if isinstance(token, HeadingToken):
        paragraph = document.add_heading(level=min(token.depth, MAX_HEADING_LEVEL))
        _add_runs(paragraph, token.text)
    elif isinstance(token, ParagraphToken):
        paragraph = document.add_paragraph()
        for index, line in enumerate(token.lines):
            if index:
                paragraph.add_run().add_break()
            _add_runs(paragraph, line)
    elif isinstance(token, ListItemToken):
        paragraph = document.add_paragraph()
        paragraph.paragraph_format.left_indent = LIST_INDENT
        paragraph.add_run(f"{token.marker} ")
        _add_runs(paragraph, token.text)
    elif isinstance(token, BlankToken):
        document.add_paragraph()
    else:
        raise TypeError(f"unsupported markdown token {token!r}")


def _add_runs(paragraph, text: str) -> None:
    for span in split_inline(text):
        run = paragraph.add_run(span.text)
        if span.style == "bold":
            run.bold = True
        elif span.style == "italic":
            run.italic = True
        elif span.style == "code":
            run.font.name = CODE_FONT


def _repack_with_fixed_timestamps(package: bytes) -> bytes:
    """Rewrite the docx zip so every entry carries the same timestamp."""
    source = zipfile.ZipFile(BytesIO(package))
    target_buffer = BytesIO()
    with source, zipfile.ZipFile(target_buffer, "w", zipfile.ZIP_DEFLATED) as target:
        for entry in source.infolist():
            info = zipfile.ZipInfo(entry.filename, date_time=ZIP_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = entry.external_attr
            target.writestr(info, source.read(entry.filename))
    return target_buffer.getvalue()


class DocumentRenderer:
    media_type = DOCX_MIME_TYPE

    def render(self, markdown_text: str) -> bytes:
        return render_cover_letter_document(markdown_text)

    def filename_for(self, company_name: str | None = None) -> str:
        return cover_letter_filename(company_name)
