import zipfile
from io import BytesIO

from docx import Document

from huntassist.core.documents import (
    BULLET_GLYPH,
    CODE_FONT,
    ZIP_TIMESTAMP,
    BlankToken,
    HeadingToken,
    ListItemToken,
    ParagraphToken,
    cover_letter_filename,
    render_cover_letter_document,
    split_inline,
    tokenize_markdown,
)


def _load(markdown_text: str):
    return Document(BytesIO(render_cover_letter_document(markdown_text)))


def _non_empty(document) -> list:
    return [paragraph for paragraph in document.paragraphs if paragraph.text.strip()]


def test_heading_paragraph_and_bullets_render_in_order() -> None:
    markdown_text = "# Title\n\nSome **bold** and *italic* text.\n\n- item one\n- item two"
    paragraphs = _non_empty(_load(markdown_text))

    assert len(paragraphs) == 4

    heading = paragraphs[0]
    assert heading.style.name == "Heading 1"
    assert heading.text == "Title"

    body = paragraphs[1]
    runs = [(run.text, bool(run.bold), bool(run.italic)) for run in body.runs]
    assert ("bold", True, False) in runs
    assert ("italic", False, True) in runs
    assert ("Some ", False, False) in runs
    assert body.text == "Some bold and italic text."

    assert paragraphs[2].text == f"{BULLET_GLYPH} item one"
    assert paragraphs[3].text == f"{BULLET_GLYPH} item two"
    assert paragraphs[2].paragraph_format.left_indent is not None


def test_blank_lines_become_empty_paragraphs() -> None:
    document = _load("First paragraph.\n\nSecond paragraph.")
    texts = [paragraph.text for paragraph in document.paragraphs]
    assert texts == ["First paragraph.", "", "Second paragraph."]


def test_heading_depth_beyond_five_collapses() -> None:
    document = _load("###### Deep heading")
    assert document.paragraphs[0].style.name == "Heading 5"


def test_inline_code_uses_monospace_font() -> None:
    paragraph = _non_empty(_load("Use `pytest -q` to run tests."))[0]
    code_runs = [run for run in paragraph.runs if run.text == "pytest -q"]
    assert code_runs
    assert code_runs[0].font.name == CODE_FONT


def test_ordered_items_keep_their_numbers() -> None:
    paragraphs = _non_empty(_load("1. First\n2. Second"))
    assert [paragraph.text for paragraph in paragraphs] == ["1. First", "2. Second"]


def test_letter_lines_stay_in_one_paragraph_with_breaks() -> None:
    paragraphs = _non_empty(_load("Sincerely,\nJane Doe"))
    assert len(paragraphs) == 1
    assert "Sincerely," in paragraphs[0].text
    assert "Jane Doe" in paragraphs[0].text


def test_tokenizer_is_flat_and_collapses_blank_runs() -> None:
    tokens = tokenize_markdown("## Intro\n\n\n\nHello\nthere\n\n* bullet\n---\nEnd\n\n")
    assert tokens == [
        HeadingToken(depth=2, text="Intro"),
        BlankToken(),
        ParagraphToken(lines=["Hello", "there"]),
        BlankToken(),
        ListItemToken(text="bullet"),
        BlankToken(),
        ParagraphToken(lines=["End"]),
    ]


def test_fenced_model_output_is_unwrapped() -> None:
    tokens = tokenize_markdown("```markdown\nDear Hiring Manager,\n```")
    assert tokens == [ParagraphToken(lines=["Dear Hiring Manager,"])]


def test_split_inline_is_single_pass_and_leaves_unmatched_markers() -> None:
    spans = split_inline("a **b** c *d* `e` **open")
    assert [(span.text, span.style) for span in spans] == [
        ("a ", "plain"),
        ("b", "bold"),
        (" c ", "plain"),
        ("d", "italic"),
        (" ", "plain"),
        ("e", "code"),
        (" **open", "plain"),
    ]


def test_round_trip_recovers_all_plain_words() -> None:
    letter = (
        "Dear Hiring Manager,\n\n"
        "I am excited to apply for the **Senior Python Engineer** role at *Acme*.\n\n"
        "## Highlights\n"
        "- Built `FastAPI` services\n"
        "- Mentored engineers\n\n"
        "Sincerely,\nJane Doe"
    )
    document = _load(letter)
    rendered_words = set(" ".join(paragraph.text for paragraph in document.paragraphs).split())

    plain = letter.replace("**", "").replace("*", "").replace("`", "").replace("#", "").replace("- ", "")
    for word in plain.split():
        assert word in rendered_words


def test_rendering_is_deterministic_in_content() -> None:
    markdown_text = "# Title\n\nBody with **bold**.\n\n- a\n- b"
    first = _load(markdown_text)
    second = _load(markdown_text)

    def shape(document):
        return [
            (paragraph.style.name, [(run.text, run.bold, run.italic, run.font.name) for run in paragraph.runs])
            for paragraph in document.paragraphs
        ]

    assert shape(first) == shape(second)


def test_cover_letter_filename_slugifies_company() -> None:
    assert cover_letter_filename("Acme & Sons, Inc.") == "cover-letter-acme-sons-inc.docx"
    assert cover_letter_filename("") == "cover-letter.docx"
    assert cover_letter_filename(None) == "cover-letter.docx"


def test_rendering_is_byte_identical_with_fixed_zip_timestamps() -> None:
    markdown_text = "# Hi\n\nBody"
    first = render_cover_letter_document(markdown_text)
    second = render_cover_letter_document(markdown_text)

    assert first == second
    with zipfile.ZipFile(BytesIO(first)) as package:
        assert {info.date_time for info in package.infolist()} == {ZIP_TIMESTAMP}
        assert "word/document.xml" in package.namelist()
