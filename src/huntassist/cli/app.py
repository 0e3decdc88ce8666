from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn

from huntassist.api.app import create_app
from huntassist.config import get_settings
from huntassist.core.auth import AuthService
from huntassist.core.documents import render_cover_letter_document
from huntassist.core.journeys import JourneyService
from huntassist.core.resume_text import DOCX_MIME_TYPE, PDF_MIME_TYPE, ResumeTextExtractor
from huntassist.db.init import init_database
from huntassist.db.repositories import AccountRepository, JourneyRepository
from huntassist.db.session import SessionLocal
from huntassist.errors import HuntAssistError
from huntassist.llm.generator import build_content_generator
from huntassist.logging_config import configure_logging
from huntassist.types import JourneyRecord

app = typer.Typer(help="Hunt Assistant CLI")
user_app = typer.Typer(help="Manage user accounts")
journey_app = typer.Typer(help="Track job application journeys")
document_app = typer.Typer(help="Render documents")

app.add_typer(user_app, name="user")
app.add_typer(journey_app, name="journey")
app.add_typer(document_app, name="document")

_INITIALIZED = False

MIME_TYPES_BY_SUFFIX = {
    ".pdf": PDF_MIME_TYPE,
    ".docx": DOCX_MIME_TYPE,
}


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _fail(exc: HuntAssistError) -> None:
    typer.echo(json.dumps({"ok": False, "error": exc.message}, indent=2), err=True)
    raise typer.Exit(code=1)


def _owner_id(db, email: str) -> str:
    user = AccountRepository(db).get_user_by_email(email)
    if user is None:
        raise typer.BadParameter(f"user {email} not found")
    return user.id


def _journey_service(db) -> JourneyService:
    return JourneyService(
        JourneyRepository(db),
        extractor=ResumeTextExtractor(),
        generator=build_content_generator(),
    )


def _summary(record: JourneyRecord) -> dict:
    return {
        "id": record.id,
        "company_name": record.company_name,
        "job_title": record.job_title,
        "status": record.status,
        "has_insights": bool(record.insights),
        "has_cover_letter": bool(record.cover_letter),
        "created_at": record.created_at.isoformat(),
    }


@app.command("init")
def init_cmd() -> None:
    """Initialize the database and data directory."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@user_app.command("create")
def user_create(
    email: str = typer.Option(..., "--email"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
    name: str = typer.Option("", "--name"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            user = AuthService(AccountRepository(db)).sign_up(email=email, password=password, name=name)
        except HuntAssistError as exc:
            _fail(exc)
        typer.echo(json.dumps({"id": user.id, "email": user.email}, indent=2))


@journey_app.command("list")
def journey_list(email: str = typer.Option(..., "--email")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        owner_id = _owner_id(db, email)
        rows = JourneyRepository(db).find_by_owner(owner_id)
        typer.echo(json.dumps([_summary(JourneyRecord.model_validate(row)) for row in rows], indent=2))


@journey_app.command("show")
def journey_show(
    journey_id: str = typer.Option(..., "--journey-id"),
    email: str = typer.Option(..., "--email"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        owner_id = _owner_id(db, email)
        journey = JourneyRepository(db).find_by_id(journey_id)
        if journey is None or journey.user_id != owner_id:
            raise typer.BadParameter(f"journey {journey_id} not found")
        record = JourneyRecord.model_validate(journey)
        typer.echo(record.model_dump_json(indent=2, exclude={"resume_text"}))


@journey_app.command("create")
def journey_create(
    email: str = typer.Option(..., "--email"),
    company_name: str = typer.Option(..., "--company"),
    job_title: str = typer.Option(..., "--title"),
    job_description_file: Path = typer.Option(..., "--job-description", exists=True, readable=True),
    resume: Path = typer.Option(..., "--resume", exists=True, readable=True),
) -> None:
    configure_logging()
    ensure_initialized()
    mime_type = MIME_TYPES_BY_SUFFIX.get(resume.suffix.lower(), "application/octet-stream")
    with SessionLocal() as db:
        owner_id = _owner_id(db, email)
        try:
            record = _journey_service(db).create_journey(
                owner_id=owner_id,
                company_name=company_name,
                job_title=job_title,
                job_description=job_description_file.read_text(encoding="utf-8"),
                resume_bytes=resume.read_bytes(),
                resume_mime_type=mime_type,
                resume_file_name=resume.name,
            )
        except HuntAssistError as exc:
            _fail(exc)
        typer.echo(json.dumps(_summary(record), indent=2))


@journey_app.command("insights")
def journey_insights(
    journey_id: str = typer.Option(..., "--journey-id"),
    email: str = typer.Option(..., "--email"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        owner_id = _owner_id(db, email)
        try:
            record = _journey_service(db).generate_insights(journey_id, owner_id)
        except HuntAssistError as exc:
            _fail(exc)
        typer.echo(record.insights or "")


@journey_app.command("cover-letter")
def journey_cover_letter(
    journey_id: str = typer.Option(..., "--journey-id"),
    email: str = typer.Option(..., "--email"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        owner_id = _owner_id(db, email)
        try:
            record = _journey_service(db).generate_cover_letter(journey_id, owner_id)
        except HuntAssistError as exc:
            _fail(exc)
        typer.echo(record.cover_letter or "")


@journey_app.command("export")
def journey_export(
    journey_id: str = typer.Option(..., "--journey-id"),
    email: str = typer.Option(..., "--email"),
    out_dir: Path = typer.Option(Path("."), "--out-dir", file_okay=False),
) -> None:
    """Write the journey's cover letter as a .docx file."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        owner_id = _owner_id(db, email)
        try:
            filename, content = _journey_service(db).export_cover_letter(journey_id, owner_id)
        except HuntAssistError as exc:
            _fail(exc)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / filename
    target.write_bytes(content)
    typer.echo(json.dumps({"ok": True, "path": str(target)}, indent=2))


@document_app.command("render")
def document_render(
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
    out: Path = typer.Option(..., "--out"),
) -> None:
    configure_logging()
    content = render_cover_letter_document(file.read_text(encoding="utf-8"))
    out.write_bytes(content)
    typer.echo(json.dumps({"ok": True, "path": str(out), "bytes": len(content)}, indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
