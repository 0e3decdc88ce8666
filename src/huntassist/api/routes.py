from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from pydantic import ValidationError

from huntassist.api.deps import (
    get_current_user,
    get_document_renderer,
    get_generating_journey_service,
    get_journey_service,
)
from huntassist.api.schemas import (
    ExportDocumentRequest,
    GenerationResponse,
    InsightsPreviewResponse,
    JourneyForm,
    JourneyResponse,
    JourneyStatsResponse,
    JourneyUpdateRequest,
)
from huntassist.config import get_settings
from huntassist.core.documents import DocumentRenderer
from huntassist.core.journeys import JourneyService
from huntassist.db.models import User
from huntassist.errors import InputValidationError, UploadTooLargeError
from huntassist.types import JourneyRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def _journey_response(record: JourneyRecord) -> JourneyResponse:
    return JourneyResponse.model_validate(record.model_dump())


def _document_response(filename: str, content: bytes, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _read_resume(resume: UploadFile) -> bytes:
    limit = get_settings().max_resume_bytes
    data = resume.file.read(limit + 1)
    if len(data) > limit:
        raise UploadTooLargeError(limit)
    if not data:
        raise InputValidationError("Resume file is required", field="resume")
    return data


def _validate_job_description(job_description: str) -> None:
    minimum = get_settings().min_job_description_length
    if len(job_description.strip()) < minimum:
        raise InputValidationError(
            f"Job description must be at least {minimum} characters",
            field="job_description",
        )


@router.get("/journeys", response_model=list[JourneyResponse])
def list_journeys(
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_journey_service),
) -> list[JourneyResponse]:
    return [_journey_response(record) for record in service.list_journeys(user.id)]


@router.post("/journeys", response_model=JourneyResponse, status_code=201)
def create_journey(
    company_name: str = Form(...),
    job_title: str = Form(...),
    job_description: str = Form(...),
    resume: UploadFile = File(...),
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_generating_journey_service),
) -> JourneyResponse:
    try:
        form = JourneyForm(company_name=company_name, job_title=job_title, job_description=job_description)
    except ValidationError as exc:
        raise InputValidationError(
            "Validation failed",
            details=exc.errors(include_url=False, include_context=False),
        ) from exc
    _validate_job_description(form.job_description)
    data = _read_resume(resume)

    record = service.create_journey(
        owner_id=user.id,
        company_name=form.company_name.strip(),
        job_title=form.job_title.strip(),
        job_description=form.job_description,
        resume_bytes=data,
        resume_mime_type=resume.content_type or "",
        resume_file_name=resume.filename or "resume",
    )
    return _journey_response(record)


@router.get("/journeys/stats", response_model=JourneyStatsResponse)
def journey_stats(
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_journey_service),
) -> JourneyStatsResponse:
    return JourneyStatsResponse.model_validate(service.journey_stats(user.id).model_dump())


@router.get("/journeys/{journey_id}", response_model=JourneyResponse)
def get_journey(
    journey_id: str,
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_journey_service),
) -> JourneyResponse:
    return _journey_response(service.get_journey(journey_id, user.id))


@router.patch("/journeys/{journey_id}", response_model=JourneyResponse)
def update_journey(
    journey_id: str,
    payload: JourneyUpdateRequest,
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_journey_service),
) -> JourneyResponse:
    record = service.update_journey(journey_id, payload.to_update(), requester_id=user.id)
    return _journey_response(record)


@router.delete("/journeys/{journey_id}", status_code=204)
def delete_journey(
    journey_id: str,
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_journey_service),
) -> Response:
    service.delete_journey(journey_id, requester_id=user.id)
    return Response(status_code=204)


@router.post("/journeys/{journey_id}/insights", response_model=GenerationResponse)
def generate_insights(
    journey_id: str,
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_generating_journey_service),
) -> GenerationResponse:
    service.generate_insights(journey_id, user.id)
    return GenerationResponse(journey_id=journey_id, message="Insights generated successfully")


@router.post("/journeys/{journey_id}/cover-letter", response_model=GenerationResponse)
def generate_cover_letter(
    journey_id: str,
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_generating_journey_service),
) -> GenerationResponse:
    service.generate_cover_letter(journey_id, user.id)
    return GenerationResponse(journey_id=journey_id, message="Cover letter generated successfully")


@router.get("/journeys/{journey_id}/cover-letter/document")
def download_cover_letter(
    journey_id: str,
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_journey_service),
) -> Response:
    filename, content = service.export_cover_letter(journey_id, user.id)
    return _document_response(filename, content, service.renderer.media_type)


@router.post("/export-document")
def export_document(
    payload: ExportDocumentRequest,
    user: User = Depends(get_current_user),
    renderer: DocumentRenderer = Depends(get_document_renderer),
) -> Response:
    content = renderer.render(payload.content)
    logger.info("Exported cover letter document user_id=%s bytes=%d", user.id, len(content))
    return _document_response(renderer.filename_for(payload.company_name), content, renderer.media_type)


@router.post("/generate-insights", response_model=InsightsPreviewResponse)
def preview_insights(
    job_description: str = Form(...),
    resume: UploadFile = File(...),
    user: User = Depends(get_current_user),
    service: JourneyService = Depends(get_generating_journey_service),
) -> InsightsPreviewResponse:
    _validate_job_description(job_description)
    insights = service.preview_insights(
        resume_bytes=_read_resume(resume),
        resume_mime_type=resume.content_type or "",
        job_description=job_description,
    )
    return InsightsPreviewResponse(insights=insights)
