from __future__ import annotations

import logging
from typing import Any, Protocol

from huntassist.core.documents import DocumentRenderer
from huntassist.db.models import Journey
from huntassist.db.repositories import JourneyRepository
from huntassist.errors import (
    AccessDeniedError,
    ConfigurationError,
    ExtractionError,
    InputValidationError,
    NotFoundError,
)
from huntassist.llm.generator import ContentGenerator
from huntassist.types import JourneyRecord, JourneyStats

logger = logging.getLogger(__name__)

CREATED_STATUS = "in-progress"


class TextExtractor(Protocol):
    def extract_text(self, file_bytes: bytes, mime_type: str) -> str: ...


class JourneyService:
    """Creates journeys and (re)generates their AI content.

    Collaborators are passed in explicitly so tests can swap any of them for
    fakes. Reads, updates and deletes work without a generator; the generating
    operations raise ConfigurationError when none is set. Nothing is retried:
    extraction and generation errors propagate to the caller unchanged, and no
    record is written when either fails.
    """

    def __init__(
        self,
        repository: JourneyRepository,
        *,
        extractor: TextExtractor,
        generator: ContentGenerator | None = None,
        renderer: DocumentRenderer | None = None,
    ):
        self.repo = repository
        self.extractor = extractor
        self.generator = generator
        self.renderer = renderer or DocumentRenderer()

    def create_journey(
        self,
        *,
        owner_id: str,
        company_name: str,
        job_title: str,
        job_description: str,
        resume_bytes: bytes,
        resume_mime_type: str,
        resume_file_name: str,
    ) -> JourneyRecord:
        _require_text("owner_id", owner_id)
        _require_text("company_name", company_name)
        _require_text("job_title", job_title)
        _require_text("job_description", job_description)
        _require_text("resume_file_name", resume_file_name)

        resume_text = self._extract_resume_text(resume_bytes, resume_mime_type)
        insights = self._require_generator().generate_insights(resume_text, job_description)

        # Insight generation succeeded, so the journey starts in progress rather than draft.
        journey = self.repo.create(
            user_id=owner_id,
            company_name=company_name,
            job_title=job_title,
            job_description=job_description,
            resume_file_name=resume_file_name,
            resume_text=resume_text,
            insights=insights,
            cover_letter=None,
            status=CREATED_STATUS,
        )
        logger.info("Created journey journey_id=%s owner=%s", journey.id, owner_id)
        return JourneyRecord.model_validate(journey)

    def preview_insights(self, *, resume_bytes: bytes, resume_mime_type: str, job_description: str) -> str:
        _require_text("job_description", job_description)
        resume_text = self._extract_resume_text(resume_bytes, resume_mime_type)
        return self._require_generator().generate_insights(resume_text, job_description)

    def get_journey(self, journey_id: str, requester_id: str) -> JourneyRecord:
        return JourneyRecord.model_validate(self._load_owned(journey_id, requester_id))

    def list_journeys(self, owner_id: str) -> list[JourneyRecord]:
        return [JourneyRecord.model_validate(row) for row in self.repo.find_by_owner(owner_id)]

    def journey_stats(self, owner_id: str) -> JourneyStats:
        stats = JourneyStats()
        for journey in self.repo.find_by_owner(owner_id):
            stats.total += 1
            stats.by_status[journey.status] = stats.by_status.get(journey.status, 0) + 1
            if journey.insights:
                stats.with_insights += 1
            if journey.cover_letter:
                stats.with_cover_letter += 1
        return stats

    def generate_insights(self, journey_id: str, requester_id: str) -> JourneyRecord:
        journey = self._load_owned(journey_id, requester_id)
        insights = self._require_generator().generate_insights(journey.resume_text, journey.job_description)
        return self._apply(journey_id, {"insights": insights})

    def generate_cover_letter(self, journey_id: str, requester_id: str) -> JourneyRecord:
        journey = self._load_owned(journey_id, requester_id)
        generator = self._require_generator()
        cover_letter = generator.generate_cover_letter(journey.resume_text, journey.job_description)
        return self._apply(journey_id, {"cover_letter": cover_letter})

    def update_journey(
        self,
        journey_id: str,
        changes: dict[str, Any],
        *,
        requester_id: str | None = None,
    ) -> JourneyRecord:
        if requester_id is not None:
            self._load_owned(journey_id, requester_id)
        return self._apply(journey_id, changes)

    def delete_journey(self, journey_id: str, *, requester_id: str | None = None) -> None:
        if requester_id is not None:
            self._load_owned(journey_id, requester_id)
        if not self.repo.delete(journey_id):
            raise NotFoundError("Journey not found")
        logger.info("Deleted journey journey_id=%s", journey_id)

    def export_cover_letter(self, journey_id: str, requester_id: str) -> tuple[str, bytes]:
        journey = self._load_owned(journey_id, requester_id)
        if not journey.cover_letter:
            raise InputValidationError("No cover letter has been generated for this journey", field="cover_letter")
        return self.renderer.filename_for(journey.company_name), self.renderer.render(journey.cover_letter)

    def _require_generator(self) -> ContentGenerator:
        if self.generator is None:
            raise ConfigurationError("No AI backend is configured for this service")
        return self.generator

    def _extract_resume_text(self, resume_bytes: bytes, mime_type: str) -> str:
        resume_text = self.extractor.extract_text(resume_bytes, mime_type)
        if not resume_text.strip():
            raise ExtractionError("No text could be extracted from the resume", mime_type=mime_type)
        return resume_text

    def _load_owned(self, journey_id: str, requester_id: str) -> Journey:
        journey = self.repo.find_by_id(journey_id)
        if journey is None:
            raise NotFoundError("Journey not found")
        if journey.user_id != requester_id:
            logger.warning("Access denied journey_id=%s requester=%s", journey_id, requester_id)
            raise AccessDeniedError()
        return journey

    def _apply(self, journey_id: str, changes: dict[str, Any]) -> JourneyRecord:
        journey = self.repo.update(journey_id, changes)
        if journey is None:
            raise NotFoundError("Journey not found")
        logger.info("Updated journey journey_id=%s fields=%s", journey_id, sorted(changes))
        return JourneyRecord.model_validate(journey)


def _require_text(field_name: str, value: str | None) -> None:
    if not value or not value.strip():
        raise InputValidationError(f"{field_name} is required", field=field_name)
