from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from huntassist.config import get_settings

JourneyStatus = Literal["draft", "in-progress", "completed", "applied", "archived"]
JOURNEY_STATUSES: tuple[str, ...] = get_args(JourneyStatus)
AIProviderName = Literal["primary", "secondary"]
GenerationOperation = Literal["insights", "cover_letter"]


class JourneyRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    company_name: str
    job_title: str
    job_description: str
    resume_file_name: str
    resume_text: str
    insights: str | None = None
    cover_letter: str | None = None
    status: JourneyStatus = "draft"
    created_at: datetime
    updated_at: datetime


class JourneyChanges(BaseModel):
    """Partial update payload. Unknown keys (including ``user_id``) are dropped."""

    model_config = ConfigDict(extra="ignore")

    company_name: str | None = None
    job_title: str | None = None
    job_description: str | None = None
    resume_file_name: str | None = None
    insights: str | None = None
    cover_letter: str | None = None
    status: JourneyStatus | None = None

    @field_validator("company_name", "job_title", "resume_file_name")
    @classmethod
    def validate_required_text(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name} must not be blank")
        return value

    @field_validator("job_description")
    @classmethod
    def validate_job_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        minimum = get_settings().min_job_description_length
        if len(value.strip()) < minimum:
            raise ValueError(f"job_description must be at least {minimum} characters")
        return value

    def to_update(self) -> dict[str, Any]:
        # Generated fields may be cleared with null; descriptive fields may not.
        nullable = {"insights", "cover_letter"}
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in nullable
        }


class JourneyStats(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=lambda: {status: 0 for status in JOURNEY_STATUSES})
    with_insights: int = 0
    with_cover_letter: int = 0


class ModelResponse(BaseModel):
    content: str
    raw: dict[str, Any] = Field(default_factory=dict)
