from __future__ import annotations

from pydantic import BaseModel, Field

from huntassist.types import JourneyChanges, JourneyRecord, JourneyStats


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)
    name: str = ""


class SignInRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    name: str


class SessionResponse(BaseModel):
    user: UserResponse
    token: str
    expires_in_sec: int


class JourneyForm(BaseModel):
    company_name: str = Field(min_length=1)
    job_title: str = Field(min_length=1)
    job_description: str = Field(min_length=1)


class JourneyResponse(JourneyRecord):
    pass


class JourneyUpdateRequest(JourneyChanges):
    pass


class JourneyStatsResponse(JourneyStats):
    pass


class GenerationResponse(BaseModel):
    journey_id: str
    message: str


class ExportDocumentRequest(BaseModel):
    content: str = Field(min_length=1)
    company_name: str = ""


class InsightsPreviewResponse(BaseModel):
    insights: str
