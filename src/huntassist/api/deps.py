from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from huntassist.config import get_settings
from huntassist.core.auth import AuthService
from huntassist.core.documents import DocumentRenderer
from huntassist.core.journeys import JourneyService
from huntassist.core.resume_text import ResumeTextExtractor
from huntassist.db.models import User
from huntassist.db.repositories import AccountRepository, JourneyRepository
from huntassist.db.session import get_db_session
from huntassist.errors import AuthenticationError
from huntassist.llm.generator import ContentGenerator, build_content_generator


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


@lru_cache(maxsize=1)
def get_content_generator() -> ContentGenerator:
    # Built on first use and reused for the life of the process.
    return build_content_generator(get_settings())


def get_resume_extractor() -> ResumeTextExtractor:
    return ResumeTextExtractor()


def get_document_renderer() -> DocumentRenderer:
    return DocumentRenderer()


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(AccountRepository(db))


def get_journey_service(
    db: Session = Depends(get_db),
    extractor: ResumeTextExtractor = Depends(get_resume_extractor),
    renderer: DocumentRenderer = Depends(get_document_renderer),
) -> JourneyService:
    return JourneyService(JourneyRepository(db), extractor=extractor, renderer=renderer)


def get_generating_journey_service(
    service: JourneyService = Depends(get_journey_service),
    generator: ContentGenerator = Depends(get_content_generator),
) -> JourneyService:
    # Only routes that call the AI backend resolve it; CRUD keeps working without a key.
    service.generator = generator
    return service


def request_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(get_settings().session_cookie_name, "")


def get_current_user(request: Request, auth: AuthService = Depends(get_auth_service)) -> User:
    user = auth.resolve_token(request_token(request))
    if user is None:
        raise AuthenticationError()
    return user
