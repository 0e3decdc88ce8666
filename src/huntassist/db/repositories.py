from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from huntassist.db.models import AuthSession, Journey, User
from huntassist.errors import InputValidationError, PersistenceError
from huntassist.types import JOURNEY_STATUSES

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Columns that callers can never change through a partial update.
PROTECTED_JOURNEY_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})
UPDATABLE_JOURNEY_FIELDS = frozenset(
    {
        "company_name",
        "job_title",
        "job_description",
        "resume_file_name",
        "resume_text",
        "insights",
        "cover_letter",
        "status",
    }
)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class _SessionRepository:
    def __init__(self, session: Session):
        self.session = session

    def _run(self, action: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database operation failed action=%s", action)
            raise PersistenceError(f"Failed to {action}") from exc


class JourneyRepository(_SessionRepository):
    def create(
        self,
        *,
        user_id: str,
        company_name: str,
        job_title: str,
        job_description: str,
        resume_file_name: str,
        resume_text: str,
        insights: str | None = None,
        cover_letter: str | None = None,
        status: str | None = None,
    ) -> Journey:
        if status is not None and status not in JOURNEY_STATUSES:
            raise InputValidationError(f"Unknown journey status '{status}'", field="status")

        def _create() -> Journey:
            journey = Journey(
                user_id=user_id,
                company_name=company_name,
                job_title=job_title,
                job_description=job_description,
                resume_file_name=resume_file_name,
                resume_text=resume_text,
                insights=insights,
                cover_letter=cover_letter,
                status=status or "draft",
            )
            self.session.add(journey)
            self.session.commit()
            self.session.refresh(journey)
            return journey

        return self._run("create journey", _create)

    def find_by_id(self, journey_id: str) -> Journey | None:
        return self._run("read journey", lambda: self.session.get(Journey, journey_id))

    def find_by_owner(self, user_id: str) -> list[Journey]:
        statement = (
            select(Journey)
            .where(Journey.user_id == user_id)
            .order_by(Journey.created_at.desc(), Journey.id.desc())
        )
        return self._run("list journeys", lambda: list(self.session.scalars(statement).all()))

    def update(self, journey_id: str, changes: dict[str, Any]) -> Journey | None:
        values = {key: value for key, value in changes.items() if key in UPDATABLE_JOURNEY_FIELDS}
        ignored = set(changes) - set(values)
        if ignored:
            logger.debug("Ignoring non-updatable journey fields=%s", sorted(ignored))

        status = values.get("status")
        if "status" in values and status not in JOURNEY_STATUSES:
            raise InputValidationError(f"Unknown journey status '{status}'", field="status")

        def _update() -> Journey | None:
            # Refresh first so a concurrent writer's commit is not masked by the identity map.
            journey = self.session.get(Journey, journey_id, populate_existing=True)
            if journey is None:
                return None
            for key, value in values.items():
                setattr(journey, key, value)
            if values:
                self.session.commit()
                self.session.refresh(journey)
            return journey

        return self._run("update journey", _update)

    def delete(self, journey_id: str) -> bool:
        def _delete() -> bool:
            journey = self.session.get(Journey, journey_id)
            if journey is None:
                return False
            self.session.delete(journey)
            self.session.commit()
            return True

        return self._run("delete journey", _delete)


class AccountRepository(_SessionRepository):
    def create_user(self, *, email: str, name: str, password_hash: str) -> User:
        def _create() -> User:
            user = User(email=normalize_email(email), name=name, password_hash=password_hash)
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
            return user

        return self._run("create user", _create)

    def get_user(self, user_id: str) -> User | None:
        return self._run("read user", lambda: self.session.get(User, user_id))

    def get_user_by_email(self, email: str) -> User | None:
        statement = select(User).where(User.email == normalize_email(email))
        return self._run("read user", lambda: self.session.scalar(statement))

    def create_session(self, *, user_id: str, token: str, expires_at: datetime) -> AuthSession:
        def _create() -> AuthSession:
            row = AuthSession(user_id=user_id, token_hash=hash_token(token), expires_at=expires_at)
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
            return row

        return self._run("create session", _create)

    def get_session(self, token: str) -> AuthSession | None:
        statement = select(AuthSession).where(AuthSession.token_hash == hash_token(token))
        return self._run("read session", lambda: self.session.scalar(statement))

    def delete_session(self, token: str) -> bool:
        def _delete() -> bool:
            result = self.session.execute(
                delete(AuthSession).where(AuthSession.token_hash == hash_token(token))
            )
            self.session.commit()
            return result.rowcount > 0

        return self._run("delete session", _delete)

    def purge_expired_sessions(self, now: datetime | None = None) -> int:
        cutoff = now or datetime.now(UTC)

        def _purge() -> int:
            result = self.session.execute(delete(AuthSession).where(AuthSession.expires_at < cutoff))
            self.session.commit()
            return result.rowcount

        return self._run("purge sessions", _purge)
