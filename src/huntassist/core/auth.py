from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta

from passlib.hash import pbkdf2_sha256

from huntassist.config import Settings, get_settings
from huntassist.db.models import User
from huntassist.db.repositories import AccountRepository
from huntassist.errors import AuthenticationError, InputValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService:
    def __init__(self, repository: AccountRepository, *, settings: Settings | None = None):
        self.repo = repository
        self.settings = settings or get_settings()

    def sign_up(self, *, email: str, password: str, name: str = "") -> User:
        if "@" not in email:
            raise InputValidationError("A valid email address is required", field="email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InputValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        if self.repo.get_user_by_email(email):
            raise InputValidationError("An account with this email already exists", field="email")

        user = self.repo.create_user(email=email, name=name.strip(), password_hash=pbkdf2_sha256.hash(password))
        logger.info("Registered user user_id=%s", user.id)
        return user

    def sign_in(self, *, email: str, password: str) -> tuple[User, str]:
        user = self.repo.get_user_by_email(email)
        if user is None or not pbkdf2_sha256.verify(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        self.repo.purge_expired_sessions()
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(UTC) + timedelta(minutes=self.settings.session_ttl_min)
        self.repo.create_session(user_id=user.id, token=token, expires_at=expires_at)
        logger.info("Signed in user_id=%s", user.id)
        return user, token

    def resolve_token(self, token: str) -> User | None:
        if not token:
            return None
        session = self.repo.get_session(token)
        if session is None:
            return None

        expires_at = session.expires_at
        if expires_at.tzinfo is None:
            # SQLite hands timestamps back without tzinfo; they are stored as UTC.
            expires_at = expires_at.replace(tzinfo=UTC)
        if expires_at <= datetime.now(UTC):
            self.repo.delete_session(token)
            return None
        return self.repo.get_user(session.user_id)

    def sign_out(self, token: str) -> None:
        if token:
            self.repo.delete_session(token)
