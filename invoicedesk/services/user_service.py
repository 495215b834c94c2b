"""User registration, lookup and credential checks."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicedesk.core.clock import Clock, system_clock
from invoicedesk.core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError
from invoicedesk.core.security import DEFAULT_ITERATIONS, hash_password, verify_password
from invoicedesk.models import User
from invoicedesk.models.enums import DEFAULT_USER_ROLES
from invoicedesk.services.base_service import BaseService, violates_unique
from invoicedesk.services.customer_service import normalize_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."


class UserService(BaseService):
    """Service for users and their credentials."""

    def __init__(
        self,
        db: Session,
        clock: Clock = system_clock,
        hash_iterations: int = DEFAULT_ITERATIONS,
    ) -> None:
        super().__init__(db, clock=clock)
        self.hash_iterations = hash_iterations

    def create_user(
        self,
        email: str,
        name: str,
        password: str,
        roles: Iterable[str] | None = None,
    ) -> User:
        email = normalize_email(email)
        if self.find_by_email(email) is not None:
            raise ConflictError("User with this email already exists.")

        user = User(
            email=email,
            name=name.strip(),
            password_hash=hash_password(password, iterations=self.hash_iterations),
            roles=sorted(set(roles)) if roles else list(DEFAULT_USER_ROLES),
            is_active=True,
            created_at=self.clock.now(),
        )
        self.db.add(user)
        try:
            self.commit()
        except IntegrityError as exc:
            if violates_unique(exc, "email"):
                raise ConflictError("User with this email already exists.") from exc
            raise
        self.db.refresh(user)
        logger.info("user.created", extra={"event": "user.created", "user_id": user.id})
        return user

    def get_user(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def require_user(self, user_id: int) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == normalize_email(email))
        return self.db.execute(stmt).scalar_one_or_none()

    def list_users(self) -> list[User]:
        return list(self.db.execute(select(User).order_by(User.id)).scalars())

    def authenticate(self, email: str, password: str) -> User:
        """Check credentials and stamp ``last_login_at``."""
        user = self.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login.failed", extra={"event": "auth.login.failed"})
            raise AuthenticationError(INVALID_CREDENTIALS, reason="invalid_credentials")
        if not user.is_active:
            logger.info("auth.login.inactive", extra={"event": "auth.login.inactive", "user_id": user.id})
            raise AuthorizationError("User account is inactive.")

        user.last_login_at = self.clock.now()
        self.commit()
        self.db.refresh(user)
        logger.info("auth.login.succeeded", extra={"event": "auth.login.succeeded", "user_id": user.id})
        return user
