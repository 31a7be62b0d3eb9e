"""In-memory storage for users, identity-provider links and sessions."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID, uuid4

from acareca.auth.models import AuthProvider, Session, User


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _is_future(moment: datetime) -> bool:
    reference = datetime.now() if moment.tzinfo is None else _now()
    return moment > reference


class UserNotFoundError(LookupError):
    """Raised when a user, provider link or session cannot be found."""

    def __init__(self) -> None:
        super().__init__("user not found")


class AuthRepository:
    """Thread-safe in-memory store with soft deletion."""

    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}
        self._providers: dict[UUID, AuthProvider] = {}
        self._sessions: dict[UUID, Session] = {}
        self._lock = threading.Lock()

    def create_user(self, user: User) -> User:
        """Store a new user; an empty password is stored as None."""
        with self._lock:
            user_id = user.id or uuid4()
            if user_id in self._users:
                raise ValueError(f"create user: duplicate id {user_id}")
            now = _now()
            row = replace(
                user,
                id=user_id,
                password=user.password or None,
                is_superadmin=False if user.is_superadmin is None else user.is_superadmin,
                created_at=now,
                updated_at=now,
                deleted_at=None,
            )
            self._users[user_id] = row
            return replace(row)

    def find_by_email(self, email: str) -> User:
        with self._lock:
            for row in self._users.values():
                if row.email == email and row.deleted_at is None:
                    return replace(row)
        raise UserNotFoundError()

    def find_by_id(self, user_id: UUID) -> User:
        with self._lock:
            row = self._users.get(user_id)
            if row is None or row.deleted_at is not None:
                raise UserNotFoundError()
            return replace(row)

    def upsert_auth_provider(self, provider: AuthProvider) -> AuthProvider:
        """Insert a provider link, or refresh the tokens of the existing one."""
        with self._lock:
            now = _now()
            for row in self._providers.values():
                if row.user_id == provider.user_id and row.provider == provider.provider:
                    row.access_token = provider.access_token
                    row.refresh_token = provider.refresh_token
                    row.token_expires_at = provider.token_expires_at
                    row.updated_at = now
                    return replace(row)
            provider_id = provider.id or uuid4()
            if provider_id in self._providers:
                raise ValueError(f"upsert auth provider: duplicate id {provider_id}")
            row = replace(
                provider,
                id=provider_id,
                created_at=now,
                updated_at=now,
                deleted_at=None,
            )
            self._providers[provider_id] = row
            return replace(row)

    def find_auth_provider(self, provider: str) -> AuthProvider:
        with self._lock:
            for row in self._providers.values():
                if row.provider == provider and row.deleted_at is None:
                    return replace(row)
        raise UserNotFoundError()

    def create_session(self, session: Session) -> Session:
        with self._lock:
            session_id = session.id or uuid4()
            if session_id in self._sessions:
                raise ValueError(f"create session: duplicate id {session_id}")
            now = _now()
            row = replace(
                session,
                id=session_id,
                created_at=now,
                updated_at=now,
                deleted_at=None,
            )
            self._sessions[session_id] = row
            return replace(row)

    def find_session_by_refresh_token(self, refresh_token: str) -> Session:
        """Return the live, unexpired session holding ``refresh_token``."""
        with self._lock:
            for row in self._sessions.values():
                if (
                    row.refresh_token == refresh_token
                    and row.deleted_at is None
                    and _is_future(row.expires_at)
                ):
                    return replace(row)
        raise UserNotFoundError()

    def delete_session(self, session_id: UUID) -> None:
        """Soft-delete a session; an unknown id is ignored."""
        with self._lock:
            row = self._sessions.get(session_id)
            if row is not None:
                row.deleted_at = _now()