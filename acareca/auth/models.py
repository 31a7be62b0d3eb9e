"""Data models for users, auth providers, sessions and auth requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from acareca.validation import (
    require_e164,
    require_email,
    require_range,
    require_text,
)


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


@dataclass
class User:
    """A stored user account."""

    email: str
    first_name: str
    last_name: str
    id: UUID | None = None
    password: str | None = None
    phone: str | None = None
    is_superadmin: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_response(self) -> UserResponse:
        """Return the public view of this user, without the password."""
        return UserResponse(
            id=self.id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            is_superadmin=self.is_superadmin,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class AuthProvider:
    """A link between a user and an external identity provider."""

    user_id: UUID
    provider: str
    id: UUID | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    token_expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass
class Session:
    """A refresh-token session for a user."""

    user_id: UUID
    refresh_token: str
    expires_at: datetime
    id: UUID | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass
class RegisterRequest:
    """A request to register a new user; validated on construction."""

    email: str
    password: str
    first_name: str
    last_name: str
    phone: str | None = None
    is_superadmin: bool | None = None

    def __post_init__(self) -> None:
        require_email(self.email, "email")
        require_text(self.password, "password")
        require_range(len(self.password), "password", 8, None)
        require_text(self.first_name, "first_name")
        require_text(self.last_name, "last_name")
        if self.phone is not None:
            require_e164(self.phone, "phone")

    def to_user(self) -> User:
        """Build the user record; the password is hashed and set separately."""
        return User(
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            is_superadmin=self.is_superadmin,
        )


@dataclass
class LoginRequest:
    """A login request; validated on construction."""

    email: str
    password: str
    is_superadmin: bool | None = None

    def __post_init__(self) -> None:
        require_email(self.email, "email")
        require_text(self.password, "password")


@dataclass
class TokenResponse:
    """The token pair returned after a successful login."""

    access_token: str
    refresh_token: str
    is_superadmin: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "is_superadmin": self.is_superadmin,
        }


@dataclass
class UserResponse:
    """The public view of a user."""

    id: UUID | None
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    is_superadmin: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": str(self.id) if self.id is not None else None,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
        if self.phone is not None:
            data["phone"] = self.phone
        data["is_superadmin"] = self.is_superadmin
        data["created_at"] = _iso(self.created_at)
        data["updated_at"] = _iso(self.updated_at)
        return data


@dataclass
class GoogleAuthUrlResponse:
    """The Google consent-screen URL."""

    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url}


@dataclass
class GoogleUserInfo:
    """The profile returned by Google's user-info endpoint."""

    id: str
    email: str
    first_name: str
    last_name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GoogleUserInfo:
        return cls(
            id=data.get("id", ""),
            email=data.get("email", ""),
            first_name=data.get("given_name", ""),
            last_name=data.get("family_name", ""),
        )