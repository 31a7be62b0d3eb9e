"""Form versions: models, an in-memory repository and the service."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, NamedTuple
from uuid import UUID, uuid4

from acareca.validation import ValidationError


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class FormVersionResponse:
    """The public view of a form version."""

    id: UUID
    form_id: UUID
    version: int
    is_active: bool
    practitioner_id: UUID
    created_at: str | None
    updated_at: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "form_id": str(self.form_id),
            "version": self.version,
            "is_active": self.is_active,
            "practitioner_id": str(self.practitioner_id),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class FormVersion:
    """A stored version of a form."""

    id: UUID
    form_id: UUID
    version: int
    is_active: bool
    practitioner_id: UUID
    created_at: str | None = None
    updated_at: str | None = None

    def to_response(self) -> FormVersionResponse:
        return FormVersionResponse(
            id=self.id,
            form_id=self.form_id,
            version=self.version,
            is_active=self.is_active,
            practitioner_id=self.practitioner_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class FormVersionRequest:
    """A request to create a version; the version number must be non-zero."""

    version: int
    is_active: bool

    def __post_init__(self) -> None:
        if isinstance(self.version, bool) or not isinstance(self.version, int):
            raise ValidationError("version", "must be an integer")
        if self.version == 0:
            raise ValidationError("version", "is required")
        if not isinstance(self.is_active, bool):
            raise ValidationError("is_active", "must be a boolean")

    def to_db(self, form_id: UUID, practitioner_id: UUID) -> FormVersion:
        return FormVersion(
            id=uuid4(),
            form_id=form_id,
            version=self.version,
            is_active=self.is_active,
            practitioner_id=practitioner_id,
        )


@dataclass
class UpdateFormVersionRequest:
    """A partial update; fields left as None are unchanged."""

    version: int | None = None
    is_active: bool | None = None


class FormVersionNotFoundError(LookupError):
    """Raised when a form version does not exist or has been deleted."""

    def __init__(self) -> None:
        super().__init__("form version not found")


class ForbiddenError(PermissionError):
    """Raised when a form does not belong to the clinic asked about."""

    def __init__(self) -> None:
        super().__init__("form does not belong to clinic")


class _ClinicRef(NamedTuple):
    id: UUID


class ClinicDirectory:
    """The set of known clinics, looked up without an ownership check."""

    def __init__(self, clinic_ids: Iterable[UUID] = ()) -> None:
        self._ids = set(clinic_ids)
        self._lock = threading.Lock()

    def add(self, clinic_id: UUID) -> None:
        with self._lock:
            self._ids.add(clinic_id)

    def get_clinic_by_id_internal(self, clinic_id: UUID) -> _ClinicRef:
        with self._lock:
            if clinic_id not in self._ids:
                raise LookupError("clinic not found")
        return _ClinicRef(id=clinic_id)


class FormVersionRepository:
    """Thread-safe in-memory store of form versions with soft deletion."""

    def __init__(self) -> None:
        self._rows: dict[UUID, FormVersion] = {}
        self._deleted: set[UUID] = set()
        self._lock = threading.Lock()

    def _live(self, version_id: UUID) -> FormVersion:
        row = self._rows.get(version_id)
        if row is None or version_id in self._deleted:
            raise FormVersionNotFoundError()
        return row

    def create(self, version: FormVersion) -> None:
        """Store ``version`` and fill in its timestamps."""
        with self._lock:
            if version.id in self._rows:
                raise ValueError(f"create form version: duplicate id {version.id}")
            now = _timestamp()
            version.created_at = now
            version.updated_at = now
            self._rows[version.id] = replace(version)

    def get(self, version_id: UUID) -> FormVersion:
        with self._lock:
            return replace(self._live(version_id))

    def update(self, version: FormVersion) -> FormVersion:
        """Change the number and active flag of a live version."""
        with self._lock:
            row = self._live(version.id)
            row.version = version.version
            row.is_active = version.is_active
            row.updated_at = _timestamp()
            return replace(row)

    def delete(self, version_id: UUID) -> None:
        with self._lock:
            row = self._live(version_id)
            row.updated_at = _timestamp()
            self._deleted.add(version_id)

    def list_by_form_id(self, form_id: UUID) -> list[FormVersion]:
        """Return the live versions of a form in ascending version order."""
        with self._lock:
            rows = [
                replace(row)
                for row_id, row in self._rows.items()
                if row.form_id == form_id and row_id not in self._deleted
            ]
        return sorted(rows, key=lambda row: row.version)


class FormVersionService:
    """Operations on form versions, scoped to a clinic."""

    def __init__(self, repository: FormVersionRepository, clinics: Any) -> None:
        self._repository = repository
        self._clinics = clinics

    def _check_clinic(self, clinic_id: UUID) -> None:
        clinic = self._clinics.get_clinic_by_id_internal(clinic_id)
        if clinic.id != clinic_id:
            raise ForbiddenError()

    def create(
        self,
        form_id: UUID,
        clinic_id: UUID,
        request: FormVersionRequest,
        practitioner_id: UUID,
    ) -> FormVersionResponse:
        self._check_clinic(clinic_id)
        version = request.to_db(form_id, practitioner_id)
        self._repository.create(version)
        return version.to_response()

    def get(self, version_id: UUID, clinic_id: UUID) -> FormVersionResponse:
        version = self._repository.get(version_id)
        self._check_clinic(clinic_id)
        return version.to_response()

    def get_by_id(self, version_id: UUID) -> FormVersionResponse:
        """Return a version without checking the clinic."""
        return self._repository.get(version_id).to_response()

    def update(
        self, version_id: UUID, clinic_id: UUID, request: UpdateFormVersionRequest
    ) -> FormVersionResponse:
        existing = self._repository.get(version_id)
        self._check_clinic(clinic_id)
        if request.version is not None:
            existing.version = request.version
        if request.is_active is not None:
            existing.is_active = request.is_active
        return self._repository.update(existing).to_response()

    def delete(self, version_id: UUID, clinic_id: UUID) -> None:
        self._check_clinic(clinic_id)
        self._repository.delete(version_id)

    def list(self, form_id: UUID, clinic_id: UUID) -> list[FormVersionResponse]:
        self._check_clinic(clinic_id)
        return [row.to_response() for row in self._repository.list_by_form_id(form_id)]