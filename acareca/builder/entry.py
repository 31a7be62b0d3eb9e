"""Form entries: models, an in-memory repository and the service."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from acareca.validation import require_one_of

_NIL = UUID(int=0)


class EntryStatus(str, Enum):
    """The state of a submitted form entry."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"


_STATUSES = [status.value for status in EntryStatus]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _submission_time() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class EntryValueRequest:
    """One amount row of an entry, keyed by the form field it fills."""

    form_field_id: str
    net_amount: float | None = None
    gst_amount: float | None = None
    gross_amount: float | None = None


@dataclass
class FormEntryRequest:
    """A request to create an entry; an empty status means draft."""

    status: str = ""
    values: list[EntryValueRequest] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.status:
            require_one_of(self.status, _STATUSES, "status")


@dataclass
class UpdateFormEntryRequest:
    """A partial update of an entry; an empty value list keeps the old values."""

    status: str | None = None
    values: list[EntryValueRequest] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.status is not None:
            require_one_of(self.status, _STATUSES, "status")


@dataclass
class EntryValueResponse:
    """The public view of one amount row."""

    form_field_id: UUID
    net_amount: float | None = None
    gst_amount: float | None = None
    gross_amount: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"form_field_id": str(self.form_field_id)}
        for name in ("net_amount", "gst_amount", "gross_amount"):
            amount = getattr(self, name)
            if amount is not None:
                data[name] = amount
        return data


@dataclass
class FormEntryResponse:
    """The public view of an entry with its amount rows."""

    id: UUID
    form_version_id: UUID
    clinic_id: UUID
    status: str
    submitted_by: UUID = _NIL
    submitted_at: str = ""
    values: list[EntryValueResponse] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": str(self.id),
            "form_version_id": str(self.form_version_id),
            "clinic_id": str(self.clinic_id),
            "submitted_by": str(self.submitted_by),
        }
        if self.submitted_at:
            data["submitted_at"] = self.submitted_at
        data["status"] = self.status
        if self.values:
            data["values"] = [value.to_dict() for value in self.values]
        data["created_at"] = self.created_at
        data["updated_at"] = self.updated_at
        return data


@dataclass
class FormEntryValue:
    """A stored amount row of an entry."""

    id: UUID
    entry_id: UUID
    form_field_id: UUID
    net_amount: float | None = None
    gst_amount: float | None = None
    gross_amount: float | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class FormEntry:
    """A stored entry made against a form version."""

    id: UUID
    form_version_id: UUID
    clinic_id: UUID
    status: str
    submitted_by: UUID | None = None
    submitted_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_response(self, values: list[FormEntryValue] | None) -> FormEntryResponse:
        return FormEntryResponse(
            id=self.id,
            form_version_id=self.form_version_id,
            clinic_id=self.clinic_id,
            status=self.status,
            submitted_by=self.submitted_by if self.submitted_by is not None else _NIL,
            submitted_at=self.submitted_at if self.submitted_at is not None else "",
            values=[
                EntryValueResponse(
                    form_field_id=value.form_field_id,
                    net_amount=value.net_amount,
                    gst_amount=value.gst_amount,
                    gross_amount=value.gross_amount,
                )
                for value in values or ()
            ],
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class FormEntryNotFoundError(LookupError):
    """Raised when an entry does not exist or has been deleted."""

    def __init__(self) -> None:
        super().__init__("form entry not found")


class FormEntryRepository:
    """Thread-safe in-memory store of entries and their values."""

    def __init__(self) -> None:
        self._entries: dict[UUID, FormEntry] = {}
        self._values: dict[UUID, list[FormEntryValue]] = {}
        self._order: dict[UUID, int] = {}
        self._deleted: set[UUID] = set()
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def _live(self, entry_id: UUID) -> FormEntry:
        row = self._entries.get(entry_id)
        if row is None or entry_id in self._deleted:
            raise FormEntryNotFoundError()
        return row

    @staticmethod
    def _stamp_values(entry_id: UUID, values: list[FormEntryValue], now: str) -> list[FormEntryValue]:
        stored = []
        for value in values:
            value.entry_id = entry_id
            value.created_at = now
            value.updated_at = now
            stored.append(replace(value))
        return stored

    def create(self, entry: FormEntry, values: list[FormEntryValue]) -> None:
        """Store ``entry`` and its values together, filling in timestamps."""
        with self._lock:
            if entry.id in self._entries:
                raise ValueError(f"create form entry: duplicate id {entry.id}")
            now = _timestamp()
            entry.created_at = now
            entry.updated_at = now
            self._values[entry.id] = self._stamp_values(entry.id, values, now)
            self._entries[entry.id] = replace(entry)
            self._order[entry.id] = next(self._sequence)

    def get_by_id(self, entry_id: UUID) -> tuple[FormEntry, list[FormEntryValue]]:
        """Return a live entry and its values."""
        with self._lock:
            row = self._live(entry_id)
            values = [replace(value) for value in self._values.get(entry_id, [])]
            return replace(row), values

    def update(self, entry: FormEntry, values: list[FormEntryValue]) -> None:
        """Update the submission fields of an entry and replace its values."""
        with self._lock:
            row = self._live(entry.id)
            now = _timestamp()
            row.submitted_by = entry.submitted_by
            row.submitted_at = entry.submitted_at
            row.status = entry.status
            row.updated_at = now
            entry.created_at = row.created_at
            entry.updated_at = row.updated_at
            self._values[entry.id] = self._stamp_values(entry.id, values, now)

    def delete(self, entry_id: UUID) -> None:
        with self._lock:
            row = self._live(entry_id)
            row.updated_at = _timestamp()
            self._deleted.add(entry_id)

    def list_by_form_version_id(
        self, form_version_id: UUID, clinic_id: UUID | None = None
    ) -> list[FormEntry]:
        """Return live entries of a version, newest first, optionally for one clinic."""
        with self._lock:
            rows = [
                row
                for entry_id, row in self._entries.items()
                if entry_id not in self._deleted
                and row.form_version_id == form_version_id
                and (clinic_id is None or row.clinic_id == clinic_id)
            ]
            rows.sort(key=lambda row: (row.created_at or "", self._order[row.id]), reverse=True)
            return [replace(row) for row in rows]

    def has_submitted_entry_values_for_field(self, form_field_id: UUID) -> bool:
        """Tell whether any live submitted entry holds a value for the field."""
        with self._lock:
            return any(
                value.form_field_id == form_field_id
                and entry_id not in self._deleted
                and self._entries[entry_id].status == EntryStatus.SUBMITTED.value
                for entry_id, values in self._values.items()
                for value in values
            )


def make_values(entry_id: UUID, requests: list[EntryValueRequest]) -> list[FormEntryValue]:
    """Build stored value rows, skipping those whose field id is not a UUID."""
    out = []
    for request in requests:
        raw = request.form_field_id
        if isinstance(raw, UUID):
            field_id = raw
        else:
            try:
                field_id = UUID(str(raw))
            except ValueError:
                continue
        out.append(
            FormEntryValue(
                id=uuid4(),
                entry_id=entry_id,
                form_field_id=field_id,
                net_amount=request.net_amount,
                gst_amount=request.gst_amount,
                gross_amount=request.gross_amount,
            )
        )
    return out


class FormEntryService:
    """Operations on form entries."""

    def __init__(self, repository: FormEntryRepository) -> None:
        self._repository = repository

    def create(
        self,
        form_version_id: UUID,
        clinic_id: UUID,
        request: FormEntryRequest,
        submitted_by: UUID | None = None,
    ) -> FormEntryResponse:
        status = request.status or EntryStatus.DRAFT.value
        submitted_at = _submission_time() if status == EntryStatus.SUBMITTED.value else None
        entry = FormEntry(
            id=uuid4(),
            form_version_id=form_version_id,
            clinic_id=clinic_id,
            status=status,
            submitted_by=submitted_by,
            submitted_at=submitted_at,
        )
        values = make_values(entry.id, request.values)
        self._repository.create(entry, values)
        try:
            created, stored = self._repository.get_by_id(entry.id)
        except LookupError:
            return entry.to_response(values)
        return created.to_response(stored)

    def get_by_id(self, entry_id: UUID) -> FormEntryResponse:
        entry, values = self._repository.get_by_id(entry_id)
        return entry.to_response(values)

    def update(
        self,
        entry_id: UUID,
        clinic_id: UUID,
        request: UpdateFormEntryRequest,
        submitted_by: UUID | None = None,
    ) -> FormEntryResponse:
        """Change the status and, if any are given, replace the values."""
        existing, values = self._repository.get_by_id(entry_id)
        if request.status is not None:
            existing.status = request.status
            if request.status == EntryStatus.SUBMITTED.value and existing.submitted_at is None:
                existing.submitted_at = _submission_time()
            existing.submitted_by = submitted_by
        new_values = make_values(existing.id, request.values) if request.values else values
        self._repository.update(existing, new_values)
        try:
            updated, stored = self._repository.get_by_id(entry_id)
        except LookupError:
            return existing.to_response(values)
        return updated.to_response(stored)

    def delete(self, entry_id: UUID) -> None:
        self._repository.delete(entry_id)

    def list(
        self, form_version_id: UUID, clinic_id: UUID | None = None
    ) -> list[FormEntryResponse]:
        """List entries of a version without their values."""
        return [
            entry.to_response(None)
            for entry in self._repository.list_by_form_version_id(form_version_id, clinic_id)
        ]