"""Subscription plans: models, an in-memory repository and the service."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from acareca.validation import require_max_length, require_range, require_text

_NAME_LIMIT = 255


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubscriptionResponse:
    """The public view of a subscription plan."""

    id: int
    name: str
    description: str | None
    price: float
    duration_days: int
    is_active: bool
    created_at: datetime | None
    updated_at: datetime | None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description is not None:
            data["description"] = self.description
        data.update(
            price=self.price,
            duration_days=self.duration_days,
            is_active=self.is_active,
            created_at=self.created_at.isoformat() if self.created_at else None,
            updated_at=self.updated_at.isoformat() if self.updated_at else None,
        )
        return data


@dataclass
class Subscription:
    """A stored subscription plan."""

    name: str
    price: float
    duration_days: int
    id: int = 0
    description: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_response(self) -> SubscriptionResponse:
        return SubscriptionResponse(
            id=self.id,
            name=self.name,
            description=self.description,
            price=self.price,
            duration_days=self.duration_days,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class CreateSubscriptionRequest:
    """A request to create a plan; validated on construction."""

    name: str
    duration_days: int
    price: float = 0.0
    description: str | None = None
    is_active: bool | None = None

    def __post_init__(self) -> None:
        require_text(self.name, "name")
        require_max_length(self.name, _NAME_LIMIT, "name")
        require_range(self.price, "price", 0, None)
        require_range(self.duration_days, "duration_days", 1, None)

    def to_subscription(self) -> Subscription:
        """Build a new plan; it is active unless the request says otherwise."""
        now = _now()
        return Subscription(
            name=self.name,
            description=self.description,
            price=self.price,
            duration_days=self.duration_days,
            is_active=True if self.is_active is None else self.is_active,
            created_at=now,
            updated_at=now,
        )


@dataclass
class UpdateSubscriptionRequest:
    """A partial update; fields left as None are unchanged."""

    name: str | None = None
    description: str | None = None
    price: float | None = None
    duration_days: int | None = None
    is_active: bool | None = None

    def __post_init__(self) -> None:
        if self.name is not None:
            require_max_length(self.name, _NAME_LIMIT, "name")
        if self.price is not None:
            require_range(self.price, "price", 0, None)
        if self.duration_days is not None:
            require_range(self.duration_days, "duration_days", 1, None)


class SubscriptionNotFoundError(LookupError):
    """Raised when a subscription does not exist or has been deleted."""

    def __init__(self) -> None:
        super().__init__("subscription not found")


class SubscriptionRepository:
    """Thread-safe in-memory store of subscriptions with soft deletion."""

    def __init__(self) -> None:
        self._rows: dict[int, Subscription] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _live(self, subscription_id: int) -> Subscription:
        row = self._rows.get(subscription_id)
        if row is None or row.deleted_at is not None:
            raise SubscriptionNotFoundError()
        return row

    def create(self, subscription: Subscription) -> Subscription:
        with self._lock:
            row = replace(subscription, deleted_at=None)
            if row.id == 0:
                while self._next_id in self._rows:
                    self._next_id += 1
                row.id = self._next_id
                self._next_id += 1
            elif row.id in self._rows:
                raise ValueError(f"create subscription: duplicate id {row.id}")
            now = _now()
            row.created_at = row.created_at or now
            row.updated_at = row.updated_at or now
            self._rows[row.id] = row
            return replace(row)

    def get_by_id(self, subscription_id: int) -> Subscription:
        with self._lock:
            return replace(self._live(subscription_id))

    def find_by_name(self, name: str) -> Subscription:
        with self._lock:
            for row in self._rows.values():
                if row.name == name and row.deleted_at is None:
                    return replace(row)
        raise SubscriptionNotFoundError()

    def list(self) -> list[Subscription]:
        """Return live subscriptions, newest first."""
        with self._lock:
            live = [replace(row) for row in self._rows.values() if row.deleted_at is None]
        return sorted(live, key=lambda row: row.created_at, reverse=True)

    def update(self, subscription: Subscription) -> Subscription:
        with self._lock:
            row = self._live(subscription.id)
            row.name = subscription.name
            row.description = subscription.description
            row.price = subscription.price
            row.duration_days = subscription.duration_days
            row.is_active = subscription.is_active
            row.updated_at = subscription.updated_at or _now()
            return replace(row)

    def delete(self, subscription_id: int) -> None:
        with self._lock:
            row = self._live(subscription_id)
            now = _now()
            row.deleted_at = now
            row.updated_at = now


def apply_update(subscription: Subscription, request: UpdateSubscriptionRequest) -> None:
    """Apply the set fields of ``request`` to ``subscription`` and touch it."""
    if request.name is not None:
        subscription.name = request.name
    if request.description is not None:
        subscription.description = request.description
    if request.price is not None:
        subscription.price = request.price
    if request.duration_days is not None:
        subscription.duration_days = request.duration_days
    if request.is_active is not None:
        subscription.is_active = request.is_active
    subscription.updated_at = _now()


class SubscriptionService:
    """Operations on subscription plans."""

    def __init__(self, repository: SubscriptionRepository) -> None:
        self._repository = repository

    def create_subscription(self, request: CreateSubscriptionRequest) -> SubscriptionResponse:
        return self._repository.create(request.to_subscription()).to_response()

    def get_subscription(self, subscription_id: int) -> SubscriptionResponse:
        return self._repository.get_by_id(subscription_id).to_response()

    def list_subscriptions(self) -> list[SubscriptionResponse]:
        return [row.to_response() for row in self._repository.list()]

    def update_subscription(
        self, subscription_id: int, request: UpdateSubscriptionRequest
    ) -> SubscriptionResponse:
        existing = self._repository.get_by_id(subscription_id)
        apply_update(existing, request)
        return self._repository.update(existing).to_response()

    def delete_subscription(self, subscription_id: int) -> None:
        self._repository.delete(subscription_id)

    def find_by_name(self, name: str) -> SubscriptionResponse:
        return self._repository.find_by_name(name).to_response()