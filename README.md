# acareca

Domain logic for a clinic accounting service: user accounts and sessions,
subscription plans, numbered form versions and the entries (net, GST and gross
amounts) recorded against them. Every store is an in-memory, thread-safe
repository with soft deletion, so the package can be embedded in any
application or used directly in tests.

## Modules

- `acareca.validation` — checks used by request objects: `require_text`,
  `require_email`, `require_e164`, `require_one_of`, `require_range`,
  `require_max_length` and `parse_uuid`. Each returns the value it was given
  (or the parsed `UUID`) and raises `ValidationError` (a `ValueError` with
  `field` and `message` attributes) otherwise.
- `acareca.auth.models` — `User`, `AuthProvider`, `Session`, the validated
  requests `RegisterRequest` (e-mail, password of at least 8 characters, first
  and last name, optional E.164 phone) and `LoginRequest`, and the response
  types `UserResponse`, `TokenResponse`, `GoogleAuthUrlResponse` and
  `GoogleUserInfo` (built from a user-info mapping with `from_dict`).
- `acareca.auth.repository` — `AuthRepository`: create and find users by
  e-mail or id, upsert identity-provider links per user and provider, create
  sessions, find a live unexpired session by refresh token, and soft-delete
  sessions. Missing records raise `UserNotFoundError`.
- `acareca.subscription` — `Subscription`, `CreateSubscriptionRequest`,
  `UpdateSubscriptionRequest`, `SubscriptionResponse`, the
  `SubscriptionRepository` (integer ids, listing newest first) and
  `SubscriptionService`. `apply_update` copies the set fields of an update
  request onto a plan. Missing plans raise `SubscriptionNotFoundError`.
- `acareca.builder.version` — `FormVersion`, `FormVersionRequest` (version
  number must be non-zero), `UpdateFormVersionRequest`, the
  `FormVersionRepository` (versions listed in ascending order) and
  `FormVersionService`, whose clinic-scoped calls look the clinic up through a
  `ClinicDirectory`. Errors are `FormVersionNotFoundError` and `ForbiddenError`.
- `acareca.builder.entry` — `EntryStatus` (`DRAFT`, `SUBMITTED`),
  `FormEntryRequest`, `UpdateFormEntryRequest`, `EntryValueRequest`, the
  `FormEntryRepository` and `FormEntryService`. An entry created or updated as
  `SUBMITTED` gets a UTC submission time; `make_values` skips value rows whose
  field id is not a UUID; `has_submitted_entry_values_for_field` tells whether
  any live submitted entry uses a field. Missing entries raise
  `FormEntryNotFoundError`.

Response objects have a `to_dict()` method giving a JSON-ready mapping.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Subscription plans:

```python
from acareca.subscription import (
    CreateSubscriptionRequest,
    SubscriptionRepository,
    SubscriptionService,
    UpdateSubscriptionRequest,
)

service = SubscriptionService(SubscriptionRepository())
plan = service.create_subscription(
    CreateSubscriptionRequest(name="Basic", price=19.0, duration_days=30)
)
print(plan.id, plan.is_active)  # 1 True

service.update_subscription(plan.id, UpdateSubscriptionRequest(price=24.0))
service.delete_subscription(plan.id)
```

Form versions and entries:

```python
from uuid import uuid4

from acareca.builder.entry import (
    EntryValueRequest,
    FormEntryRepository,
    FormEntryRequest,
    FormEntryService,
)
from acareca.builder.version import (
    ClinicDirectory,
    FormVersionRepository,
    FormVersionRequest,
    FormVersionService,
)

clinic_id, form_id, practitioner_id, field_id = uuid4(), uuid4(), uuid4(), uuid4()

versions = FormVersionService(FormVersionRepository(), ClinicDirectory([clinic_id]))
version = versions.create(
    form_id, clinic_id, FormVersionRequest(version=1, is_active=True), practitioner_id
)

entries = FormEntryService(FormEntryRepository())
entry = entries.create(
    version.id,
    clinic_id,
    FormEntryRequest(
        status="SUBMITTED",
        values=[
            EntryValueRequest(
                form_field_id=str(field_id),
                net_amount=100.0,
                gst_amount=10.0,
                gross_amount=110.0,
            )
        ],
    ),
)
print(entry.status, entry.submitted_at)
```

Users:

```python
from acareca.auth.models import RegisterRequest
from acareca.auth.repository import AuthRepository

password = "password"
request = RegisterRequest(
    email="jane@example.com", password=password, first_name="Jane", last_name="Doe"
)
repository = AuthRepository()
user = repository.create_user(request.to_user())
print(repository.find_by_email("jane@example.com").to_response().to_dict())
```

`RegisterRequest.to_user()` leaves the password unset; the caller hashes it
and sets it on the user before storing.

## What this package does not do

- It has no HTTP API, server or command-line program; it is a library only.
- Storage is in memory: nothing is written to a database or to disk.
- It does not hash passwords, issue access or refresh tokens, or carry out an
  OAuth sign-in; it only models and stores the resulting records.
- It does not store form definitions (name, status, method, shares) or form
  fields. Form, field and clinic identifiers are supplied by the caller, and
  clinics are known only as ids registered in a `ClinicDirectory`.