from datetime import datetime
from uuid import UUID, uuid4

import pytest

from acareca.builder.entry import (
    EntryStatus,
    EntryValueRequest,
    FormEntryNotFoundError,
    FormEntryRepository,
    FormEntryRequest,
    FormEntryService,
    UpdateFormEntryRequest,
    make_values,
)
from acareca.validation import ValidationError


@pytest.fixture
def repository():
    return FormEntryRepository()


@pytest.fixture
def service(repository):
    return FormEntryService(repository)


def test_create_defaults_to_draft(service):
    version_id, clinic_id = uuid4(), uuid4()
    created = service.create(version_id, clinic_id, FormEntryRequest())
    assert created.status == EntryStatus.DRAFT.value
    assert created.submitted_at == ""
    assert created.form_version_id == version_id
    assert created.clinic_id == clinic_id
    assert created.created_at is not None


def test_create_submitted_sets_submission_time(service):
    created = service.create(uuid4(), uuid4(), FormEntryRequest(status="SUBMITTED"))
    assert created.submitted_at.endswith("Z")
    parsed = datetime.strptime(created.submitted_at, "%Y-%m-%dT%H:%M:%SZ")
    assert parsed.year >= 2024


def test_invalid_status_rejected():
    with pytest.raises(ValidationError):
        FormEntryRequest(status="CLOSED")
    with pytest.raises(ValidationError):
        UpdateFormEntryRequest(status="CLOSED")


def test_create_stores_values(service):
    field_id = uuid4()
    request = FormEntryRequest(
        values=[EntryValueRequest(form_field_id=str(field_id), net_amount=10.0, gst_amount=1.0)]
    )
    created = service.create(uuid4(), uuid4(), request)
    assert len(created.values) == 1
    assert created.values[0].form_field_id == field_id
    assert created.values[0].net_amount == 10.0
    assert created.values[0].gross_amount is None
    fetched = service.get_by_id(created.id)
    assert fetched.values == created.values


def test_make_values_skips_bad_field_ids():
    entry_id = uuid4()
    good = uuid4()
    rows = make_values(
        entry_id,
        [EntryValueRequest(form_field_id="not-a-uuid"), EntryValueRequest(form_field_id=str(good))],
    )
    assert [row.form_field_id for row in rows] == [good]
    assert rows[0].entry_id == entry_id


def test_get_unknown_raises(service):
    with pytest.raises(FormEntryNotFoundError):
        service.get_by_id(uuid4())


def test_update_to_submitted_keeps_first_submission_time(service):
    created = service.create(uuid4(), uuid4(), FormEntryRequest())
    user = uuid4()
    first = service.update(created.id, created.clinic_id, UpdateFormEntryRequest(status="SUBMITTED"), user)
    assert first.status == "SUBMITTED"
    assert first.submitted_by == user
    assert first.submitted_at
    second = service.update(created.id, created.clinic_id, UpdateFormEntryRequest(status="SUBMITTED"), None)
    assert second.submitted_at == first.submitted_at
    assert second.submitted_by == UUID(int=0)


def test_update_without_values_keeps_values(service):
    field_id = uuid4()
    created = service.create(
        uuid4(), uuid4(), FormEntryRequest(values=[EntryValueRequest(str(field_id), net_amount=5.0)])
    )
    updated = service.update(created.id, created.clinic_id, UpdateFormEntryRequest(status="DRAFT"))
    assert [value.form_field_id for value in updated.values] == [field_id]
    assert updated.values[0].net_amount == 5.0


def test_update_with_values_replaces_them(service):
    old_field, new_field = uuid4(), uuid4()
    created = service.create(
        uuid4(), uuid4(), FormEntryRequest(values=[EntryValueRequest(str(old_field))])
    )
    updated = service.update(
        created.id,
        created.clinic_id,
        UpdateFormEntryRequest(values=[EntryValueRequest(str(new_field), gross_amount=2.5)]),
    )
    assert [value.form_field_id for value in updated.values] == [new_field]
    assert updated.status == created.status


def test_update_unknown_raises(service):
    with pytest.raises(FormEntryNotFoundError):
        service.update(uuid4(), uuid4(), UpdateFormEntryRequest(status="DRAFT"))


def test_delete_hides_entry(service):
    created = service.create(uuid4(), uuid4(), FormEntryRequest())
    service.delete(created.id)
    with pytest.raises(FormEntryNotFoundError):
        service.get_by_id(created.id)
    with pytest.raises(FormEntryNotFoundError):
        service.delete(created.id)


def test_list_newest_first_and_filtered_by_clinic(service):
    version_id, clinic_a, clinic_b = uuid4(), uuid4(), uuid4()
    first = service.create(version_id, clinic_a, FormEntryRequest())
    second = service.create(version_id, clinic_a, FormEntryRequest())
    other = service.create(version_id, clinic_b, FormEntryRequest())
    service.create(uuid4(), clinic_a, FormEntryRequest())
    listed = service.list(version_id, clinic_a)
    assert [entry.id for entry in listed] == [second.id, first.id]
    everything = service.list(version_id, None)
    assert {entry.id for entry in everything} == {first.id, second.id, other.id}
    assert all(entry.values == [] for entry in everything)


def test_has_submitted_entry_values_for_field(repository, service):
    field_id = uuid4()
    values = [EntryValueRequest(str(field_id), net_amount=1.0)]
    draft = service.create(uuid4(), uuid4(), FormEntryRequest(values=values))
    assert repository.has_submitted_entry_values_for_field(field_id) is False
    submitted = service.create(uuid4(), uuid4(), FormEntryRequest(status="SUBMITTED", values=values))
    assert repository.has_submitted_entry_values_for_field(field_id) is True
    service.delete(submitted.id)
    assert repository.has_submitted_entry_values_for_field(field_id) is False
    assert draft.status == "DRAFT"


def test_to_dict_omits_empty_fields(service):
    created = service.create(uuid4(), uuid4(), FormEntryRequest())
    data = created.to_dict()
    assert "submitted_at" not in data
    assert "values" not in data
    assert data["submitted_by"] == str(UUID(int=0))
    assert data["status"] == "DRAFT"


def test_value_to_dict_omits_missing_amounts(service):
    field_id = uuid4()
    created = service.create(
        uuid4(), uuid4(), FormEntryRequest(values=[EntryValueRequest(str(field_id), gst_amount=3.0)])
    )
    value = created.to_dict()["values"][0]
    assert value == {"form_field_id": str(field_id), "gst_amount": 3.0}