from uuid import uuid4

import pytest

from acareca.builder.version import (
    ClinicDirectory,
    ForbiddenError,
    FormVersionNotFoundError,
    FormVersionRepository,
    FormVersionRequest,
    FormVersionService,
    UpdateFormVersionRequest,
)
from acareca.validation import ValidationError


class _Mismatched:
    def __init__(self, other_id):
        self._other_id = other_id

    def get_clinic_by_id_internal(self, clinic_id):
        return ClinicDirectory([self._other_id]).get_clinic_by_id_internal(self._other_id)


@pytest.fixture
def clinic_id():
    return uuid4()


@pytest.fixture
def service(clinic_id):
    return FormVersionService(FormVersionRepository(), ClinicDirectory([clinic_id]))


def test_request_requires_nonzero_version():
    with pytest.raises(ValidationError):
        FormVersionRequest(version=0, is_active=True)


def test_to_db_copies_fields():
    form_id, practitioner_id = uuid4(), uuid4()
    version = FormVersionRequest(version=3, is_active=False).to_db(form_id, practitioner_id)
    assert version.form_id == form_id
    assert version.practitioner_id == practitioner_id
    assert version.version == 3
    assert version.is_active is False


def test_create_and_get(service, clinic_id):
    form_id, practitioner_id = uuid4(), uuid4()
    created = service.create(form_id, clinic_id, FormVersionRequest(1, True), practitioner_id)
    assert created.created_at is not None
    fetched = service.get(created.id, clinic_id)
    assert fetched == created
    assert service.get_by_id(created.id) == created


def test_create_with_unknown_clinic_raises(service):
    with pytest.raises(LookupError):
        service.create(uuid4(), uuid4(), FormVersionRequest(1, True), uuid4())


def test_mismatched_clinic_is_forbidden(clinic_id):
    svc = FormVersionService(FormVersionRepository(), _Mismatched(uuid4()))
    with pytest.raises(ForbiddenError, match="form does not belong to clinic"):
        svc.list(uuid4(), clinic_id)


def test_get_missing_version_raises(service, clinic_id):
    with pytest.raises(FormVersionNotFoundError, match="form version not found"):
        service.get(uuid4(), clinic_id)


def test_list_is_ordered_by_version(service, clinic_id):
    form_id, practitioner_id = uuid4(), uuid4()
    for number in (3, 1, 2):
        service.create(form_id, clinic_id, FormVersionRequest(number, False), practitioner_id)
    service.create(uuid4(), clinic_id, FormVersionRequest(9, True), practitioner_id)
    listed = service.list(form_id, clinic_id)
    assert [v.version for v in listed] == [1, 2, 3]
    assert all(v.form_id == form_id for v in listed)


def test_update_changes_only_given_fields(service, clinic_id):
    created = service.create(uuid4(), clinic_id, FormVersionRequest(1, True), uuid4())
    updated = service.update(created.id, clinic_id, UpdateFormVersionRequest(is_active=False))
    assert updated.is_active is False
    assert updated.version == created.version
    assert service.get_by_id(created.id).is_active is False


def test_delete_hides_version(service, clinic_id):
    form_id = uuid4()
    created = service.create(form_id, clinic_id, FormVersionRequest(1, True), uuid4())
    service.delete(created.id, clinic_id)
    with pytest.raises(FormVersionNotFoundError):
        service.get_by_id(created.id)
    assert service.list(form_id, clinic_id) == []
    with pytest.raises(FormVersionNotFoundError):
        service.delete(created.id, clinic_id)


def test_update_deleted_version_raises(service, clinic_id):
    created = service.create(uuid4(), clinic_id, FormVersionRequest(1, True), uuid4())
    service.delete(created.id, clinic_id)
    with pytest.raises(FormVersionNotFoundError):
        service.update(created.id, clinic_id, UpdateFormVersionRequest(version=2))


def test_response_to_dict_round_trip(service, clinic_id):
    created = service.create(uuid4(), clinic_id, FormVersionRequest(1, True), uuid4())
    data = created.to_dict()
    assert data["id"] == str(created.id)
    assert data["version"] == created.version
    assert data["is_active"] is True


def test_repository_duplicate_id_raises():
    repo = FormVersionRepository()
    version = FormVersionRequest(1, True).to_db(uuid4(), uuid4())
    repo.create(version)
    with pytest.raises(ValueError):
        repo.create(version)