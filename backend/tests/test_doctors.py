import pytest

from registry.errors import AlreadyRegistered, NotFound, NotRegistered, Unauthorized

from .factories import make_doctor_profile


def test_register_and_read_doctor(service):
    profile = make_doctor_profile()
    service.register_doctor("doctor-1", profile)

    record = service.get_doctor("doctor-1")
    assert record.profile == profile
    assert record.identity == "doctor-1"


def test_doctor_profiles_are_public(registered):
    assert registered.get_doctor("doctor-2").profile.name == "Dr. B"


def test_duplicate_doctor_registration(service):
    service.register_doctor("doctor-1", make_doctor_profile())

    with pytest.raises(AlreadyRegistered):
        service.register_doctor("doctor-1", make_doctor_profile(name="Again"))


def test_doctor_edits_own_profile(service):
    service.register_doctor("doctor-2", make_doctor_profile(name="Dr. Jane"))

    service.edit_doctor(
        "doctor-2", "doctor-2", make_doctor_profile(name="Dr. Jane Updated")
    )

    assert service.get_doctor("doctor-2").profile.name == "Dr. Jane Updated"


def test_doctor_cannot_edit_another_doctor(registered):
    snapshot = registered.store.export()

    with pytest.raises(Unauthorized):
        registered.edit_doctor(
            "doctor-1", "doctor-2", make_doctor_profile(name="Dr. B Updated")
        )

    assert registered.get_doctor("doctor-2").profile.name == "Dr. B"
    assert registered.store.export() == snapshot


def test_granted_doctor_still_cannot_edit_another_doctor(registered):
    registered.grant_permission("patient-1", "doctor-1")

    with pytest.raises(Unauthorized):
        registered.edit_doctor("doctor-1", "doctor-2", make_doctor_profile())


def test_unregistered_doctor_edit(service):
    with pytest.raises(NotRegistered):
        service.edit_doctor("doctor-9", "doctor-9", make_doctor_profile())


def test_unknown_doctor_is_not_found(service):
    with pytest.raises(NotFound):
        service.get_doctor("doctor-9")


def test_doctor_enumeration(registered):
    assert registered.list_doctor_identities() == ["doctor-1", "doctor-2", "doctor-3"]
    assert registered.count_doctors() == 3
