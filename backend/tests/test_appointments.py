import pytest

from registry.errors import AccessDenied, NotFound, Unauthorized

from .factories import make_appointment_request


def test_doctor_creates_and_reads_appointment(registered):
    appointment_id = registered.create_appointment(
        "doctor-1", make_appointment_request("patient-1")
    )

    ids = registered.list_appointments_for_doctor("doctor-1")
    appointment = registered.get_appointment("doctor-1", ids[0])

    assert ids == [appointment_id]
    assert appointment.diagnosis == "Skin Infection"
    assert appointment.medication == "Amoxicillin"
    assert appointment.doctor == "doctor-1"
    assert appointment.patient == "patient-1"
    assert appointment.files == []


def test_ids_are_global_and_strictly_increasing(registered):
    created = [
        ("doctor-1", registered.create_appointment("doctor-1", make_appointment_request("patient-1"))),
        ("doctor-2", registered.create_appointment("doctor-2", make_appointment_request("patient-1"))),
        ("doctor-1", registered.create_appointment("doctor-1", make_appointment_request("patient-2"))),
        ("doctor-2", registered.create_appointment("doctor-2", make_appointment_request("patient-2"))),
    ]

    ids = [appointment_id for _, appointment_id in created]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert ids[0] == 0
    assert registered.list_appointments_for_doctor("doctor-1") == [ids[0], ids[2]]
    assert registered.list_appointments_for_doctor("doctor-2") == [ids[1], ids[3]]
    assert registered.list_appointments_for_doctor("doctor-3") == []
    assert registered.count_appointments() == 4


def test_only_registered_doctors_create_appointments(registered):
    snapshot = registered.store.export()

    with pytest.raises(Unauthorized):
        registered.create_appointment("patient-2", make_appointment_request("patient-1"))

    assert registered.store.export() == snapshot


def test_appointment_for_unknown_patient(registered):
    snapshot = registered.store.export()

    with pytest.raises(NotFound):
        registered.create_appointment("doctor-1", make_appointment_request("ghost"))

    assert registered.store.export() == snapshot
    assert registered.count_appointments() == 0


def test_failed_create_does_not_consume_an_id(registered):
    with pytest.raises(NotFound):
        registered.create_appointment("doctor-1", make_appointment_request("ghost"))

    assert registered.create_appointment(
        "doctor-1", make_appointment_request("patient-1")
    ) == 0


def test_appointment_read_access(registered):
    appointment_id = registered.create_appointment(
        "doctor-1", make_appointment_request("patient-1")
    )

    assert registered.get_appointment("patient-1", appointment_id).patient == "patient-1"
    with pytest.raises(AccessDenied):
        registered.get_appointment("doctor-2", appointment_id)
    with pytest.raises(AccessDenied):
        registered.get_appointment("patient-2", appointment_id)

    registered.grant_permission("patient-1", "doctor-2")
    assert registered.get_appointment("doctor-2", appointment_id).id == appointment_id


def test_unknown_appointment(registered):
    with pytest.raises(NotFound):
        registered.get_appointment("doctor-1", 42)
    with pytest.raises(NotFound):
        registered.attach_appointment_file("doctor-1", 42, "QmX")


def test_attach_and_list_appointment_files(registered):
    appointment_id = registered.create_appointment(
        "doctor-2", make_appointment_request("patient-1", diagnosis="Checkup")
    )

    registered.attach_appointment_file("doctor-2", appointment_id, "Qm123")

    assert registered.list_appointment_files("doctor-2", appointment_id) == ["Qm123"]
    assert registered.list_appointment_files("patient-1", appointment_id) == ["Qm123"]
    with pytest.raises(AccessDenied):
        registered.list_appointment_files("doctor-3", appointment_id)


def test_only_creator_attaches_files(registered):
    appointment_id = registered.create_appointment(
        "doctor-1", make_appointment_request("patient-1")
    )
    registered.grant_permission("patient-1", "doctor-2")

    with pytest.raises(Unauthorized):
        registered.attach_appointment_file("doctor-2", appointment_id, "QmX")
    with pytest.raises(Unauthorized):
        registered.attach_appointment_file("patient-1", appointment_id, "QmX")

    assert registered.list_appointment_files("doctor-1", appointment_id) == []


def test_patient_appointments(registered):
    first = registered.create_appointment("doctor-1", make_appointment_request("patient-1"))
    registered.create_appointment("doctor-2", make_appointment_request("patient-2"))
    third = registered.create_appointment("doctor-3", make_appointment_request("patient-1"))

    assert registered.list_appointments_for_patient("patient-1", "patient-1") == [first, third]
    with pytest.raises(AccessDenied):
        registered.list_appointments_for_patient("doctor-1", "patient-1")
    with pytest.raises(NotFound):
        registered.list_appointments_for_patient("doctor-1", "ghost")
