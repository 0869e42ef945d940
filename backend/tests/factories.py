"""Builders for registry payloads used across the test suite."""
from registry import schemas


def make_patient_profile(**overrides) -> schemas.PatientProfile:
    fields = dict(
        identification_number="IC123",
        name="John Doe",
        phone="1234567890",
        sex="Male",
        date_of_birth="1990-01-01",
        height="180cm",
        weight="75kg",
        address="123 Street",
        blood_type="O+",
        allergies="Peanuts",
        current_medication="Ibuprofen",
        emergency_contact_name="Jane Doe",
        emergency_contact_phone="0987654321",
    )
    fields.update(overrides)
    return schemas.PatientProfile(**fields)


def make_doctor_profile(**overrides) -> schemas.DoctorProfile:
    fields = dict(
        identification_number="IC456",
        name="Dr. Smith",
        phone="9876543210",
        sex="Female",
        date_of_birth="1980-06-01",
        qualification="MBBS",
        specialization="Cardiology",
    )
    fields.update(overrides)
    return schemas.DoctorProfile(**fields)


def make_appointment_request(patient: str, **overrides) -> schemas.AppointmentRequest:
    fields = dict(
        patient=patient,
        date="2025-06-15",
        time="10:30 AM",
        diagnosis="Skin Infection",
        medication="Amoxicillin",
        treatment_plan="Topical Treatment",
        status="Pending",
    )
    fields.update(overrides)
    return schemas.AppointmentRequest(**fields)


def as_caller(identity: str) -> dict:
    return {"X-Caller-Identity": identity}
