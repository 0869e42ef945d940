"""Key layout of the ledger store.

Identities are opaque strings and may contain the separator, so composite
keys encode their parts as a JSON array.
"""
import json

PATIENT_INDEX = "index:patients"
DOCTOR_INDEX = "index:doctors"
APPOINTMENT_COUNTER = "counter:appointments"


def _compose(kind: str, *parts) -> str:
    return f"{kind}:{json.dumps(list(parts))}"


def patient(identity: str) -> str:
    return _compose("patient", identity)


def doctor(identity: str) -> str:
    return _compose("doctor", identity)


def permission(patient_identity: str, doctor_identity: str) -> str:
    return _compose("permission", patient_identity, doctor_identity)


def granted_doctors(patient_identity: str) -> str:
    return _compose("index:grants", patient_identity)


def appointment(appointment_id: int) -> str:
    return _compose("appointment", appointment_id)


def doctor_appointments(doctor_identity: str) -> str:
    return _compose("index:doctor_appointments", doctor_identity)


def patient_appointments(patient_identity: str) -> str:
    return _compose("index:patient_appointments", patient_identity)
