"""Patient registry: self-registered profiles and their uploaded files."""
from __future__ import annotations

from . import keys, schemas
from .authorization import (
    is_permitted,
    is_registered_doctor,
    is_registered_patient,
    require_patient_access,
    require_patient_exists,
    require_registered_patient,
)
from .errors import AccessDenied, AlreadyRegistered
from .storage import Transaction


DEMOGRAPHIC_FIELDS = {
    "identification_number",
    "name",
    "phone",
    "sex",
    "date_of_birth",
    "address",
    "emergency_contact_name",
    "emergency_contact_phone",
}
MEDICAL_FIELDS = {
    "height",
    "weight",
    "blood_type",
    "allergies",
    "current_medication",
}


def _load(tx: Transaction, identity: str) -> schemas.PatientRecord:
    return schemas.PatientRecord.model_validate(tx.get(keys.patient(identity)))


def _save(tx: Transaction, record: schemas.PatientRecord) -> None:
    tx.put(keys.patient(record.identity), record.model_dump(mode="json"))


def register(
    tx: Transaction, caller: str, profile: schemas.PatientProfile
) -> schemas.PatientRecord:
    if is_registered_patient(tx, caller):
        raise AlreadyRegistered("Patient already registered")
    record = schemas.PatientRecord(identity=caller, profile=profile)
    _save(tx, record)
    identities = tx.get(keys.PATIENT_INDEX, [])
    identities.append(caller)
    tx.put(keys.PATIENT_INDEX, identities)
    return record


def edit(
    tx: Transaction, caller: str, profile: schemas.PatientProfile
) -> schemas.PatientRecord:
    """Overwrite every profile field; identity and files are kept."""

    require_registered_patient(tx, caller)
    record = _load(tx, caller)
    record.profile = profile
    _save(tx, record)
    return record


def get(tx: Transaction, caller: str, identity: str) -> schemas.PatientRecord:
    require_patient_access(tx, caller, identity)
    return _load(tx, identity)


def demographics(
    tx: Transaction, caller: str, identity: str
) -> schemas.PatientDemographics:
    record = get(tx, caller, identity)
    return schemas.PatientDemographics(
        identity=identity, **record.profile.model_dump(include=DEMOGRAPHIC_FIELDS)
    )


def medical(tx: Transaction, caller: str, identity: str) -> schemas.PatientMedical:
    record = get(tx, caller, identity)
    return schemas.PatientMedical(
        identity=identity, **record.profile.model_dump(include=MEDICAL_FIELDS)
    )


def list_identities(tx: Transaction) -> list[str]:
    return tx.get(keys.PATIENT_INDEX, [])


def count(tx: Transaction) -> int:
    return len(list_identities(tx))


def _append_file(tx: Transaction, identity: str, reference: str) -> list[str]:
    record = _load(tx, identity)
    record.files.append(reference)
    _save(tx, record)
    return record.files


def upload_file(tx: Transaction, caller: str, reference: str) -> list[str]:
    require_registered_patient(tx, caller)
    return _append_file(tx, caller, reference)


def upload_file_by_doctor(
    tx: Transaction, caller: str, patient: str, reference: str
) -> list[str]:
    require_patient_exists(tx, patient)
    if not (is_registered_doctor(tx, caller) and is_permitted(tx, patient, caller)):
        raise AccessDenied("Access denied: no permission granted by patient")
    return _append_file(tx, patient, reference)


def files(tx: Transaction, caller: str, patient: str) -> list[str]:
    return get(tx, caller, patient).files
