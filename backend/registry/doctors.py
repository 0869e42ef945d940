"""Doctor registry. Profiles are publicly readable and owner-edited."""
from __future__ import annotations

from . import keys, schemas
from .authorization import is_registered_doctor, require_owner
from .errors import AlreadyRegistered, NotFound, NotRegistered
from .storage import Transaction


def _save(tx: Transaction, record: schemas.DoctorRecord) -> None:
    tx.put(keys.doctor(record.identity), record.model_dump(mode="json"))


def register(
    tx: Transaction, caller: str, profile: schemas.DoctorProfile
) -> schemas.DoctorRecord:
    if is_registered_doctor(tx, caller):
        raise AlreadyRegistered("Doctor already registered")
    record = schemas.DoctorRecord(identity=caller, profile=profile)
    _save(tx, record)
    identities = tx.get(keys.DOCTOR_INDEX, [])
    identities.append(caller)
    tx.put(keys.DOCTOR_INDEX, identities)
    return record


def edit(
    tx: Transaction, caller: str, identity: str, profile: schemas.DoctorProfile
) -> schemas.DoctorRecord:
    """Only the profile owner may edit it, registered doctor or not."""

    require_owner(caller, identity, "doctor profile")
    if not is_registered_doctor(tx, caller):
        raise NotRegistered("Not registered doctor")
    record = schemas.DoctorRecord(identity=identity, profile=profile)
    _save(tx, record)
    return record


def get(tx: Transaction, identity: str) -> schemas.DoctorRecord:
    payload = tx.get(keys.doctor(identity))
    if payload is None:
        raise NotFound(f"Doctor {identity} not found")
    return schemas.DoctorRecord.model_validate(payload)


def list_identities(tx: Transaction) -> list[str]:
    return tx.get(keys.DOCTOR_INDEX, [])


def count(tx: Transaction) -> int:
    return len(list_identities(tx))
