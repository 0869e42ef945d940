"""Appointment store.

Appointments live in an arena of sequential integer ids shared by every
doctor. Per-doctor and per-patient indices hold the ids in creation order.
"""
from __future__ import annotations

from . import keys, schemas
from .authorization import (
    can_access_appointment,
    require_owner,
    require_patient_access,
    require_patient_exists,
    require_registered_doctor,
)
from .errors import AccessDenied, NotFound
from .storage import Transaction

FIRST_APPOINTMENT_ID = 0


def _load(tx: Transaction, appointment_id: int) -> schemas.Appointment:
    payload = tx.get(keys.appointment(appointment_id))
    if payload is None:
        raise NotFound(f"Appointment {appointment_id} not found")
    return schemas.Appointment.model_validate(payload)


def _save(tx: Transaction, appointment: schemas.Appointment) -> None:
    tx.put(keys.appointment(appointment.id), appointment.model_dump(mode="json"))


def _append_index(tx: Transaction, key: str, appointment_id: int) -> None:
    ids = tx.get(key, [])
    ids.append(appointment_id)
    tx.put(key, ids)


def create(
    tx: Transaction, caller: str, request: schemas.AppointmentRequest
) -> schemas.Appointment:
    require_registered_doctor(tx, caller)
    require_patient_exists(tx, request.patient)
    appointment_id = tx.get(keys.APPOINTMENT_COUNTER, FIRST_APPOINTMENT_ID)
    appointment = schemas.Appointment(
        id=appointment_id, doctor=caller, **request.model_dump()
    )
    _save(tx, appointment)
    tx.put(keys.APPOINTMENT_COUNTER, appointment_id + 1)
    _append_index(tx, keys.doctor_appointments(caller), appointment_id)
    _append_index(tx, keys.patient_appointments(request.patient), appointment_id)
    return appointment


def for_doctor(tx: Transaction, caller: str) -> list[int]:
    return tx.get(keys.doctor_appointments(caller), [])


def for_patient(tx: Transaction, caller: str, patient: str) -> list[int]:
    require_patient_access(tx, caller, patient)
    return tx.get(keys.patient_appointments(patient), [])


def get(tx: Transaction, caller: str, appointment_id: int) -> schemas.Appointment:
    appointment = _load(tx, appointment_id)
    if not can_access_appointment(tx, caller, appointment.model_dump()):
        raise AccessDenied("Access denied: no permission granted by patient")
    return appointment


def attach_file(
    tx: Transaction, caller: str, appointment_id: int, reference: str
) -> list[str]:
    appointment = _load(tx, appointment_id)
    require_owner(caller, appointment.doctor, f"appointment {appointment_id}")
    appointment.files.append(reference)
    _save(tx, appointment)
    return appointment.files


def count(tx: Transaction) -> int:
    return tx.get(keys.APPOINTMENT_COUNTER, FIRST_APPOINTMENT_ID) - FIRST_APPOINTMENT_ID
