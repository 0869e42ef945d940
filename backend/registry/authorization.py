"""Access decisions shared by every gated read and write.

All predicates read the transaction they are given, so a grant or revoke
committed by the previous operation is honoured by the next one.
"""
from __future__ import annotations

from typing import Any

from . import keys
from .errors import AccessDenied, NotFound, NotRegistered, Unauthorized
from .storage import Transaction


def is_registered_patient(tx: Transaction, identity: str) -> bool:
    return keys.patient(identity) in tx


def is_registered_doctor(tx: Transaction, identity: str) -> bool:
    return keys.doctor(identity) in tx


def is_permitted(tx: Transaction, patient: str, doctor: str) -> bool:
    return bool(tx.get(keys.permission(patient, doctor), False))


def can_access_patient_record(tx: Transaction, caller: str, patient: str) -> bool:
    if caller == patient:
        return True
    return is_registered_doctor(tx, caller) and is_permitted(tx, patient, caller)


def can_access_appointment(tx: Transaction, caller: str, appointment: dict[str, Any]) -> bool:
    if caller == appointment["doctor"]:
        return True
    return can_access_patient_record(tx, caller, appointment["patient"])


def require_patient_exists(tx: Transaction, identity: str) -> None:
    if not is_registered_patient(tx, identity):
        raise NotFound(f"Patient {identity} not found")


def require_patient_access(tx: Transaction, caller: str, patient: str) -> None:
    """Raise unless ``caller`` may read or append to ``patient``'s record."""

    require_patient_exists(tx, patient)
    if not can_access_patient_record(tx, caller, patient):
        raise AccessDenied("Access denied: no permission granted by patient")


def require_registered_patient(tx: Transaction, caller: str) -> None:
    if not is_registered_patient(tx, caller):
        raise NotRegistered("Not registered patient")


def require_registered_doctor(tx: Transaction, caller: str) -> None:
    if not is_registered_doctor(tx, caller):
        raise Unauthorized("Not registered doctor")


def require_owner(caller: str, owner: str, what: str) -> None:
    """Identity equality only; no grant widens this check."""

    if caller != owner:
        raise Unauthorized(f"Unauthorized: caller does not own {what}")
