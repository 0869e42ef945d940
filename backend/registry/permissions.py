"""Permission ledger: patient-authored grants keyed by (patient, doctor)."""
from __future__ import annotations

from . import keys
from .authorization import (
    is_permitted,
    is_registered_doctor,
    require_registered_patient,
)
from .errors import NotRegistered
from .storage import Transaction


def grant(tx: Transaction, caller: str, doctor: str) -> bool:
    """Activate the grant. Returns ``False`` when it was already active."""

    require_registered_patient(tx, caller)
    if not is_registered_doctor(tx, doctor):
        raise NotRegistered(f"Doctor {doctor} is not registered")
    if is_permitted(tx, caller, doctor):
        return False
    key = keys.permission(caller, doctor)
    if key not in tx:
        granted = tx.get(keys.granted_doctors(caller), [])
        granted.append(doctor)
        tx.put(keys.granted_doctors(caller), granted)
    tx.put(key, True)
    return True


def revoke(tx: Transaction, caller: str, doctor: str) -> bool:
    """Flip an active grant to revoked. Absent or revoked grants are untouched."""

    if not is_permitted(tx, caller, doctor):
        return False
    tx.put(keys.permission(caller, doctor), False)
    return True


def permitted(tx: Transaction, patient: str, doctor: str) -> bool:
    return is_permitted(tx, patient, doctor)


def permitted_doctors(tx: Transaction, caller: str) -> list[str]:
    return [
        doctor
        for doctor in tx.get(keys.granted_doctors(caller), [])
        if is_permitted(tx, caller, doctor)
    ]
