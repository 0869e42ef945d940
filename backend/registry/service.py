"""Operation surface of the registry.

Each public method is one atomic operation: it opens a single store
transaction, runs the authorization checks and the registry logic against it,
and commits only if nothing raised. Successful mutations and cross-identity
record reads are appended to the audit trail.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import ContextManager, Iterator, Optional
from uuid import uuid4

from . import appointments, doctors, patients, permissions, schemas
from .config import Settings
from .errors import AccessDenied, Unauthorized
from .storage import (
    AuditLogger,
    EncryptedSnapshot,
    Keyring,
    LedgerStore,
    Transaction,
    stable_hash,
)

logger = logging.getLogger(__name__)


class RecordService:
    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        audit_logger: Optional[AuditLogger] = None,
    ) -> None:
        self.store = store or LedgerStore()
        self.audit_logger = audit_logger or AuditLogger()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordService":
        snapshot = None
        if settings.persistent:
            keyring = Keyring(settings.keyring_path)
            snapshot = EncryptedSnapshot(settings.snapshot_path, keyring.get_key)
        return cls(
            store=LedgerStore(snapshot),
            audit_logger=AuditLogger(settings.audit_log_path),
        )

    def _event(
        self, actor: str, action: str, subject: Optional[str]
    ) -> schemas.AuditEvent:
        event_timestamp = datetime.now(timezone.utc)
        payload_hash = stable_hash(
            actor, action, subject or "", event_timestamp.isoformat()
        )
        return schemas.AuditEvent(
            id=str(uuid4()),
            actor=actor,
            action=action,
            subject=subject,
            timestamp=event_timestamp,
            payload_hash=payload_hash,
        )

    @contextmanager
    def _operation(
        self,
        caller: str,
        action: str,
        subject: Optional[str] = None,
        audited: bool = True,
    ) -> Iterator[Transaction]:
        try:
            with self.store.transaction(self.audit_logger) as tx:
                yield tx
                if audited:
                    tx.record(self._event(caller, action, subject))
        except (Unauthorized, AccessDenied) as error:
            logger.warning("%s denied for %s: %s", action, caller, error)
            raise
        if tx.audit_events:
            logger.info("%s by %s on %s", action, caller, subject or "-")

    def _audit_appointment_read(
        self,
        tx: Transaction,
        caller: str,
        action: str,
        appointment: schemas.Appointment,
    ) -> None:
        if caller not in (appointment.doctor, appointment.patient):
            tx.record(self._event(caller, action, appointment.patient))

    def _read(self) -> ContextManager[Transaction]:
        return self.store.transaction()

    # Patients

    def register_patient(
        self, caller: str, profile: schemas.PatientProfile
    ) -> schemas.PatientRecord:
        with self._operation(caller, "register_patient", caller) as tx:
            return patients.register(tx, caller, profile)

    def edit_patient(
        self, caller: str, profile: schemas.PatientProfile
    ) -> schemas.PatientRecord:
        with self._operation(caller, "edit_patient", caller) as tx:
            return patients.edit(tx, caller, profile)

    def get_patient(self, caller: str, identity: str) -> schemas.PatientRecord:
        with self._operation(
            caller, "get_patient", identity, audited=caller != identity
        ) as tx:
            return patients.get(tx, caller, identity)

    def get_patient_demographics(
        self, caller: str, identity: str
    ) -> schemas.PatientDemographics:
        with self._operation(
            caller, "get_patient_demographics", identity, audited=caller != identity
        ) as tx:
            return patients.demographics(tx, caller, identity)

    def get_patient_medical(self, caller: str, identity: str) -> schemas.PatientMedical:
        with self._operation(
            caller, "get_patient_medical", identity, audited=caller != identity
        ) as tx:
            return patients.medical(tx, caller, identity)

    def list_patient_identities(self) -> list[str]:
        with self._read() as tx:
            return patients.list_identities(tx)

    def count_patients(self) -> int:
        with self._read() as tx:
            return patients.count(tx)

    def upload_patient_file(self, caller: str, reference: str) -> list[str]:
        with self._operation(caller, "upload_patient_file", caller) as tx:
            return patients.upload_file(tx, caller, reference)

    def upload_patient_file_by_doctor(
        self, caller: str, patient: str, reference: str
    ) -> list[str]:
        with self._operation(caller, "upload_patient_file_by_doctor", patient) as tx:
            return patients.upload_file_by_doctor(tx, caller, patient, reference)

    def list_patient_files(self, caller: str, patient: str) -> list[str]:
        with self._operation(
            caller, "list_patient_files", patient, audited=caller != patient
        ) as tx:
            return patients.files(tx, caller, patient)

    # Doctors

    def register_doctor(
        self, caller: str, profile: schemas.DoctorProfile
    ) -> schemas.DoctorRecord:
        with self._operation(caller, "register_doctor", caller) as tx:
            return doctors.register(tx, caller, profile)

    def edit_doctor(
        self, caller: str, identity: str, profile: schemas.DoctorProfile
    ) -> schemas.DoctorRecord:
        with self._operation(caller, "edit_doctor", identity) as tx:
            return doctors.edit(tx, caller, identity, profile)

    def get_doctor(self, identity: str) -> schemas.DoctorRecord:
        with self._read() as tx:
            return doctors.get(tx, identity)

    def list_doctor_identities(self) -> list[str]:
        with self._read() as tx:
            return doctors.list_identities(tx)

    def count_doctors(self) -> int:
        with self._read() as tx:
            return doctors.count(tx)

    # Permissions

    def grant_permission(self, caller: str, doctor: str) -> None:
        with self._operation(caller, "grant_permission", doctor) as tx:
            permissions.grant(tx, caller, doctor)

    def revoke_permission(self, caller: str, doctor: str) -> None:
        with self._operation(caller, "revoke_permission", doctor) as tx:
            permissions.revoke(tx, caller, doctor)

    def is_permitted(self, patient: str, doctor: str) -> bool:
        with self._read() as tx:
            return permissions.permitted(tx, patient, doctor)

    def list_permitted_doctors(self, caller: str) -> list[str]:
        with self._read() as tx:
            return permissions.permitted_doctors(tx, caller)

    # Appointments

    def create_appointment(
        self, caller: str, request: schemas.AppointmentRequest
    ) -> int:
        with self._operation(caller, "create_appointment", request.patient) as tx:
            return appointments.create(tx, caller, request).id

    def list_appointments_for_doctor(self, caller: str) -> list[int]:
        with self._read() as tx:
            return appointments.for_doctor(tx, caller)

    def list_appointments_for_patient(self, caller: str, patient: str) -> list[int]:
        with self._operation(
            caller, "list_appointments_for_patient", patient, audited=caller != patient
        ) as tx:
            return appointments.for_patient(tx, caller, patient)

    def get_appointment(self, caller: str, appointment_id: int) -> schemas.Appointment:
        with self._operation(
            caller, "get_appointment", str(appointment_id), audited=False
        ) as tx:
            appointment = appointments.get(tx, caller, appointment_id)
            self._audit_appointment_read(tx, caller, "get_appointment", appointment)
            return appointment

    def attach_appointment_file(
        self, caller: str, appointment_id: int, reference: str
    ) -> list[str]:
        with self._operation(
            caller, "attach_appointment_file", str(appointment_id)
        ) as tx:
            return appointments.attach_file(tx, caller, appointment_id, reference)

    def list_appointment_files(self, caller: str, appointment_id: int) -> list[str]:
        with self._operation(
            caller, "list_appointment_files", str(appointment_id), audited=False
        ) as tx:
            appointment = appointments.get(tx, caller, appointment_id)
            self._audit_appointment_read(
                tx, caller, "list_appointment_files", appointment
            )
            return appointment.files

    def count_appointments(self) -> int:
        with self._read() as tx:
            return appointments.count(tx)
