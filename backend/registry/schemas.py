"""Pydantic schemas for the medical records registry."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PatientProfile(BaseModel):
    """Demographic and medical fields a patient registers and edits."""

    identification_number: str
    name: str
    phone: str
    sex: str
    date_of_birth: str
    height: str
    weight: str
    address: str
    blood_type: str
    allergies: str
    current_medication: str
    emergency_contact_name: str
    emergency_contact_phone: str


class PatientRecord(BaseModel):
    """Complete patient record keyed by the owning identity."""

    identity: str
    profile: PatientProfile
    files: List[str] = Field(
        default_factory=list,
        description="File references in upload order.",
    )


class PatientDemographics(BaseModel):
    """Demographic projection of a patient record."""

    identity: str
    identification_number: str
    name: str
    phone: str
    sex: str
    date_of_birth: str
    address: str
    emergency_contact_name: str
    emergency_contact_phone: str


class PatientMedical(BaseModel):
    """Medical projection of a patient record."""

    identity: str
    height: str
    weight: str
    blood_type: str
    allergies: str
    current_medication: str


class DoctorProfile(BaseModel):
    """Professional fields a doctor registers and edits."""

    identification_number: str
    name: str
    phone: str
    sex: str
    date_of_birth: str
    qualification: str
    specialization: str


class DoctorRecord(BaseModel):
    """Doctor profile keyed by the owning identity."""

    identity: str
    profile: DoctorProfile


class AppointmentRequest(BaseModel):
    """Payload a doctor submits to record an appointment."""

    patient: str = Field(..., description="Identity of a registered patient")
    date: str
    time: str
    diagnosis: str
    medication: str
    treatment_plan: str
    status: str = Field(..., description="Free-form status label")


class Appointment(BaseModel):
    """Stored appointment, owned by the doctor who created it."""

    id: int
    doctor: str
    patient: str
    date: str
    time: str
    diagnosis: str
    medication: str
    treatment_plan: str
    status: str
    files: List[str] = Field(default_factory=list)


class AppointmentCreated(BaseModel):
    """Identifier assigned to a new appointment."""

    id: int


class FileUpload(BaseModel):
    """Opaque reference produced by the external content store."""

    reference: str


class PermissionStatus(BaseModel):
    """Current grant state between a patient and a doctor."""

    patient: str
    doctor: str
    granted: bool


class Count(BaseModel):
    """Size of a registry collection."""

    count: int


class AuditEvent(BaseModel):
    """Structured audit trail event."""

    id: str
    actor: str
    action: str
    subject: Optional[str]
    timestamp: datetime
    payload_hash: str
