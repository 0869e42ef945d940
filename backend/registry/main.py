"""FastAPI execution context for the medical records registry.

The HTTP layer only resolves the caller identity and forwards the call to the
registry service; every authorization decision is made by the service.
"""
from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader

from . import schemas
from .config import load_settings
from .errors import RegistryError
from .service import RecordService


settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Medical Records Registry API",
    description=(
        "Patient and doctor self-registration with patient-controlled permission "
        "grants gating every cross-identity read of a medical record."
    ),
    version="0.1.0",
)

service = RecordService.from_settings(settings)

caller_identity = APIKeyHeader(name="X-Caller-Identity", auto_error=False)


def get_service() -> RecordService:
    return service


def get_caller(identity: str = Depends(caller_identity)) -> str:
    if not identity:
        raise HTTPException(status_code=401, detail="Caller identity required")
    return identity


@app.exception_handler(RegistryError)
async def registry_error_handler(request: Request, error: RegistryError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": str(error), "error": type(error).__name__},
    )


@app.post("/patients", response_model=schemas.PatientRecord, status_code=201)
async def register_patient(
    payload: schemas.PatientProfile,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.PatientRecord:
    return registry.register_patient(caller, payload)


@app.put("/patients/me", response_model=schemas.PatientRecord)
async def edit_patient(
    payload: schemas.PatientProfile,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.PatientRecord:
    return registry.edit_patient(caller, payload)


@app.get("/patients", response_model=list[str])
async def list_patients(
    registry: RecordService = Depends(get_service),
) -> list[str]:
    """Registered patient identities in registration order."""

    return registry.list_patient_identities()


@app.get("/patients/{identity}", response_model=schemas.PatientRecord)
async def get_patient(
    identity: str,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.PatientRecord:
    return registry.get_patient(caller, identity)


@app.get("/patients/{identity}/demographics", response_model=schemas.PatientDemographics)
async def get_patient_demographics(
    identity: str,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.PatientDemographics:
    return registry.get_patient_demographics(caller, identity)


@app.get("/patients/{identity}/medical", response_model=schemas.PatientMedical)
async def get_patient_medical(
    identity: str,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.PatientMedical:
    return registry.get_patient_medical(caller, identity)


@app.post("/patients/{identity}/files", response_model=list[str], status_code=201)
async def upload_patient_file(
    identity: str,
    payload: schemas.FileUpload,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> list[str]:
    """Append a file reference; patients upload to their own record."""

    if caller == identity:
        return registry.upload_patient_file(caller, payload.reference)
    return registry.upload_patient_file_by_doctor(caller, identity, payload.reference)


@app.get("/patients/{identity}/files", response_model=list[str])
async def list_patient_files(
    identity: str,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> list[str]:
    return registry.list_patient_files(caller, identity)


@app.get("/patients/{identity}/appointments", response_model=list[int])
async def list_patient_appointments(
    identity: str,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> list[int]:
    return registry.list_appointments_for_patient(caller, identity)


@app.post("/doctors", response_model=schemas.DoctorRecord, status_code=201)
async def register_doctor(
    payload: schemas.DoctorProfile,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.DoctorRecord:
    return registry.register_doctor(caller, payload)


@app.put("/doctors/{identity}", response_model=schemas.DoctorRecord)
async def edit_doctor(
    identity: str,
    payload: schemas.DoctorProfile,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.DoctorRecord:
    return registry.edit_doctor(caller, identity, payload)


@app.get("/doctors", response_model=list[str])
async def list_doctors(
    registry: RecordService = Depends(get_service),
) -> list[str]:
    return registry.list_doctor_identities()


@app.get("/doctors/{identity}", response_model=schemas.DoctorRecord)
async def get_doctor(
    identity: str,
    registry: RecordService = Depends(get_service),
) -> schemas.DoctorRecord:
    """Doctor profiles are public."""

    return registry.get_doctor(identity)


@app.put("/permissions/{doctor}", status_code=204)
async def grant_permission(
    doctor: str,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> Response:
    registry.grant_permission(caller, doctor)
    return Response(status_code=204)


@app.delete("/permissions/{doctor}", status_code=204)
async def revoke_permission(
    doctor: str,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> Response:
    registry.revoke_permission(caller, doctor)
    return Response(status_code=204)


@app.get("/permissions", response_model=list[str])
async def list_permitted_doctors(
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> list[str]:
    """Doctors currently holding a grant from the caller."""

    return registry.list_permitted_doctors(caller)


@app.get("/permissions/{patient}/{doctor}", response_model=schemas.PermissionStatus)
async def get_permission(
    patient: str,
    doctor: str,
    registry: RecordService = Depends(get_service),
) -> schemas.PermissionStatus:
    return schemas.PermissionStatus(
        patient=patient,
        doctor=doctor,
        granted=registry.is_permitted(patient, doctor),
    )


@app.post("/appointments", response_model=schemas.AppointmentCreated, status_code=201)
async def create_appointment(
    payload: schemas.AppointmentRequest,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.AppointmentCreated:
    return schemas.AppointmentCreated(id=registry.create_appointment(caller, payload))


@app.get("/appointments", response_model=list[int])
async def list_doctor_appointments(
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> list[int]:
    """Appointment ids created by the caller, oldest first."""

    return registry.list_appointments_for_doctor(caller)


@app.get("/appointments/{appointment_id}", response_model=schemas.Appointment)
async def get_appointment(
    appointment_id: int,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> schemas.Appointment:
    return registry.get_appointment(caller, appointment_id)


@app.post(
    "/appointments/{appointment_id}/files",
    response_model=list[str],
    status_code=201,
)
async def attach_appointment_file(
    appointment_id: int,
    payload: schemas.FileUpload,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> list[str]:
    return registry.attach_appointment_file(caller, appointment_id, payload.reference)


@app.get("/appointments/{appointment_id}/files", response_model=list[str])
async def list_appointment_files(
    appointment_id: int,
    caller: str = Depends(get_caller),
    registry: RecordService = Depends(get_service),
) -> list[str]:
    return registry.list_appointment_files(caller, appointment_id)


@app.get("/counts/patients", response_model=schemas.Count)
async def count_patients(
    registry: RecordService = Depends(get_service),
) -> schemas.Count:
    return schemas.Count(count=registry.count_patients())


@app.get("/counts/doctors", response_model=schemas.Count)
async def count_doctors(
    registry: RecordService = Depends(get_service),
) -> schemas.Count:
    return schemas.Count(count=registry.count_doctors())


@app.get("/counts/appointments", response_model=schemas.Count)
async def count_appointments(
    registry: RecordService = Depends(get_service),
) -> schemas.Count:
    return schemas.Count(count=registry.count_appointments())
