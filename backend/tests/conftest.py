import pytest
from fastapi.testclient import TestClient

from registry.main import app, get_service
from registry.service import RecordService

from .factories import make_doctor_profile, make_patient_profile


@pytest.fixture
def service() -> RecordService:
    return RecordService()


@pytest.fixture
def registered(service):
    """Two patients and three doctors, no grants."""

    service.register_patient("patient-1", make_patient_profile(name="Alice"))
    service.register_patient("patient-2", make_patient_profile(name="Bob"))
    service.register_doctor("doctor-1", make_doctor_profile(name="Dr. A"))
    service.register_doctor("doctor-2", make_doctor_profile(name="Dr. B"))
    service.register_doctor("doctor-3", make_doctor_profile(name="Dr. C"))
    return service


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
