import os

# Must be set before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["LOGIN_RATE_LIMIT"] = "1000"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic.main import app
from clinic.core.config import settings
from clinic.core.database import get_db, Base
from clinic.models import Admin, Doctor, Patient
from clinic.core.security import get_password_hash
from clinic.services.token_service import TokenService

from .helpers import PASSWORD

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture
def token_service(db_session):
    return TokenService(
        db_session,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_days=settings.TOKEN_EXPIRE_DAYS,
    )

def _add(db, entity):
    db.add(entity)
    db.commit()
    db.refresh(entity)
    return entity

@pytest.fixture
def admin(db_session):
    return _add(db_session, Admin(
        username="clinicadmin",
        password_hash=get_password_hash(PASSWORD),
    ))

@pytest.fixture
def doctor(db_session):
    return _add(db_session, Doctor(
        name="Dr. Alice Grey",
        specialty="Cardiology",
        email="alice.grey@clinic.test",
        phone="5550001111",
        password_hash=get_password_hash(PASSWORD),
        available_times=["09:00", "10:00"],
    ))

@pytest.fixture
def afternoon_doctor(db_session):
    return _add(db_session, Doctor(
        name="Dr. Bob Stone",
        specialty="Dermatology",
        email="bob.stone@clinic.test",
        phone="5550002222",
        password_hash=get_password_hash(PASSWORD),
        available_times=["13:00", "14:00", "15:00"],
    ))

@pytest.fixture
def patient(db_session):
    return _add(db_session, Patient(
        name="Jane Doe",
        email="jane.doe@example.com",
        phone="5551234567",
        address="1 Main Street",
        password_hash=get_password_hash(PASSWORD),
    ))

@pytest.fixture
def other_patient(db_session):
    return _add(db_session, Patient(
        name="John Roe",
        email="john.roe@example.com",
        phone="5557654321",
        address="2 High Street",
        password_hash=get_password_hash(PASSWORD),
    ))

@pytest.fixture
def admin_token(token_service, admin):
    return token_service.issue(admin.username)

@pytest.fixture
def doctor_token(token_service, doctor):
    return token_service.issue(doctor.email)

@pytest.fixture
def patient_token(token_service, patient):
    return token_service.issue(patient.email)

@pytest.fixture
def other_patient_token(token_service, other_patient):
    return token_service.issue(other_patient.email)
