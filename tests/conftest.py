import sys
import os

# Add the current directory to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from datetime import date, time
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base_class import Base
# Import all models to ensure their tables are created
import app.db.base  # noqa: F401
from app.models.user import User, Role
from app.models.specialty import Specialty
from app.models.professional import Professional
from app.models.client import Client
from app.models.appointment import Appointment
from app.core.security import create_access_token


# Create an in-memory SQLite database for testing
@pytest.fixture(scope="session")
def engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="session")
def TestingSessionLocal(engine):
    """Create a session factory for the test database."""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(autouse=True)
def clean_tables(engine):
    """Start every test with empty tables (the in-memory DB lives for the session)."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# Override the database dependency to use our test database
@pytest.fixture
def override_get_db(TestingSessionLocal):
    """Override the database dependency to use our test database."""
    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()
    return _override_get_db


@pytest.fixture
def db_session(TestingSessionLocal):
    """Create a database session for each test."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(override_get_db, TestingSessionLocal):
    """Create a test client for API tests."""
    from fastapi.testclient import TestClient
    from app.main import app
    from app.db import get_db, get_session_factory

    # Override the database dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.state.agendas.clear()

    with TestClient(app) as client:
        yield client

    # Clear overrides and cached agendas after test
    app.dependency_overrides.clear()
    app.state.agendas.clear()


@pytest.fixture
def test_user(db_session):
    """Create an admin user without a linked professional."""
    user = User(
        name="Admin User",
        email="admin@example.com",
        role=Role.ADMIN,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_professional_user(db_session):
    """Create a test professional user."""
    user = User(
        name="Professional User",
        email="professional@example.com",
        role=Role.PROFESSIONAL,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_specialty(db_session):
    """Create a test specialty."""
    specialty = Specialty(name="Fisioterapia")
    db_session.add(specialty)
    db_session.commit()
    db_session.refresh(specialty)
    return specialty


@pytest.fixture
def test_professional(db_session, test_professional_user, test_specialty):
    """Create a test professional linked to the professional user."""
    professional = Professional(
        name="Test Professional",
        specialty_id=test_specialty.id,
        is_active=True,
        user_id=test_professional_user.id  # Link to the professional user
    )
    db_session.add(professional)
    db_session.commit()
    db_session.refresh(professional)
    return professional


@pytest.fixture
def test_client_record(db_session):
    """Create a test client (the person being attended)."""
    record = Client(
        cpf="52998224725",
        name="Maria Cliente",
        address="Rua A, 100",
        email="maria@example.com",
        phone="11912345678",
    )
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture
def test_appointment(db_session, test_professional_user, test_professional, test_client_record):
    """Create an active appointment on Wednesday 2024-06-12, 09:00-10:00."""
    appointment = Appointment(
        user_id=test_professional_user.id,
        professional_id=test_professional.id,
        client_id=test_client_record.id,
        date=date(2024, 6, 12),
        start_time=time(9, 0),
        end_time=time(10, 0),
        title="Sessão inicial",
        cancelled=False,
    )
    db_session.add(appointment)
    db_session.commit()
    db_session.refresh(appointment)
    return appointment


@pytest.fixture
def auth_headers(test_professional_user):
    token = create_access_token(test_professional_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(test_user):
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}
