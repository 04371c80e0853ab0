import os
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from registrar.core.deps import get_db
from registrar.core.security import hash_password
from registrar.db.base import Base
from registrar.main import app
from registrar.models.contract import Contract
from registrar.models.contract_template import ContractTemplate
from registrar.models.course import Course
from registrar.models.enrollment import Enrollment
from registrar.models.student import Student
from registrar.models.user import ROLE_ADMIN, ROLE_STUDENT, User
from tests.support import PASSWORD, TEST_DB_FILE, TestingSessionLocal, engine

# hashing is slow on purpose; do it once for every seeded account
PASSWORD_HASH = hash_password(PASSWORD)

TEMPLATE_CONTENT = (
    "<html><body>"
    "<h1>{{institutionName}}</h1>"
    "<p>{{studentName}} - {{courseName}} ({{duration}})</p>"
    "<p>Period: {{semester}}/{{year}}</p>"
    "</body></html>"
)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed_data():
    """Seed a clean minimal dataset for each test."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(Contract).delete()
        db.query(Enrollment).delete()
        db.query(ContractTemplate).delete()
        db.query(User).delete()
        db.query(Student).delete()
        db.query(Course).delete()
        db.commit()

        ana = Student(name="Ana Souza", email="ana@example.com")
        bruno = Student(name="Bruno Lima", email="bruno@example.com")
        db.add_all([ana, bruno])
        db.flush()

        admin_user = User(
            email="admin@example.com",
            full_name="Admin",
            role=ROLE_ADMIN,
            hashed_password=PASSWORD_HASH,
        )
        ana_user = User(
            email="ana@example.com",
            full_name="Ana Souza",
            role=ROLE_STUDENT,
            student_id=ana.id,
            hashed_password=PASSWORD_HASH,
        )
        bruno_user = User(
            email="bruno@example.com",
            full_name="Bruno Lima",
            role=ROLE_STUDENT,
            student_id=bruno.id,
            hashed_password=PASSWORD_HASH,
        )
        db.add_all([admin_user, ana_user, bruno_user])

        systems = Course(name="Systems Analysis", duration_semesters=5)
        nursing = Course(name="Nursing", duration_semesters=8)
        db.add_all([systems, nursing])

        template = ContractTemplate(name="Enrollment contract", content=TEMPLATE_CONTENT)
        db.add(template)
        db.commit()

        seed = SimpleNamespace(
            ana_id=ana.id,
            bruno_id=bruno.id,
            admin_user_id=admin_user.id,
            ana_user_id=ana_user.id,
            bruno_user_id=bruno_user.id,
            systems_id=systems.id,
            nursing_id=nursing.id,
            template_id=template.id,
        )
    finally:
        db.close()

    yield seed


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

