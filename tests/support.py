"""Test database and direct-to-database helpers shared by the test modules."""
from sqlalchemy.orm import sessionmaker

from registrar.db.session import create_db_engine
from registrar.models.contract import Contract
from registrar.models.enrollment import LIVE_STATUSES, Enrollment, EnrollmentStatus

TEST_DB_FILE = "test_registrar.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

PASSWORD = "password123"

engine = create_db_engine(TEST_DB_URL)
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)


def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def add_enrollment(
    student_id: int,
    course_id: int,
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
    **fields,
) -> int:
    """Insert an enrollment directly, bypassing the services (fixture data only)."""
    with TestingSessionLocal() as db:
        enrollment = Enrollment(
            student_id=student_id, course_id=course_id, status=status, **fields
        )
        db.add(enrollment)
        db.commit()
        return enrollment.id


def get_enrollment_row(enrollment_id: int) -> Enrollment:
    with TestingSessionLocal() as db:
        enrollment = db.get(Enrollment, enrollment_id)
        db.expunge(enrollment)
        return enrollment


def contracts_for(enrollment_id: int) -> list[Contract]:
    with TestingSessionLocal() as db:
        rows = db.query(Contract).filter(Contract.enrollment_id == enrollment_id).all()
        for row in rows:
            db.expunge(row)
        return rows


def live_count(student_id: int) -> int:
    with TestingSessionLocal() as db:
        return (
            db.query(Enrollment)
            .filter(
                Enrollment.student_id == student_id,
                Enrollment.status.in_(list(LIVE_STATUSES)),
                Enrollment.deleted_at.is_(None),
            )
            .count()
        )
