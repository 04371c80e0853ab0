"""One live enrollment per student.

A partial unique index (student_id WHERE status IN live statuses) is not
portable, so the rule is checked here, inside the writer's transaction,
after locking the student's row. Every code path that creates an
enrollment or moves one into a live status must call
``ensure_no_live_enrollment`` before writing.
"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from registrar.core.errors import ConflictError, NotFoundError
from registrar.models.enrollment import LIVE_STATUSES, Enrollment, EnrollmentStatus
from registrar.models.student import Student

logger = logging.getLogger(__name__)


def lock_student(db: Session, student_id: int) -> Student:
    """Take the per-student lock that serializes live-enrollment writers."""
    student = db.execute(
        select(Student).where(Student.id == student_id).with_for_update()
    ).scalar_one_or_none()
    if student is None or student.is_deleted:
        raise NotFoundError("Student not found")
    return student


def find_live_enrollment(
    db: Session, student_id: int, exclude_enrollment_id: int | None = None
) -> Enrollment | None:
    stmt = select(Enrollment).where(
        Enrollment.student_id == student_id,
        Enrollment.status.in_(list(LIVE_STATUSES)),
        Enrollment.not_deleted(),
    )
    if exclude_enrollment_id is not None:
        stmt = stmt.where(Enrollment.id != exclude_enrollment_id)
    return db.execute(stmt.order_by(Enrollment.id).limit(1)).scalar_one_or_none()


def ensure_no_live_enrollment(
    db: Session,
    student_id: int,
    target_status: EnrollmentStatus,
    exclude_enrollment_id: int | None = None,
) -> None:
    if EnrollmentStatus(target_status) not in LIVE_STATUSES:
        return

    lock_student(db, student_id)
    existing = find_live_enrollment(db, student_id, exclude_enrollment_id)
    if existing is not None:
        logger.warning(
            "student %s already has live enrollment %s (%s)",
            student_id,
            existing.id,
            existing.status.value,
        )
        raise ConflictError(
            f"Student already has a live enrollment ({existing.status.value}). "
            "Finish or cancel the current enrollment before creating a new one."
        )
