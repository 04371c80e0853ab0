import logging
from datetime import date

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from registrar.core.config import MAX_CURRENT_SEMESTER
from registrar.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionFailedError,
)
from registrar.db.session import transaction
from registrar.models.contract import Contract
from registrar.models.course import Course
from registrar.models.enrollment import LIVE_STATUSES, Enrollment, EnrollmentStatus
from registrar.models.user import User
from registrar.services import enrollment_state
from registrar.services.enrollment_state import Trigger
from registrar.services.uniqueness import ensure_no_live_enrollment, find_live_enrollment

logger = logging.getLogger(__name__)


def get_enrollment(db: Session, enrollment_id: int, include_deleted: bool = False) -> Enrollment:
    enrollment = db.get(Enrollment, enrollment_id)
    if enrollment is None or (enrollment.is_deleted and not include_deleted):
        raise NotFoundError("Enrollment not found")
    return enrollment


def lock_enrollment(db: Session, enrollment_id: int) -> Enrollment:
    """Load a live (non-deleted) enrollment row with a row lock held until commit."""
    enrollment = db.execute(
        select(Enrollment)
        .where(Enrollment.id == enrollment_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if enrollment is None or enrollment.is_deleted:
        raise NotFoundError("Enrollment not found")
    return enrollment


def list_enrollments(
    db: Session,
    status: EnrollmentStatus | None = None,
    student_id: int | None = None,
    course_id: int | None = None,
    include_deleted: bool = False,
) -> list[Enrollment]:
    stmt = select(Enrollment)
    if not include_deleted:
        stmt = stmt.where(Enrollment.not_deleted())
    if status is not None:
        stmt = stmt.where(Enrollment.status == status)
    if student_id is not None:
        stmt = stmt.where(Enrollment.student_id == student_id)
    if course_id is not None:
        stmt = stmt.where(Enrollment.course_id == course_id)
    return list(db.execute(stmt.order_by(Enrollment.id)).scalars())


def list_student_enrollments(db: Session, student_id: int) -> list[Enrollment]:
    """Enrollment history of a student, newest first."""
    return list(
        db.execute(
            select(Enrollment)
            .where(Enrollment.student_id == student_id, Enrollment.not_deleted())
            .order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc())
        ).scalars()
    )


def current_live_enrollment(db: Session, student_id: int) -> Enrollment | None:
    # derived on every read; there is no cached per-student status
    return find_live_enrollment(db, student_id)


def pending_acceptance_for_student(db: Session, student_id: int) -> Enrollment | None:
    """The student's reenrollment waiting to be accepted, if there is one."""
    return db.execute(
        select(Enrollment)
        .where(
            Enrollment.student_id == student_id,
            Enrollment.status == EnrollmentStatus.PENDING,
            Enrollment.period_semester.is_not(None),
            Enrollment.not_deleted(),
        )
        .order_by(Enrollment.created_at.desc(), Enrollment.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def create_enrollment(
    db: Session,
    student_id: int,
    course_id: int,
    enrollment_date: date | None = None,
) -> Enrollment:
    logger.info("creating enrollment student=%s course=%s", student_id, course_id)

    with transaction(db):
        course = db.get(Course, course_id)
        if course is None or course.is_deleted:
            raise NotFoundError("Course not found")

        ensure_no_live_enrollment(db, student_id, enrollment_state.INITIAL_STATUS)

        enrollment = Enrollment(
            student_id=student_id,
            course_id=course_id,
            status=enrollment_state.INITIAL_STATUS,
            enrollment_date=enrollment_date or date.today(),
            current_semester=0,
        )
        db.add(enrollment)
        db.flush()
        db.refresh(enrollment)
        logger.info("enrollment %s created (pending)", enrollment.id)

    return enrollment


def change_status(
    db: Session,
    enrollment_id: int,
    target: EnrollmentStatus,
    trigger: Trigger = Trigger.ADMIN,
) -> Enrollment:
    target = EnrollmentStatus(target)

    with transaction(db):
        enrollment = lock_enrollment(db, enrollment_id)
        current = enrollment.status
        enrollment_state.ensure_transition(current, target, trigger)

        if target in LIVE_STATUSES:
            ensure_no_live_enrollment(
                db, enrollment.student_id, target, exclude_enrollment_id=enrollment.id
            )

        enrollment.status = target
        db.flush()
        db.refresh(enrollment)
        logger.info(
            "enrollment %s: %s -> %s (%s)",
            enrollment.id,
            current.value,
            target.value,
            trigger.value,
        )

    return enrollment


def withdraw_enrollment(db: Session, enrollment_id: int, user: User) -> Enrollment:
    enrollment = get_enrollment(db, enrollment_id)
    if not user.owns_student_record(enrollment.student_id):
        logger.warning("user %s tried to withdraw enrollment %s", user.id, enrollment_id)
        raise ForbiddenError("You can only withdraw from your own enrollment")
    return change_status(db, enrollment_id, EnrollmentStatus.CANCELLED, Trigger.WITHDRAWAL)


def update_current_semester(db: Session, enrollment_id: int, current_semester: int) -> Enrollment:
    if not 0 <= current_semester <= MAX_CURRENT_SEMESTER:
        raise PreconditionFailedError(
            f"Current semester must be between 0 and {MAX_CURRENT_SEMESTER}"
        )

    with transaction(db):
        enrollment = lock_enrollment(db, enrollment_id)
        if (
            enrollment.status == EnrollmentStatus.ACTIVE
            and current_semester < enrollment.current_semester
        ):
            raise PreconditionFailedError(
                "Current semester cannot go backwards while the enrollment is active"
            )
        enrollment.current_semester = current_semester
        db.flush()
        db.refresh(enrollment)
        logger.info("enrollment %s current semester set to %s", enrollment.id, current_semester)

    return enrollment


def soft_delete_enrollment(db: Session, enrollment_id: int) -> None:
    with transaction(db):
        enrollment = lock_enrollment(db, enrollment_id)
        has_contracts = db.execute(
            select(
                exists().where(
                    Contract.enrollment_id == enrollment.id, Contract.not_deleted()
                )
            )
        ).scalar()
        if has_contracts:
            raise ConflictError("Enrollment has contracts and cannot be deleted")
        enrollment.soft_delete()
        logger.info("enrollment %s soft-deleted", enrollment.id)
