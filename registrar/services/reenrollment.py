"""Global reenrollment.

At the start of an academic period an administrator moves every active
enrollment in the system back to ``pending`` and stamps it with the new
period (``process_global_reenrollment``). Each student then accepts their
own enrollment (``accept_reenrollment``), which reactivates it and records
an accepted contract for that period. No contract exists until acceptance.

Both operations are single transactions: the batch either moves every
active enrollment or none, and acceptance either activates the enrollment
*and* inserts its contract or does neither.
"""
import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from registrar.core.config import INSTITUTION_NAME
from registrar.core.errors import (
    ConflictError,
    ForbiddenError,
    PreconditionFailedError,
    TransactionAbortedError,
    UnauthorizedError,
)
from registrar.core.security import verify_password
from registrar.db.session import transaction
from registrar.models.contract import Contract
from registrar.models.course import Course
from registrar.models.enrollment import Enrollment, EnrollmentStatus
from registrar.models.student import Student
from registrar.models.user import User
from registrar.services import contracts as contract_service
from registrar.services import enrollment_state
from registrar.services.enrollment_state import Trigger
from registrar.services.enrollments import get_enrollment, lock_enrollment
from registrar.services.uniqueness import ensure_no_live_enrollment

logger = logging.getLogger(__name__)

BATCH_ABORTED_MESSAGE = "No students were reenrolled; please retry"


@dataclass
class BatchResult:
    total_students: int
    affected_enrollment_ids: list[int] = field(default_factory=list)


@dataclass
class ContractPreview:
    enrollment_id: int
    semester: int
    year: int
    content: str


def verify_admin_password(admin: User, password: str) -> None:
    if not verify_password(password, admin.hashed_password):
        logger.warning("wrong password confirmation from admin %s", admin.id)
        raise UnauthorizedError("Incorrect password")


def process_global_reenrollment(db: Session, semester: int, year: int, admin: User) -> BatchResult:
    logger.info(
        "global reenrollment requested: semester=%s year=%s admin=%s",
        semester,
        year,
        admin.id,
    )
    enrollment_state.ensure_transition(
        EnrollmentStatus.ACTIVE, EnrollmentStatus.PENDING, Trigger.REENROLLMENT_BATCH
    )

    try:
        with transaction(db):
            # lock the whole set so no individual mutation can interleave
            ids = list(
                db.execute(
                    select(Enrollment.id)
                    .where(
                        Enrollment.status == EnrollmentStatus.ACTIVE,
                        Enrollment.not_deleted(),
                    )
                    .order_by(Enrollment.id)
                    .with_for_update()
                ).scalars()
            )

            if not ids:
                logger.info("no active enrollments; nothing to reenroll")
                return BatchResult(total_students=0)

            result = db.execute(
                update(Enrollment)
                .where(
                    Enrollment.id.in_(ids),
                    Enrollment.status == EnrollmentStatus.ACTIVE,
                    Enrollment.not_deleted(),
                )
                .values(
                    status=EnrollmentStatus.PENDING,
                    period_semester=semester,
                    period_year=year,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != len(ids):
                logger.error(
                    "reenrollment batch matched %s of %s enrollments; rolling back",
                    result.rowcount,
                    len(ids),
                )
                raise TransactionAbortedError(BATCH_ABORTED_MESSAGE)
    except (TransactionAbortedError, ConflictError) as exc:
        logger.error("global reenrollment aborted, nothing was changed: %s", exc.message)
        raise TransactionAbortedError(BATCH_ABORTED_MESSAGE) from exc

    db.expire_all()
    logger.info(
        "global reenrollment done: admin=%s semester=%s year=%s total_affected=%s",
        admin.id,
        semester,
        year,
        len(ids),
    )
    return BatchResult(total_students=len(ids), affected_enrollment_ids=ids)


def _ensure_owner(enrollment: Enrollment, user: User) -> None:
    if not user.owns_student_record(enrollment.student_id):
        logger.warning(
            "user %s is not the owner of enrollment %s", user.id, enrollment.id
        )
        raise ForbiddenError("You do not have permission to access this enrollment")


def _ensure_pending_acceptance(enrollment: Enrollment) -> None:
    if enrollment.status != EnrollmentStatus.PENDING or not enrollment.has_reenrollment_period:
        raise PreconditionFailedError(
            "This enrollment is not pending acceptance "
            f"(current status: {enrollment.status.value})"
        )


def _contract_data(db: Session, enrollment: Enrollment) -> dict:
    student = db.get(Student, enrollment.student_id)
    course = db.get(Course, enrollment.course_id)
    return {
        "studentId": enrollment.student_id,
        "studentName": student.name if student else "",
        "courseName": course.name if course else "",
        "duration": f"{course.duration_semesters} semesters" if course else "",
        "semester": enrollment.period_semester,
        "year": enrollment.period_year,
        "institutionName": INSTITUTION_NAME,
        "currentDate": date.today().strftime("%d/%m/%Y"),
    }


def preview_reenrollment_contract(db: Session, enrollment_id: int, user: User) -> ContractPreview:
    """Render the contract a student is about to accept. Read-only."""
    enrollment = get_enrollment(db, enrollment_id)
    _ensure_owner(enrollment, user)
    _ensure_pending_acceptance(enrollment)
    template = contract_service.get_available_template(db)

    return ContractPreview(
        enrollment_id=enrollment.id,
        semester=enrollment.period_semester,
        year=enrollment.period_year,
        content=template.render(_contract_data(db, enrollment)),
    )


def accept_reenrollment(db: Session, enrollment_id: int, user: User) -> tuple[Enrollment, Contract]:
    logger.info("user %s accepting reenrollment %s", user.id, enrollment_id)

    with transaction(db):
        enrollment = lock_enrollment(db, enrollment_id)
        _ensure_owner(enrollment, user)
        _ensure_pending_acceptance(enrollment)
        template = contract_service.get_available_template(db)

        enrollment_state.ensure_transition(
            enrollment.status, EnrollmentStatus.ACTIVE, Trigger.REENROLLMENT_ACCEPTANCE
        )
        ensure_no_live_enrollment(
            db,
            enrollment.student_id,
            EnrollmentStatus.ACTIVE,
            exclude_enrollment_id=enrollment.id,
        )

        enrollment.status = EnrollmentStatus.ACTIVE
        contract = contract_service.create_acceptance_contract(
            db,
            enrollment,
            user,
            template,
            semester=enrollment.period_semester,
            year=enrollment.period_year,
        )
        db.refresh(enrollment)
        db.refresh(contract)
        logger.info(
            "reenrollment %s accepted; contract %s", enrollment.id, contract.id
        )

    return enrollment, contract
