from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from registrar.core.current_user import get_current_user
from registrar.core.deps import get_db
from registrar.core.errors import ForbiddenError
from registrar.core.permissions import require_admin, require_student
from registrar.models.enrollment import EnrollmentStatus
from registrar.models.user import User
from registrar.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentOut,
    EnrollmentSemesterUpdate,
    EnrollmentStatusUpdate,
    MyEnrollmentCreate,
)
from registrar.services import enrollments as enrollment_service
from registrar.services.enrollment_state import Trigger

router = APIRouter()


@router.post(
    "",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Student or course not found"},
        409: {"description": "Student already has a live enrollment"},
    },
)
def create_enrollment(
    payload: EnrollmentCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return enrollment_service.create_enrollment(
        db, payload.student_id, payload.course_id, payload.enrollment_date
    )


@router.post("/me", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll_me(
    payload: MyEnrollmentCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return enrollment_service.create_enrollment(db, me.student_id, payload.course_id)


@router.get("", response_model=list[EnrollmentOut])
def list_enrollments(
    status_filter: EnrollmentStatus | None = Query(default=None, alias="status"),
    student_id: int | None = None,
    course_id: int | None = None,
    include_deleted: bool = False,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return enrollment_service.list_enrollments(
        db,
        status=status_filter,
        student_id=student_id,
        course_id=course_id,
        include_deleted=include_deleted,
    )


@router.get("/me", response_model=list[EnrollmentOut])
def my_enrollments(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return enrollment_service.list_student_enrollments(db, me.student_id)


@router.get("/me/current", response_model=EnrollmentOut | None)
def my_current_enrollment(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return enrollment_service.current_live_enrollment(db, me.student_id)


@router.get("/my-pending", response_model=EnrollmentOut | None)
def my_pending_enrollment(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return enrollment_service.pending_acceptance_for_student(db, me.student_id)


@router.get("/{enrollment_id}", response_model=EnrollmentOut)
def get_enrollment(
    enrollment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enrollment = enrollment_service.get_enrollment(db, enrollment_id)
    if not current_user.is_admin and not current_user.owns_student_record(enrollment.student_id):
        raise ForbiddenError("You do not have permission to view this enrollment")
    return enrollment


@router.put(
    "/{enrollment_id}/status",
    response_model=EnrollmentOut,
    responses={
        409: {"description": "Invalid transition or live enrollment conflict"},
    },
)
def update_enrollment_status(
    enrollment_id: int,
    payload: EnrollmentStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return enrollment_service.change_status(db, enrollment_id, payload.status, Trigger.ADMIN)


@router.post("/{enrollment_id}/withdraw", response_model=EnrollmentOut)
def withdraw(
    enrollment_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return enrollment_service.withdraw_enrollment(db, enrollment_id, me)


@router.put("/{enrollment_id}/semester", response_model=EnrollmentOut)
def update_current_semester(
    enrollment_id: int,
    payload: EnrollmentSemesterUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return enrollment_service.update_current_semester(db, enrollment_id, payload.current_semester)


@router.delete("/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_enrollment(
    enrollment_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    enrollment_service.soft_delete_enrollment(db, enrollment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
