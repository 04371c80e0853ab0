from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from registrar.core.deps import get_db
from registrar.core.permissions import require_admin, require_student
from registrar.models.user import User
from registrar.schemas.reenrollment import (
    ContractPreviewOut,
    ReenrollmentAcceptOut,
    ReenrollmentBatchOut,
    ReenrollmentBatchRequest,
)
from registrar.services import reenrollment as reenrollment_service

router = APIRouter()


@router.post(
    "/process-all",
    response_model=ReenrollmentBatchOut,
    responses={
        401: {"description": "Incorrect admin password"},
        503: {"description": "Batch aborted, no students were reenrolled"},
    },
)
def process_all(
    payload: ReenrollmentBatchRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    # password confirmation gates the batch; no writes before it passes
    reenrollment_service.verify_admin_password(admin, payload.admin_password)

    result = reenrollment_service.process_global_reenrollment(
        db, payload.semester, payload.year, admin
    )
    return ReenrollmentBatchOut(
        total_students=result.total_students,
        affected_enrollment_ids=result.affected_enrollment_ids,
    )


@router.get(
    "/contract-preview/{enrollment_id}",
    response_model=ContractPreviewOut,
    responses={
        403: {"description": "Not the owner of the enrollment"},
        404: {"description": "Enrollment not found"},
        422: {"description": "Enrollment is not pending acceptance"},
    },
)
def contract_preview(
    enrollment_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    preview = reenrollment_service.preview_reenrollment_contract(db, enrollment_id, me)
    return ContractPreviewOut(
        contract_html=preview.content,
        enrollment_id=preview.enrollment_id,
        semester=preview.semester,
        year=preview.year,
    )


@router.post(
    "/accept/{enrollment_id}",
    response_model=ReenrollmentAcceptOut,
    responses={
        403: {"description": "Not the owner of the enrollment"},
        404: {"description": "Enrollment not found"},
        422: {"description": "Enrollment is not pending acceptance"},
    },
)
def accept(
    enrollment_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    enrollment, contract = reenrollment_service.accept_reenrollment(db, enrollment_id, me)
    return {"enrollment": enrollment, "contract": contract}
