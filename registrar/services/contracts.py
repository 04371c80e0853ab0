import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from registrar.core.errors import (
    ForbiddenError,
    NotFoundError,
    PreconditionFailedError,
)
from registrar.db.session import transaction
from registrar.models.contract import Contract
from registrar.models.contract_template import ContractTemplate
from registrar.models.enrollment import Enrollment
from registrar.models.user import User

logger = logging.getLogger(__name__)


def get_available_template(db: Session) -> ContractTemplate:
    """Most recent active template; contracts cannot be issued without one."""
    template = db.execute(
        select(ContractTemplate)
        .where(ContractTemplate.is_active.is_(True), ContractTemplate.not_deleted())
        .order_by(ContractTemplate.created_at.desc(), ContractTemplate.id.desc())
        .limit(1)
    ).scalar_one_or_none()
    if template is None:
        raise PreconditionFailedError(
            "No contract template available. Please contact the administration."
        )
    return template


def create_acceptance_contract(
    db: Session,
    enrollment: Enrollment,
    user: User,
    template: ContractTemplate,
    semester: int,
    year: int,
) -> Contract:
    """Insert the accepted, file-less contract of a reenrollment.

    Must run inside the caller's transaction, next to the status change.
    """
    contract = Contract(
        user_id=user.id,
        enrollment_id=enrollment.id,
        template_id=template.id,
        file_path=None,
        file_name=None,
        accepted_at=datetime.now(timezone.utc),
        semester=semester,
        year=year,
    )
    db.add(contract)
    db.flush()
    logger.info(
        "contract %s created for enrollment %s (%s/%s)",
        contract.id,
        enrollment.id,
        semester,
        year,
    )
    return contract


def register_contract(
    db: Session,
    user_id: int,
    template_id: int,
    semester: int,
    year: int,
    enrollment_id: int | None = None,
    file_path: str | None = None,
    file_name: str | None = None,
) -> Contract:
    file_path = file_path.strip() if file_path else None
    file_name = file_name.strip() if file_name else None
    if (file_path is None) != (file_name is None):
        raise PreconditionFailedError("file_path and file_name must be given together")

    with transaction(db):
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")

        template = db.get(ContractTemplate, template_id)
        if template is None or template.is_deleted:
            raise NotFoundError("Contract template not found")

        if enrollment_id is not None:
            enrollment = db.get(Enrollment, enrollment_id)
            if enrollment is None or enrollment.is_deleted:
                raise NotFoundError("Enrollment not found")
            if not user.owns_student_record(enrollment.student_id):
                raise PreconditionFailedError("Enrollment does not belong to this user")

        contract = Contract(
            user_id=user_id,
            enrollment_id=enrollment_id,
            template_id=template_id,
            file_path=file_path,
            file_name=file_name,
            semester=semester,
            year=year,
        )
        db.add(contract)
        db.flush()
        db.refresh(contract)
        logger.info("contract %s registered for user %s", contract.id, user_id)

    return contract


def get_contract(db: Session, contract_id: int) -> Contract:
    contract = db.get(Contract, contract_id)
    if contract is None or contract.is_deleted:
        raise NotFoundError("Contract not found")
    return contract


def list_user_contracts(db: Session, user_id: int) -> list[Contract]:
    return list(
        db.execute(
            select(Contract)
            .where(Contract.user_id == user_id, Contract.not_deleted())
            .order_by(Contract.created_at.desc(), Contract.id.desc())
        ).scalars()
    )


def accept_contract(db: Session, contract_id: int, user: User) -> Contract:
    with transaction(db):
        contract = db.execute(
            select(Contract)
            .where(Contract.id == contract_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if contract is None or contract.is_deleted:
            raise NotFoundError("Contract not found")
        if contract.user_id != user.id:
            logger.warning("user %s tried to accept contract %s", user.id, contract_id)
            raise ForbiddenError("You do not have permission to accept this contract")
        if contract.is_accepted:
            raise PreconditionFailedError("This contract has already been accepted")

        contract.accepted_at = datetime.now(timezone.utc)
        db.flush()
        db.refresh(contract)
        logger.info("contract %s accepted by user %s", contract.id, user.id)

    return contract


def soft_delete_contract(db: Session, contract_id: int) -> None:
    with transaction(db):
        contract = get_contract(db, contract_id)
        contract.soft_delete()
        logger.info("contract %s soft-deleted", contract.id)
