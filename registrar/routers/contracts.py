from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from registrar.core.current_user import get_current_user
from registrar.core.deps import get_db
from registrar.core.errors import ForbiddenError
from registrar.core.permissions import require_admin
from registrar.models.user import User
from registrar.schemas.contract import ContractCreate, ContractOut
from registrar.services import contracts as contract_service

router = APIRouter()


@router.post("", response_model=ContractOut, status_code=status.HTTP_201_CREATED)
def register_contract(
    payload: ContractCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return contract_service.register_contract(
        db,
        user_id=payload.user_id,
        template_id=payload.template_id,
        semester=payload.semester,
        year=payload.year,
        enrollment_id=payload.enrollment_id,
        file_path=payload.file_path,
        file_name=payload.file_name,
    )


@router.get("/me", response_model=list[ContractOut])
def my_contracts(
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    return contract_service.list_user_contracts(db, me.id)


@router.get("/{contract_id}", response_model=ContractOut)
def get_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contract = contract_service.get_contract(db, contract_id)
    if not current_user.is_admin and contract.user_id != current_user.id:
        raise ForbiddenError("You do not have permission to view this contract")
    return contract


@router.post("/{contract_id}/accept", response_model=ContractOut)
def accept_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    return contract_service.accept_contract(db, contract_id, me)


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    contract_service.soft_delete_contract(db, contract_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
