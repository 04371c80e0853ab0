from pydantic import BaseModel, Field

from registrar.core.config import REENROLLMENT_MAX_YEAR, REENROLLMENT_MIN_YEAR
from registrar.schemas.contract import ContractOut
from registrar.schemas.enrollment import EnrollmentOut


class ReenrollmentBatchRequest(BaseModel):
    semester: int = Field(ge=1, le=2)
    year: int = Field(ge=REENROLLMENT_MIN_YEAR, le=REENROLLMENT_MAX_YEAR)
    admin_password: str = Field(min_length=1, alias="adminPassword")

    class Config:
        populate_by_name = True


class ReenrollmentBatchOut(BaseModel):
    total_students: int = Field(alias="totalStudents")
    affected_enrollment_ids: list[int] = Field(alias="affectedEnrollmentIds")

    class Config:
        populate_by_name = True


class ContractPreviewOut(BaseModel):
    contract_html: str = Field(alias="contractHTML")
    enrollment_id: int = Field(alias="enrollmentId")
    semester: int
    year: int

    class Config:
        populate_by_name = True


class ReenrollmentAcceptOut(BaseModel):
    enrollment: EnrollmentOut
    contract: ContractOut
