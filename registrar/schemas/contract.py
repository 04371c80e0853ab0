from datetime import datetime

from pydantic import BaseModel, Field

from registrar.core.config import REENROLLMENT_MAX_YEAR, REENROLLMENT_MIN_YEAR


class ContractCreate(BaseModel):
    user_id: int = Field(ge=1)
    template_id: int = Field(ge=1)
    enrollment_id: int | None = Field(default=None, ge=1)
    semester: int = Field(ge=1, le=12)
    year: int = Field(ge=REENROLLMENT_MIN_YEAR, le=REENROLLMENT_MAX_YEAR)
    file_path: str | None = Field(default=None, max_length=255)
    file_name: str | None = Field(default=None, max_length=255)


class ContractOut(BaseModel):
    id: int
    user_id: int
    enrollment_id: int | None = None
    template_id: int
    file_path: str | None = None
    file_name: str | None = None
    accepted_at: datetime | None = None
    semester: int
    year: int
    created_at: datetime

    class Config:
        from_attributes = True
