from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from registrar.core.config import MAX_CURRENT_SEMESTER
from registrar.models.enrollment import EnrollmentStatus


class EnrollmentCreate(BaseModel):
    student_id: int = Field(ge=1)
    course_id: int = Field(ge=1)
    enrollment_date: date | None = None

    @field_validator("enrollment_date")
    @classmethod
    def not_in_future(cls, value: date | None) -> date | None:
        if value is not None and value > date.today():
            raise ValueError("enrollment_date cannot be in the future")
        return value


class MyEnrollmentCreate(BaseModel):
    course_id: int = Field(ge=1)


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus


class EnrollmentSemesterUpdate(BaseModel):
    current_semester: int = Field(ge=0, le=MAX_CURRENT_SEMESTER, alias="currentSemester")

    class Config:
        populate_by_name = True


class EnrollmentOut(BaseModel):
    id: int
    student_id: int
    course_id: int
    status: EnrollmentStatus
    enrollment_date: date
    current_semester: int
    period_semester: int | None = None
    period_year: int | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    class Config:
        from_attributes = True
