import enum
from datetime import date

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.db.base_class import Base, SoftDeleteMixin, TimestampMixin


class EnrollmentStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    REENROLLMENT = "reenrollment"
    COMPLETED = "completed"
    CONTRACT = "contract"


# statuses that count toward the one-live-enrollment-per-student rule
LIVE_STATUSES = frozenset(
    {EnrollmentStatus.PENDING, EnrollmentStatus.ACTIVE, EnrollmentStatus.CONTRACT}
)

TERMINAL_STATUSES = frozenset({EnrollmentStatus.CANCELLED, EnrollmentStatus.COMPLETED})


class Enrollment(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(
            EnrollmentStatus,
            name="enrollment_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
            validate_strings=True,
        ),
        nullable=False,
        default=EnrollmentStatus.PENDING,
        index=True,
    )
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    current_semester: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Academic period a reenrollment batch put this row on hold for.
    # Only the batch writes these; a pending row without them came from signup.
    period_semester: Mapped[int | None] = mapped_column(Integer, nullable=True)
    period_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "current_semester >= 0", name="ck_enrollments_current_semester"
        ),
        CheckConstraint(
            "(period_semester IS NULL) = (period_year IS NULL)",
            name="ck_enrollments_period_pair",
        ),
    )

    student = relationship("Student", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
    contracts = relationship("Contract", back_populates="enrollment")

    @property
    def has_reenrollment_period(self) -> bool:
        return self.period_semester is not None and self.period_year is not None
