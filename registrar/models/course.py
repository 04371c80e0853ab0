from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.db.base_class import Base, SoftDeleteMixin, TimestampMixin


class Course(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    duration_semesters: Mapped[int] = mapped_column(Integer, nullable=False, default=8)

    enrollments = relationship("Enrollment", back_populates="course")
