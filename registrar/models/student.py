from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.db.base_class import Base, SoftDeleteMixin, TimestampMixin


class Student(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))

    enrollments = relationship("Enrollment", back_populates="student")
