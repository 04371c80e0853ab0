from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.db.base_class import Base, SoftDeleteMixin, TimestampMixin


class Contract(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # null for contracts that predate enrollment linkage
    enrollment_id: Mapped[int | None] = mapped_column(
        ForeignKey("enrollments.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    template_id: Mapped[int] = mapped_column(
        ForeignKey("contract_templates.id", ondelete="RESTRICT"), nullable=False
    )
    # both null when the contract is only a digital acceptance record
    file_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(file_path IS NULL) = (file_name IS NULL)",
            name="ck_contracts_file_pair",
        ),
        CheckConstraint("semester BETWEEN 1 AND 12", name="ck_contracts_semester"),
        CheckConstraint("year BETWEEN 2020 AND 2100", name="ck_contracts_year"),
    )

    user = relationship("User", back_populates="contracts")
    enrollment = relationship("Enrollment", back_populates="contracts")
    template = relationship("ContractTemplate")

    @property
    def is_accepted(self) -> bool:
        return self.accepted_at is not None
