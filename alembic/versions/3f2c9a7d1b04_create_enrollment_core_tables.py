"""create enrollment core tables

Revision ID: 3f2c9a7d1b04
Revises:
Create Date: 2026-10-18 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2c9a7d1b04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENROLLMENT_STATUSES = ("pending", "active", "cancelled", "reenrollment", "completed", "contract")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_students_id", "students", ["id"])
    op.create_index("ix_students_deleted_at", "students", ["deleted_at"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id", ondelete="RESTRICT"), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_student_id", "users", ["student_id"])

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("duration_semesters", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_courses_id", "courses", ["id"])
    op.create_index("ix_courses_deleted_at", "courses", ["deleted_at"])

    op.create_table(
        "contract_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_contract_templates_id", "contract_templates", ["id"])
    op.create_index("ix_contract_templates_deleted_at", "contract_templates", ["deleted_at"])

    # No (student_id, status) unique index: a partial index over live statuses
    # is not portable, the application enforces one live enrollment per student.
    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*ENROLLMENT_STATUSES, name="enrollment_status", native_enum=False, length=20),
            nullable=False,
        ),
        sa.Column("enrollment_date", sa.Date(), nullable=False),
        sa.Column("current_semester", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("period_semester", sa.Integer(), nullable=True),
        sa.Column("period_year", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("current_semester >= 0", name="ck_enrollments_current_semester"),
        sa.CheckConstraint(
            "(period_semester IS NULL) = (period_year IS NULL)",
            name="ck_enrollments_period_pair",
        ),
    )
    op.create_index("ix_enrollments_id", "enrollments", ["id"])
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_status", "enrollments", ["status"])
    op.create_index("ix_enrollments_deleted_at", "enrollments", ["deleted_at"])

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("enrollment_id", sa.Integer(), sa.ForeignKey("enrollments.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("template_id", sa.Integer(), sa.ForeignKey("contract_templates.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("file_path", sa.String(255), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=True),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("(file_path IS NULL) = (file_name IS NULL)", name="ck_contracts_file_pair"),
        sa.CheckConstraint("semester BETWEEN 1 AND 12", name="ck_contracts_semester"),
        sa.CheckConstraint("year BETWEEN 2020 AND 2100", name="ck_contracts_year"),
    )
    op.create_index("ix_contracts_id", "contracts", ["id"])
    op.create_index("ix_contracts_user_id", "contracts", ["user_id"])
    op.create_index("ix_contracts_enrollment_id", "contracts", ["enrollment_id"])
    op.create_index("ix_contracts_deleted_at", "contracts", ["deleted_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("contracts")
    op.drop_table("enrollments")
    op.drop_table("contract_templates")
    op.drop_table("courses")
    op.drop_table("users")
    op.drop_table("students")
