"""create school schema

Revision ID: b1f0c2a7d9e3
Revises:
Create Date: 2026-10-17 09:12:41.302117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b1f0c2a7d9e3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column(
            "user_type",
            sa.Enum("student", "teacher", "admin", name="usertype", native_enum=False, length=20),
            nullable=False,
        ),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("max_units", sa.Float(), nullable=False),
    )
    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("max_courses", sa.Integer(), nullable=False),
        sa.Column("courses_taught", sa.Integer(), nullable=False),
    )
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(length=255), nullable=False),
    )

    op.create_table(
        "courses",
        sa.Column("crn", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("course_name", sa.String(length=255), nullable=False),
        sa.Column("credits", sa.Float(), nullable=False),
        sa.Column("course_size", sa.Integer(), nullable=False),
        sa.Column("num_students", sa.Integer(), nullable=False),
    )

    op.create_table(
        "teacher_courses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("course_crn", sa.Integer(), sa.ForeignKey("courses.crn"), nullable=False),
        sa.Column("course_order", sa.Integer(), nullable=False),
    )
    op.create_index("ix_teacher_courses_teacher_id", "teacher_courses", ["teacher_id"])
    op.create_index("ix_teacher_courses_course_crn", "teacher_courses", ["course_crn"])

    op.create_table(
        "course_enrollments",
        sa.Column("course_crn", sa.Integer(), sa.ForeignKey("courses.crn"), primary_key=True),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), primary_key=True),
        sa.Column("enrollment_order", sa.Integer(), nullable=False),
    )
    op.create_index("ix_course_enrollments_student_id", "course_enrollments", ["student_id"])

    for table in ("current_course_grades", "completed_course_grades"):
        op.create_table(
            table,
            sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), primary_key=True),
            sa.Column("course_crn", sa.Integer(), sa.ForeignKey("courses.crn"), primary_key=True),
            sa.Column("grade", sa.Float(), nullable=False),
            sa.Column("attendance", sa.Float(), nullable=False),
        )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "completed_course_grades",
        "current_course_grades",
        "course_enrollments",
        "teacher_courses",
        "courses",
        "admins",
        "teachers",
        "students",
    ):
        op.drop_table(table)
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
