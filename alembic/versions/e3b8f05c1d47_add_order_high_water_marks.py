"""add order high water marks to students and teachers

Revision ID: e3b8f05c1d47
Revises: c7e41d2a9b58
Create Date: 2026-10-18 09:41:27.310554

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'e3b8f05c1d47'
down_revision: Union[str, Sequence[str], None] = 'c7e41d2a9b58'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    with op.batch_alter_table("students") as batch_op:
        batch_op.add_column(
            sa.Column("last_enrollment_order", sa.Integer(), nullable=False, server_default="0")
        )
    with op.batch_alter_table("teachers") as batch_op:
        batch_op.add_column(
            sa.Column("last_course_order", sa.Integer(), nullable=False, server_default="0")
        )

    # start from the highest ordinal already handed out
    op.execute(
        """
        UPDATE students SET last_enrollment_order = (
            SELECT COALESCE(MAX(enrollment_order), 0) FROM course_enrollments
            WHERE course_enrollments.student_id = students.id
        )
        """
    )
    op.execute(
        """
        UPDATE teachers SET last_course_order = (
            SELECT COALESCE(MAX(course_order), 0) FROM teacher_courses
            WHERE teacher_courses.teacher_id = teachers.id
        )
        """
    )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("teachers") as batch_op:
        batch_op.drop_column("last_course_order")
    with op.batch_alter_table("students") as batch_op:
        batch_op.drop_column("last_enrollment_order")
