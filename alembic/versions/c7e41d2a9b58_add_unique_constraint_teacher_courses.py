"""add unique constraint teacher courses teacher crn

Revision ID: c7e41d2a9b58
Revises: b1f0c2a7d9e3
Create Date: 2026-10-17 10:03:15.884120

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = 'c7e41d2a9b58'
down_revision: Union[str, Sequence[str], None] = 'b1f0c2a7d9e3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # drop duplicate pairs first, keeping the earliest assignment
    op.execute(
        """
        DELETE FROM teacher_courses
        WHERE id NOT IN (
            SELECT keep_id FROM (
                SELECT MIN(id) AS keep_id FROM teacher_courses
                GROUP BY teacher_id, course_crn
            ) AS keepers
        )
        """
    )
    with op.batch_alter_table("teacher_courses", recreate="always") as batch_op:
        batch_op.create_unique_constraint(
            "uq_teacher_courses_teacher_crn",
            ["teacher_id", "course_crn"],
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("teacher_courses", recreate="always") as batch_op:
        batch_op.drop_constraint(
            "uq_teacher_courses_teacher_crn",
            type_="unique",
        )
