"""
Initial schema: departments, students, teachers and courses.

Revision ID: 20241001_000000_initial_schema
Revises:
Create Date: 2024-10-01 00:00:00
"""

import sqlalchemy as sa

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20241001_000000_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="departments_pkey"),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("enrolled", sa.Boolean(), nullable=True),
        sa.Column("dept_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["dept_id"], ["departments.id"], name="students_dept_id_fkey"),
        sa.PrimaryKeyConstraint("id", name="students_pkey"),
        sa.UniqueConstraint("email", name="students_email_key"),
    )

    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="teachers_pkey"),
        sa.UniqueConstraint("email", name="teachers_email_key"),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("teacher_id", sa.Integer(), nullable=True),
        sa.Column("dept_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["teacher_id"], ["teachers.id"], ondelete="SET NULL", name="courses_teacher_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["dept_id"], ["departments.id"], ondelete="SET NULL", name="courses_dept_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="courses_pkey"),
    )


def downgrade() -> None:
    op.drop_table("courses")
    op.drop_table("teachers")
    op.drop_table("students")
    op.drop_table("departments")
