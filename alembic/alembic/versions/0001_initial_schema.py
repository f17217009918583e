"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _record_columns():
    return [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "institutes",
        *_record_columns(),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(20), nullable=False),
        sa.Column("max_allowed_users", sa.Integer()),
        sa.Column("owner_id", sa.Uuid(), nullable=True),
    )
    op.create_index("ix_institutes_active_deleted", "institutes", ["is_active", "is_deleted"])

    op.create_table(
        "users",
        *_record_columns(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("country_code", sa.String(8)),
        sa.Column("phone_no", sa.String(20)),
        sa.Column("role", sa.String(30), nullable=False),
        sa.Column("institute_id", sa.Uuid(), sa.ForeignKey("institutes.id"), nullable=True),
        sa.Column("gender", sa.String(10)),
        sa.Column("dob", sa.Date()),
        sa.Column("address", sa.String(255)),
        sa.Column("profile_url", sa.String(500)),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("profile_id", sa.Uuid(), nullable=True),
        sa.CheckConstraint(
            "(role = 'SUPER_ADMIN' AND institute_id IS NULL) "
            "OR (role <> 'SUPER_ADMIN' AND institute_id IS NOT NULL)",
            name="ck_users_role_institute_scope",
        ),
        sa.UniqueConstraint("email", "institute_id", name="uq_users_email_institute"),
        sa.UniqueConstraint(
            "phone_no", "country_code", "institute_id", name="uq_users_phone_institute"
        ),
    )
    op.create_index(
        "uq_users_email_untenanted", "users", ["email"], unique=True,
        postgresql_where=sa.text("institute_id IS NULL"),
        sqlite_where=sa.text("institute_id IS NULL"),
    )
    op.create_index("ix_users_institute_role", "users", ["institute_id", "role"])

    op.create_table(
        "academic_sessions",
        *_record_columns(),
        sa.Column("institute_id", sa.Uuid(), sa.ForeignKey("institutes.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("institute_id", "name", name="uq_academic_sessions_institute_name"),
    )
    op.create_index(
        "uq_academic_sessions_one_current", "academic_sessions", ["institute_id"], unique=True,
        postgresql_where=sa.text("is_current"),
        sqlite_where=sa.text("is_current = 1"),
    )
    op.create_index(
        "ix_academic_sessions_range", "academic_sessions",
        ["institute_id", "start_date", "end_date"],
    )

    op.create_table(
        "teachers",
        *_record_columns(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("institute_id", sa.Uuid(), sa.ForeignKey("institutes.id"), nullable=False),
        sa.Column("designation", sa.String(100)),
        sa.Column("department", sa.String(100)),
        sa.Column("qualification", sa.JSON()),
        sa.Column("experience", sa.Integer()),
        sa.Column("joining_date", sa.Date()),
        sa.Column("specialization", sa.String(100)),
        sa.Column("subjects", sa.JSON()),
    )
    op.create_index(
        "uq_teachers_live_user", "teachers", ["user_id"], unique=True,
        postgresql_where=sa.text("NOT is_deleted"),
        sqlite_where=sa.text("is_deleted = 0"),
    )
    op.create_index(
        "ix_teachers_institute_state", "teachers", ["institute_id", "is_active", "is_deleted"]
    )

    op.create_table(
        "institute_classes",
        *_record_columns(),
        sa.Column("institute_id", sa.Uuid(), sa.ForeignKey("institutes.id"), nullable=False),
        sa.Column(
            "academic_session_id", sa.Uuid(), sa.ForeignKey("academic_sessions.id"), nullable=False
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("section", sa.String(20), nullable=False),
        sa.Column("class_teacher_id", sa.Uuid(), sa.ForeignKey("teachers.id"), nullable=True),
        sa.Column("strength", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index(
        "ix_institute_classes_lookup", "institute_classes",
        ["institute_id", "academic_session_id", "name", "section"],
    )

    op.create_table(
        "students",
        *_record_columns(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("institute_id", sa.Uuid(), sa.ForeignKey("institutes.id"), nullable=False),
        sa.Column("admission_number", sa.String(50), nullable=False),
        sa.Column("roll_number", sa.String(50)),
        sa.Column(
            "current_class_id", sa.Uuid(), sa.ForeignKey("institute_classes.id"), nullable=True
        ),
        sa.Column("admission_date", sa.Date()),
        sa.Column("blood_group", sa.String(5)),
        sa.Column("emergency_contact_name", sa.String(100)),
        sa.Column("emergency_contact_phone", sa.String(20)),
        sa.Column("emergency_contact_relation", sa.String(50)),
        sa.UniqueConstraint(
            "institute_id", "admission_number", name="uq_students_institute_admission"
        ),
    )
    op.create_index(
        "uq_students_live_user", "students", ["user_id"], unique=True,
        postgresql_where=sa.text("NOT is_deleted"),
        sqlite_where=sa.text("is_deleted = 0"),
    )
    op.create_index(
        "ix_students_institute_class", "students", ["institute_id", "current_class_id"]
    )


def downgrade() -> None:
    op.drop_table("students")
    op.drop_table("institute_classes")
    op.drop_table("teachers")
    op.drop_table("academic_sessions")
    op.drop_table("users")
    op.drop_table("institutes")
