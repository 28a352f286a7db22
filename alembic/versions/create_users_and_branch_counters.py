"""create users and branch_counters

Revision ID: 7a1c2e9b4d10
Revises:
Create Date: 2026-10-18

branch_counters holds one row per branch with the number of student IDs
issued so far; users.student_id is unique across all branches.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "7a1c2e9b4d10"
down_revision = None
branch_labels = None
depends_on = None

BRANCHES = ("wardha", "nagpur", "butibori", "akola")
ROLES = ("admin", "student")


def upgrade() -> None:
    branch_enum = postgresql.ENUM(*BRANCHES, name="branch")
    role_enum = postgresql.ENUM(*ROLES, name="user_role")
    branch_enum.create(op.get_bind(), checkfirst=True)
    role_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "branch_counters",
        sa.Column("branch", postgresql.ENUM(name="branch", create_type=False), primary_key=True),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("count >= 0", name="ck_branch_counters_count_non_negative"),
    )

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("secondary_phone", sa.String(length=20), nullable=True),
        sa.Column("district", sa.String(length=255), nullable=True),
        sa.Column("tehsil", sa.String(length=255), nullable=True),
        sa.Column("village", sa.String(length=255), nullable=True),
        sa.Column("street", sa.String(length=255), nullable=True),
        sa.Column("role", postgresql.ENUM(name="user_role", create_type=False), nullable=False),
        sa.Column("branch", postgresql.ENUM(name="branch", create_type=False), nullable=True),
        sa.Column("student_id", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_student_id", "users", ["student_id"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_branch", "users", ["branch"])
    op.create_index("ix_users_is_active", "users", ["is_active"])
    op.create_index("ix_users_deleted_at", "users", ["deleted_at"])


def downgrade() -> None:
    op.drop_table("users")
    op.drop_table("branch_counters")
    postgresql.ENUM(name="user_role").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="branch").drop(op.get_bind(), checkfirst=True)
