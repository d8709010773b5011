"""create users, projects, members, audit and access request tables

Revision ID: 4b8e1c2d9a10
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "4b8e1c2d9a10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("role", sa.Enum("MANAGER", "EMPLOYEE", name="globalrole"), nullable=False),
        sa.Column("manager_id", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["manager_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("idx_users_role", "users", ["role"], unique=False)

    op.create_table(
        "projects",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("default_preset", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "project_members",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("override_json", sa.Text(), nullable=False, server_default=sa.text("'{}'")),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_project_members_project", "project_members", ["project_id"], unique=False)
    op.create_index("idx_project_members_user", "project_members", ["user_id"], unique=False)
    op.create_index(
        "ux_project_members_project_user",
        "project_members",
        ["project_id", "user_id"],
        unique=True,
    )

    op.create_table(
        "audit_logs",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("actor_user_id", sa.String(), nullable=True),
        sa.Column("actor_name", sa.String(length=128), nullable=True),
        sa.Column("actor_email", sa.String(length=256), nullable=True),
        sa.Column("action", sa.String(length=256), nullable=False),
        sa.Column("action_type", sa.String(length=64), nullable=False),
        sa.Column("details", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("impact", sa.String(length=16), nullable=False),
        sa.Column("project_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id"),
    )
    op.create_index("idx_audit_logs_occurred_at", "audit_logs", ["occurred_at"], unique=False)
    op.create_index("idx_audit_logs_project", "audit_logs", ["project_id"], unique=False)
    op.create_index("idx_audit_logs_actor", "audit_logs", ["actor_user_id"], unique=False)
    op.create_index("idx_audit_logs_action_type", "audit_logs", ["action_type"], unique=False)

    op.create_table(
        "access_requests",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("requested_by_user_id", sa.String(), nullable=False),
        sa.Column("capabilities_json", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("justification", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "status",
            sa.Enum("PENDING", "APPROVED", "DENIED", name="accessrequeststatus"),
            nullable=False,
        ),
        sa.Column("requested_at", sa.DateTime(), nullable=False),
        sa.Column("decided_by_user_id", sa.String(), nullable=True),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
        sa.Column("decision_note", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_access_requests_status", "access_requests", ["status"], unique=False)
    op.create_index("idx_access_requests_project", "access_requests", ["project_id"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_access_requests_project", table_name="access_requests")
    op.drop_index("idx_access_requests_status", table_name="access_requests")
    op.drop_table("access_requests")
    op.drop_index("idx_audit_logs_action_type", table_name="audit_logs")
    op.drop_index("idx_audit_logs_actor", table_name="audit_logs")
    op.drop_index("idx_audit_logs_project", table_name="audit_logs")
    op.drop_index("idx_audit_logs_occurred_at", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ux_project_members_project_user", table_name="project_members")
    op.drop_index("idx_project_members_user", table_name="project_members")
    op.drop_index("idx_project_members_project", table_name="project_members")
    op.drop_table("project_members")
    op.drop_table("projects")
    op.drop_index("idx_users_role", table_name="users")
    op.drop_table("users")
