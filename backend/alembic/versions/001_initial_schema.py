"""Initial schema — users, projects, ideation collections, chat, notifications.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _project_fk() -> sa.Column:
    return sa.Column(
        "project_id", sa.String(64),
        sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False, server_default="New Think Bigger Project"),
        sa.Column("problem_statement", sa.Text, nullable=False, server_default=""),
        sa.Column("owner_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "project_members",
        sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "sub_problems",
        sa.Column("id", sa.String(64), primary_key=True),
        _project_fk(),
        sa.Column("title", sa.String(500), nullable=False, server_default=""),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("search_queries", sa.JSON, nullable=False),
    )

    op.create_table(
        "choices",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "sub_problem_id", sa.String(64),
            sa.ForeignKey("sub_problems.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("text", sa.Text, nullable=False, server_default=""),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("is_outside_domain", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("source", sa.String(500), nullable=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "candidates",
        sa.Column("id", sa.String(64), primary_key=True),
        _project_fk(),
        sa.Column("text", sa.Text, nullable=False, server_default=""),
        sa.Column("reactions", sa.JSON, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "desires",
        sa.Column("id", sa.String(64), primary_key=True),
        _project_fk(),
        sa.Column("text", sa.Text, nullable=False, server_default=""),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "saved_ideas",
        sa.Column("id", sa.String(64), primary_key=True),
        _project_fk(),
        sa.Column("title", sa.String(500), nullable=False, server_default=""),
        sa.Column("combination", sa.JSON, nullable=False),
        sa.Column("ratings", sa.JSON, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    # candidate_id is a plain column: threads outlive the candidate they discuss
    op.create_table(
        "messages",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("candidate_id", sa.String(64), nullable=True),
        sa.Column("author_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_messages_thread", "messages", ["project_id", "candidate_id", "created_at"],
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "recipient_id", sa.String(64),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("message_id", sa.String(64), sa.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_index("ix_messages_thread", table_name="messages")
    op.drop_table("messages")
    op.drop_table("saved_ideas")
    op.drop_table("desires")
    op.drop_table("candidates")
    op.drop_table("choices")
    op.drop_table("sub_problems")
    op.drop_table("project_members")
    op.drop_table("projects")
    op.drop_table("users")
