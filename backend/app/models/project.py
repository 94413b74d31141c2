"""Project ORM — aggregate root for one collaborative ideation document.

Invariants:
    - id is a string primary key; owner_id references users
    - problem_statement is non-nullable text (empty string when unset)
    - updated_at is bumped by every reconciliation pass
    - Membership (project_members) is distinct from ownership

Design Decisions:
    - Document collections are NOT mapped as relationships here: the sync service
      reads and writes them with explicit statements so the identity map never
      holds stale children across a replace-all pass
    - owner/members eager-loaded (selectin): every load needs the roster
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey, Table, Column
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

project_members = Table(
    "project_members",
    Base.metadata,
    Column(
        "project_id", String(64),
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "user_id", String(64),
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Project(Base):
    """Project aggregate root — owns sub-problems, candidates, desires, saved ideas."""
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(
        String(200), nullable=False, default="New Think Bigger Project",
    )
    problem_statement: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    owner: Mapped["User"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "User", lazy="selectin",
    )
    members: Mapped[list["User"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "User", secondary=project_members, lazy="selectin",
    )
