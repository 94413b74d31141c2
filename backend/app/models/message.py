"""Message ORM — an immutable chat message in a project or candidate thread.

Invariants:
    - candidate_id NULL = project-level thread; otherwise the candidate thread key
    - candidate_id is NOT a foreign key: deleting a candidate leaves its thread intact
    - Rows are never updated after insert

Design Decisions:
    - Composite index (project_id, candidate_id, created_at) serves the polling query
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Message(Base):
    """Chat message — created atomically with its notifications."""
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_thread", "project_id", "candidate_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )
    candidate_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    author_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    author: Mapped["User"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "User", lazy="selectin",
    )
    project: Mapped["Project"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "Project", lazy="selectin",
    )
