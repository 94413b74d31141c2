"""Candidate ORM — a proposed problem statement under group evaluation.

Invariants:
    - Always belongs to a Project (project_id FK)
    - reactions maps member id -> passion level (1-5), one entry per voter
    - Rows are updated in place by reconciliation; ids never change

Design Decisions:
    - Chat messages hold candidate ids by value, so candidate rows are diffed
      (insert/update/delete by id) instead of being replaced wholesale
      (ADR: threads must survive re-saves and candidate removal)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, JSON, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Candidate(Base):
    """Problem candidate — anchor for threaded chat."""
    __tablename__ = "candidates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reactions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
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
