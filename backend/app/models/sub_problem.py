"""SubProblem ORM — one decomposed facet of the project's problem statement.

Invariants:
    - Always belongs to a Project (project_id FK, cascade on project delete)
    - position fixes the order the client sees; round-trips exactly
    - search_queries is an ordered JSON list of {kind, text}

Design Decisions:
    - Replaced wholesale on every save together with its choices (nothing else
      references a sub-problem row)
"""

from sqlalchemy import String, Integer, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class SubProblem(Base):
    """Sub-problem — the unit against which choices are collected."""
    __tablename__ = "sub_problems"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    search_queries: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
