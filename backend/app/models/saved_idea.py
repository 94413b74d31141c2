"""SavedIdea ORM — one concrete combination of choices kept for evaluation.

Invariants:
    - combination maps sub_problem id -> choice id; may reference deleted choices
    - ratings maps desire id -> 0-5

Design Decisions:
    - combination is advisory JSON, not foreign keys: dangling references are
      tolerated and stored verbatim
"""

from sqlalchemy import String, Integer, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class SavedIdea(Base):
    __tablename__ = "saved_ideas"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    combination: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ratings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
