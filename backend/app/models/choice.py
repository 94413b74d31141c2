"""Choice ORM — an alternative solution or analogy under a sub-problem.

Invariants:
    - Always belongs to a SubProblem (sub_problem_id FK, cascade on delete)
    - is_outside_domain marks analogies borrowed from an unrelated field
"""

from sqlalchemy import String, Text, Boolean, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Choice(Base):
    __tablename__ = "choices"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sub_problem_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("sub_problems.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_outside_domain: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    source: Mapped[str | None] = mapped_column(String(500), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
