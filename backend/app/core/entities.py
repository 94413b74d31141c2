"""Entities — immutable in-memory shapes of a project document.

Invariants:
    - All dataclasses are frozen; collections are tuples, maps are never mutated in place
    - ProjectDocument is exactly the subset persisted by a save (no members, no header)
    - Maps (reactions, ratings, combination) keyed by identifier, one entry per key

Design Decisions:
    - Frozen dataclasses over ORM objects: the working copy lives client-side and
      never touches a DB session (ADR: functional core, imperative shell)
    - Header and members split from the document: they come from collaborators and
      are never written back by the sync path
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.core.domain_types import QueryKind, DesireCategory


@dataclass(frozen=True)
class SearchQuery:
    """One reformulation of a sub-problem."""
    kind: QueryKind
    text: str


@dataclass(frozen=True)
class Choice:
    """A candidate solution or analogy for a sub-problem."""
    id: str
    text: str
    description: str = ""
    is_outside_domain: bool = False
    source: str | None = None


@dataclass(frozen=True)
class SubProblem:
    id: str
    title: str
    choices: tuple[Choice, ...] = ()
    search_queries: tuple[SearchQuery, ...] = ()

    @property
    def choice_ids(self) -> set[str]:
        return {c.id for c in self.choices}


@dataclass(frozen=True)
class Candidate:
    """A proposed problem statement; anchor for threaded chat."""
    id: str
    text: str
    reactions: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Desire:
    id: str
    text: str
    category: DesireCategory


@dataclass(frozen=True)
class SavedIdea:
    """One combination of choices captured for evaluation against desires."""
    id: str
    title: str
    combination: dict[str, str] = field(default_factory=dict)
    ratings: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ProjectDocument:
    """The persisted working state of one project."""
    problem_statement: str = ""
    sub_problems: tuple[SubProblem, ...] = ()
    candidates: tuple[Candidate, ...] = ()
    desires: tuple[Desire, ...] = ()
    saved_ideas: tuple[SavedIdea, ...] = ()


@dataclass(frozen=True)
class Member:
    """An authenticated participant as seen by the core."""
    id: str
    name: str
    avatar: str | None = None


@dataclass(frozen=True)
class ProjectHeader:
    """Read-only project metadata returned alongside the document on load."""
    id: str
    title: str
    owner_id: str
    updated_at: datetime | None = None
    members: tuple[Member, ...] = ()
