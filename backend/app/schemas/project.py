"""Project Sync Schemas — the Save request body, validated at the boundary.

Invariants:
    - Identifiers are 1-64 chars and unique within their collection
    - Reaction levels are 1-5; ratings are 0-5
    - Desire category and query kind are closed enums
    - No partial saves: every collection is a full replacement of client state

Design Decisions:
    - Extra keys ignored (not forbidden): older clients may still send the
      combination selection or member roster alongside the document
    - Conversion to core entities goes through document_codec, not methods here
"""

from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.domain_types import (
    QueryKind, DesireCategory, MAX_ID_LENGTH,
    PASSION_MIN, PASSION_MAX, RATING_MIN, RATING_MAX,
)

EntityId = Annotated[str, Field(min_length=1, max_length=MAX_ID_LENGTH)]


class SearchQueryIn(BaseModel):
    kind: QueryKind
    text: str = Field(max_length=2000)


class ChoiceIn(BaseModel):
    id: EntityId
    text: str = Field(max_length=5000)
    description: str | None = Field("", max_length=10_000)
    is_outside_domain: bool = False
    source: str | None = Field(None, max_length=500)


class SubProblemIn(BaseModel):
    id: EntityId
    title: str = Field(max_length=500)
    search_queries: list[SearchQueryIn] = []
    choices: list[ChoiceIn] = []


class CandidateIn(BaseModel):
    id: EntityId
    text: str = Field(max_length=5000)
    reactions: dict[str, int] = {}

    @field_validator("reactions")
    @classmethod
    def check_passion_range(cls, v: dict[str, int]) -> dict[str, int]:
        for member_id, level in v.items():
            if not PASSION_MIN <= level <= PASSION_MAX:
                raise ValueError(
                    f"reaction for '{member_id}' must be {PASSION_MIN}-{PASSION_MAX}, got {level}",
                )
        return v


class DesireIn(BaseModel):
    id: EntityId
    text: str = Field(max_length=2000)
    category: DesireCategory


class SavedIdeaIn(BaseModel):
    id: EntityId
    title: str = Field(max_length=500)
    combination: dict[str, str] = {}
    ratings: dict[str, int] = {}

    @field_validator("ratings")
    @classmethod
    def check_rating_range(cls, v: dict[str, int]) -> dict[str, int]:
        for desire_id, rating in v.items():
            if not RATING_MIN <= rating <= RATING_MAX:
                raise ValueError(
                    f"rating for '{desire_id}' must be {RATING_MIN}-{RATING_MAX}, got {rating}",
                )
        return v


class ProjectSnapshot(BaseModel):
    """Save body — the full editable document of one project."""
    problem_statement: str = Field("", max_length=10_000)
    sub_problems: list[SubProblemIn] = []
    candidates: list[CandidateIn] = []
    desires: list[DesireIn] = []
    saved_ideas: list[SavedIdeaIn] = []

    @model_validator(mode="after")
    def check_unique_ids(self):
        _require_unique("sub_problems", [sp.id for sp in self.sub_problems])
        _require_unique(
            "choices", [c.id for sp in self.sub_problems for c in sp.choices],
        )
        _require_unique("candidates", [c.id for c in self.candidates])
        _require_unique("desires", [d.id for d in self.desires])
        _require_unique("saved_ideas", [i.id for i in self.saved_ideas])
        return self


def _require_unique(collection: str, ids: list[str]) -> None:
    seen: set[str] = set()
    for entity_id in ids:
        if entity_id in seen:
            raise ValueError(f"duplicate id '{entity_id}' in {collection}")
        seen.add(entity_id)
