"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Identifiers are client-generated opaque strings, preserved verbatim by every save path
    - PassionLevel is bounded 1–5; Rating is bounded 0–5
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Identifiers are str (not UUID): clients may mint any unique token
"""

import uuid
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ProjectId = NewType("ProjectId", str)
UserId = NewType("UserId", str)
SubProblemId = NewType("SubProblemId", str)
ChoiceId = NewType("ChoiceId", str)
CandidateId = NewType("CandidateId", str)
DesireId = NewType("DesireId", str)
SavedIdeaId = NewType("SavedIdeaId", str)

MAX_ID_LENGTH = 64


def new_id() -> str:
    """Mint a fresh client-side identifier."""
    return str(uuid.uuid4())


# ─── Value Bounds ────────────────────────────────────────────────

PASSION_MIN = 1
PASSION_MAX = 5
RATING_MIN = 0
RATING_MAX = 5


# ─── Enums ───────────────────────────────────────────────────────

class QueryKind(str, Enum):
    """Reformulation strategy for a sub-problem search query."""
    GENERAL = "general"
    PARTIAL = "partial"
    PARALLEL = "parallel"


class DesireCategory(str, Enum):
    """Whose need a desire expresses."""
    SELF = "self"
    TARGET = "target"
    THIRD_PARTY = "third-party"


class IdentityPolicy(str, Enum):
    """How a persisted collection is brought in line with a snapshot.

    PRESERVE_REFERENCED: diff by id, update in place, delete only what vanished.
    REPLACE_ALL: delete every stored row in scope, insert the snapshot rows.
    """
    PRESERVE_REFERENCED = "preserve_referenced"
    REPLACE_ALL = "replace_all"
