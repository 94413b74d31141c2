"""Document Operations — pure mutations and derived views over a ProjectDocument.

Invariants:
    - Every mutation returns a NEW document; inputs are never modified
    - A mutation that changes nothing returns the SAME object (identity check = no-op)
    - Removing a sub-problem drops its combination entry
    - Candidate ranking is a stable sort: ties keep original order

Design Decisions:
    - Module-level functions, not methods: WorkingStore composes them, tests call
      them directly without any store (ADR: pure core, testable without mocks)
    - Combination lives outside the document: selection is per-viewer and never persisted
"""

import random
from dataclasses import replace

from app.core.domain_types import (
    QueryKind, DesireCategory, PASSION_MIN, PASSION_MAX, RATING_MIN, RATING_MAX,
)
from app.core.entities import (
    ProjectDocument, SubProblem, Choice, Candidate, Desire, SavedIdea, SearchQuery,
)
from app.core.errors import InputValidationError


# ─── Problem statement ───────────────────────────────────────────

def set_problem_statement(doc: ProjectDocument, text: str) -> ProjectDocument:
    if doc.problem_statement == text:
        return doc
    return replace(doc, problem_statement=text)


def promote_candidate(doc: ProjectDocument, candidate_id: str) -> ProjectDocument:
    """Make a candidate's text the project's official problem statement."""
    candidate = next((c for c in doc.candidates if c.id == candidate_id), None)
    if candidate is None:
        return doc
    return set_problem_statement(doc, candidate.text)


# ─── Sub-problems & choices ──────────────────────────────────────

def _map_sub_problem(doc, sub_problem_id, fn) -> ProjectDocument:
    """Apply fn to one sub-problem; return doc unchanged if id unknown."""
    if not any(sp.id == sub_problem_id for sp in doc.sub_problems):
        return doc
    return replace(doc, sub_problems=tuple(
        fn(sp) if sp.id == sub_problem_id else sp for sp in doc.sub_problems
    ))


def add_sub_problem(doc: ProjectDocument, sub_problem_id: str, title: str) -> ProjectDocument:
    return replace(
        doc, sub_problems=doc.sub_problems + (SubProblem(id=sub_problem_id, title=title),),
    )


def update_sub_problem(doc: ProjectDocument, sub_problem_id: str, title: str) -> ProjectDocument:
    return _map_sub_problem(
        doc, sub_problem_id, lambda sp: replace(sp, title=title),
    )


def remove_sub_problem(
    doc: ProjectDocument, combination: dict[str, str], sub_problem_id: str,
) -> tuple[ProjectDocument, dict[str, str]]:
    """Remove a sub-problem (and its choices) plus its selection."""
    kept = tuple(sp for sp in doc.sub_problems if sp.id != sub_problem_id)
    if len(kept) == len(doc.sub_problems):
        return doc, combination
    new_combination = {k: v for k, v in combination.items() if k != sub_problem_id}
    return replace(doc, sub_problems=kept), new_combination


def add_choice(
    doc: ProjectDocument, sub_problem_id: str, choice: Choice,
) -> ProjectDocument:
    return _map_sub_problem(
        doc, sub_problem_id,
        lambda sp: replace(sp, choices=sp.choices + (choice,)),
    )


def remove_choice(
    doc: ProjectDocument, combination: dict[str, str],
    sub_problem_id: str, choice_id: str,
) -> tuple[ProjectDocument, dict[str, str]]:
    """Remove a choice; a selection pointing at it is dropped too.

    Saved ideas are NOT touched — their combinations may dangle.
    """
    target = next((sp for sp in doc.sub_problems if sp.id == sub_problem_id), None)
    if target is None or choice_id not in target.choice_ids:
        return doc, combination
    new_doc = _map_sub_problem(
        doc, sub_problem_id,
        lambda sp: replace(sp, choices=tuple(c for c in sp.choices if c.id != choice_id)),
    )
    if combination.get(sub_problem_id) == choice_id:
        combination = {k: v for k, v in combination.items() if k != sub_problem_id}
    return new_doc, combination


def add_search_query(
    doc: ProjectDocument, sub_problem_id: str, kind: QueryKind, text: str,
) -> ProjectDocument:
    query = SearchQuery(kind=QueryKind(kind), text=text)
    return _map_sub_problem(
        doc, sub_problem_id,
        lambda sp: replace(sp, search_queries=sp.search_queries + (query,)),
    )


# ─── Combination ─────────────────────────────────────────────────

def select_choice(
    doc: ProjectDocument, combination: dict[str, str],
    sub_problem_id: str, choice_id: str,
) -> dict[str, str]:
    """Select a choice for its own sub-problem. Unknown pairs leave it unchanged."""
    for sp in doc.sub_problems:
        if sp.id == sub_problem_id and choice_id in sp.choice_ids:
            return {**combination, sub_problem_id: choice_id}
    return combination


def randomize_combination(
    doc: ProjectDocument, combination: dict[str, str],
    rng: random.Random | None = None,
) -> dict[str, str]:
    """Pick one random choice for every sub-problem that has any."""
    rng = rng or random.Random()
    result = dict(combination)
    for sp in doc.sub_problems:
        if sp.choices:
            result[sp.id] = rng.choice(sp.choices).id
    return result


def is_complete(
    sub_problems: tuple[SubProblem, ...], combination: dict[str, str],
) -> bool:
    """True iff every sub-problem has a selection among its current choices.

    An empty sub-problem list is never complete (nothing to combine).
    """
    if not sub_problems:
        return False
    return all(
        combination.get(sp.id) in sp.choice_ids for sp in sub_problems
    )


# ─── Candidates ──────────────────────────────────────────────────

def add_candidate(doc: ProjectDocument, candidate_id: str, text: str) -> ProjectDocument:
    return replace(
        doc, candidates=doc.candidates + (Candidate(id=candidate_id, text=text),),
    )


def remove_candidate(doc: ProjectDocument, candidate_id: str) -> ProjectDocument:
    kept = tuple(c for c in doc.candidates if c.id != candidate_id)
    if len(kept) == len(doc.candidates):
        return doc
    return replace(doc, candidates=kept)


def toggle_reaction(
    doc: ProjectDocument, candidate_id: str, member_id: str, level: int,
) -> ProjectDocument:
    """Set a member's passion level; the same level again clears the vote."""
    if not PASSION_MIN <= level <= PASSION_MAX:
        raise InputValidationError(
            f"Passion level must be between {PASSION_MIN} and {PASSION_MAX}, got {level}",
            "level",
        )

    def _toggle(c: Candidate) -> Candidate:
        reactions = dict(c.reactions)
        if reactions.get(member_id) == level:
            del reactions[member_id]
        else:
            reactions[member_id] = level
        return replace(c, reactions=reactions)

    if not any(c.id == candidate_id for c in doc.candidates):
        return doc
    return replace(doc, candidates=tuple(
        _toggle(c) if c.id == candidate_id else c for c in doc.candidates
    ))


def mean_reaction(candidate: Candidate) -> float:
    """Average passion level; 0 when nobody voted."""
    if not candidate.reactions:
        return 0.0
    return sum(candidate.reactions.values()) / len(candidate.reactions)


def rank_candidates(candidates: tuple[Candidate, ...]) -> list[Candidate]:
    """Highest mean reaction first. sorted() is stable, so ties keep input order."""
    return sorted(candidates, key=mean_reaction, reverse=True)


# ─── Desires ─────────────────────────────────────────────────────

def add_desire(
    doc: ProjectDocument, desire_id: str, text: str, category: DesireCategory,
) -> ProjectDocument:
    desire = Desire(id=desire_id, text=text, category=DesireCategory(category))
    return replace(doc, desires=doc.desires + (desire,))


def remove_desire(doc: ProjectDocument, desire_id: str) -> ProjectDocument:
    kept = tuple(d for d in doc.desires if d.id != desire_id)
    if len(kept) == len(doc.desires):
        return doc
    return replace(doc, desires=kept)


def update_desire(doc: ProjectDocument, desire_id: str, text: str) -> ProjectDocument:
    if not any(d.id == desire_id for d in doc.desires):
        return doc
    return replace(doc, desires=tuple(
        replace(d, text=text) if d.id == desire_id else d for d in doc.desires
    ))


# ─── Saved ideas ─────────────────────────────────────────────────

def save_idea(
    doc: ProjectDocument, combination: dict[str, str], idea_id: str, title: str,
) -> ProjectDocument:
    """Capture the current combination. No-op if incomplete or untitled."""
    if not title.strip() or not is_complete(doc.sub_problems, combination):
        return doc
    selection = {sp.id: combination[sp.id] for sp in doc.sub_problems}
    idea = SavedIdea(id=idea_id, title=title.strip(), combination=selection)
    return replace(doc, saved_ideas=doc.saved_ideas + (idea,))


def clamp_rating(value: int) -> int:
    return max(RATING_MIN, min(RATING_MAX, int(value)))


def rate_idea(
    doc: ProjectDocument, idea_id: str, desire_id: str, value: int,
) -> ProjectDocument:
    """Overwrite-or-insert a desire rating, clamped to [0, 5]."""
    if not any(i.id == idea_id for i in doc.saved_ideas):
        return doc
    rating = clamp_rating(value)
    return replace(doc, saved_ideas=tuple(
        replace(i, ratings={**i.ratings, desire_id: rating}) if i.id == idea_id else i
        for i in doc.saved_ideas
    ))


def idea_category_scores(
    idea: SavedIdea, desires: tuple[Desire, ...],
) -> dict[DesireCategory, float]:
    """Percentage (0–100) of the maximum achievable rating per desire category."""
    scores: dict[DesireCategory, float] = {}
    for category in DesireCategory:
        in_category = [d for d in desires if d.category == category]
        if not in_category:
            scores[category] = 0.0
            continue
        total = sum(idea.ratings.get(d.id, 0) for d in in_category)
        scores[category] = total / (len(in_category) * RATING_MAX) * 100
    return scores
