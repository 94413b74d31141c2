"""Working Store — the client-held, mutable holder of one project's state.

Invariants:
    - document is always a complete, immutable ProjectDocument (swapped atomically)
    - Every effective mutation sets dirty and notifies subscribers exactly once
    - No-op mutations (unknown ids, incomplete save) neither dirty nor notify
    - mark_saved only clears dirty if the saved snapshot is still the current one

Design Decisions:
    - Thin stateful shell over document_ops pure functions (ADR: impureim sandwich)
    - Subscribers instead of a hard reference to the autosave scheduler: the store
      stays synchronous and IO-free, the workspace wires the two together
    - id_factory injectable so tests get deterministic identifiers
"""

import logging
import random
from typing import Callable

from app.core import document_ops as ops
from app.core.domain_types import QueryKind, DesireCategory, new_id
from app.core.entities import (
    ProjectDocument, Choice, Candidate, Member, SavedIdea,
)

logger = logging.getLogger(__name__)

Listener = Callable[[ProjectDocument], None]


class WorkingStore:
    """Per-project editable state — synchronous, no IO."""

    def __init__(
        self,
        project_id: str | None = None,
        document: ProjectDocument | None = None,
        members: tuple[Member, ...] = (),
        id_factory: Callable[[], str] = new_id,
    ):
        self.project_id = project_id
        self.members = members
        self.selected_combination: dict[str, str] = {}
        self.dirty = False
        self._document = document or ProjectDocument()
        self._id_factory = id_factory
        self._listeners: list[Listener] = []

    @property
    def document(self) -> ProjectDocument:
        return self._document

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a mutation listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def load(self, project_id: str, document: ProjectDocument, members=()) -> None:
        """Replace state with a freshly loaded snapshot. Not a mutation."""
        self.project_id = project_id
        self.members = tuple(members)
        self.selected_combination = {}
        self._document = document
        self.dirty = False

    def mark_saved(self, document: ProjectDocument) -> None:
        """Clear dirty if `document` is still the current snapshot."""
        if document is self._document:
            self.dirty = False

    # --- internal -------------------------------------------------------------

    def _commit(
        self, document: ProjectDocument,
        combination: dict[str, str] | None = None,
    ) -> bool:
        changed = document is not self._document
        if combination is not None and combination != self.selected_combination:
            self.selected_combination = combination
            changed = True
        if not changed:
            return False
        self._document = document
        self.dirty = True
        for listener in list(self._listeners):
            listener(document)
        return True

    # --- mutations ------------------------------------------------------------

    def set_problem_statement(self, text: str) -> None:
        self._commit(ops.set_problem_statement(self._document, text))

    def promote_candidate(self, candidate_id: str) -> None:
        self._commit(ops.promote_candidate(self._document, candidate_id))

    def add_sub_problem(self, title: str) -> str:
        sub_problem_id = self._id_factory()
        self._commit(ops.add_sub_problem(self._document, sub_problem_id, title))
        return sub_problem_id

    def update_sub_problem(self, sub_problem_id: str, title: str) -> None:
        self._commit(ops.update_sub_problem(self._document, sub_problem_id, title))

    def remove_sub_problem(self, sub_problem_id: str) -> None:
        doc, combination = ops.remove_sub_problem(
            self._document, self.selected_combination, sub_problem_id,
        )
        self._commit(doc, combination)

    def add_choice(
        self, sub_problem_id: str, text: str, description: str = "",
        is_outside_domain: bool = False, source: str | None = None,
    ) -> str:
        choice = Choice(
            id=self._id_factory(), text=text, description=description,
            is_outside_domain=is_outside_domain, source=source,
        )
        self._commit(ops.add_choice(self._document, sub_problem_id, choice))
        return choice.id

    def remove_choice(self, sub_problem_id: str, choice_id: str) -> None:
        doc, combination = ops.remove_choice(
            self._document, self.selected_combination, sub_problem_id, choice_id,
        )
        self._commit(doc, combination)

    def select_choice(self, sub_problem_id: str, choice_id: str) -> None:
        self._commit(self._document, ops.select_choice(
            self._document, self.selected_combination, sub_problem_id, choice_id,
        ))

    def randomize_selection(self, rng: random.Random | None = None) -> None:
        self._commit(self._document, ops.randomize_combination(
            self._document, self.selected_combination, rng,
        ))

    def add_search_query(self, sub_problem_id: str, kind: QueryKind, text: str) -> None:
        self._commit(ops.add_search_query(self._document, sub_problem_id, kind, text))

    def add_candidate(self, text: str) -> str:
        candidate_id = self._id_factory()
        self._commit(ops.add_candidate(self._document, candidate_id, text))
        return candidate_id

    def remove_candidate(self, candidate_id: str) -> None:
        self._commit(ops.remove_candidate(self._document, candidate_id))

    def toggle_reaction(self, candidate_id: str, member_id: str, level: int) -> None:
        self._commit(ops.toggle_reaction(self._document, candidate_id, member_id, level))

    def add_desire(self, text: str, category: DesireCategory) -> str:
        desire_id = self._id_factory()
        self._commit(ops.add_desire(self._document, desire_id, text, category))
        return desire_id

    def remove_desire(self, desire_id: str) -> None:
        self._commit(ops.remove_desire(self._document, desire_id))

    def update_desire(self, desire_id: str, text: str) -> None:
        self._commit(ops.update_desire(self._document, desire_id, text))

    def save_idea(self, title: str) -> str | None:
        """Save the current combination. Returns the new id, or None if skipped."""
        idea_id = self._id_factory()
        saved = self._commit(ops.save_idea(
            self._document, self.selected_combination, idea_id, title,
        ))
        if not saved:
            logger.debug("save_idea skipped: combination incomplete or title blank")
            return None
        return idea_id

    def rate_idea(self, idea_id: str, desire_id: str, value: int) -> None:
        self._commit(ops.rate_idea(self._document, idea_id, desire_id, value))

    # --- derived views --------------------------------------------------------

    @property
    def is_combination_complete(self) -> bool:
        return ops.is_complete(self._document.sub_problems, self.selected_combination)

    def ranked_candidates(self) -> list[Candidate]:
        return ops.rank_candidates(self._document.candidates)

    def idea_scores(self, idea: SavedIdea) -> dict[DesireCategory, float]:
        return ops.idea_category_scores(idea, self._document.desires)
