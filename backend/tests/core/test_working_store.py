"""Working Store — dirty tracking and subscriber notification.

Tests cover:
    - Effective mutations dirty the store and notify once
    - No-op mutations neither dirty nor notify
    - Selecting a choice outside its sub-problem is a no-op
    - load() resets state without dirtying; mark_saved only clears a current snapshot
    - Add operations return fresh ids from the injected factory
"""

import itertools

from app.core.domain_types import DesireCategory
from app.core.entities import ProjectDocument, Member
from app.core.working_store import WorkingStore


def _store():
    counter = itertools.count(1)
    return WorkingStore(
        project_id="p1", id_factory=lambda: f"id{next(counter)}",
    )


def test_new_store_is_clean():
    store = _store()
    assert not store.dirty
    assert store.document == ProjectDocument()


def test_mutation_dirties_and_notifies_once():
    store = _store()
    seen = []
    store.subscribe(seen.append)
    store.set_problem_statement("How might we?")
    assert store.dirty
    assert len(seen) == 1
    assert seen[0] is store.document


def test_noop_mutation_is_silent():
    store = _store()
    seen = []
    store.subscribe(seen.append)
    store.remove_candidate("missing")
    store.update_desire("missing", "x")
    store.set_problem_statement("")
    assert not store.dirty
    assert seen == []


def test_unsubscribe_stops_notifications():
    store = _store()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    store.add_candidate("x")
    assert seen == []


def test_add_operations_return_factory_ids():
    store = _store()
    sp = store.add_sub_problem("Power")
    choice = store.add_choice(sp, "Battery")
    candidate = store.add_candidate("Cheaper commutes")
    assert (sp, choice, candidate) == ("id1", "id2", "id3")
    assert store.document.sub_problems[0].choices[0].id == "id2"


def test_load_replaces_state_without_dirtying():
    store = _store()
    store.add_candidate("x")
    sp = store.add_sub_problem("Power")
    store.select_choice(sp, store.add_choice(sp, "Battery"))
    assert store.selected_combination
    doc = ProjectDocument(problem_statement="Loaded")
    store.load("p2", doc, (Member(id="u1", name="Ana"),))
    assert store.project_id == "p2"
    assert store.document is doc
    assert store.selected_combination == {}
    assert store.members[0].name == "Ana"
    assert not store.dirty


def test_mark_saved_ignores_stale_snapshot():
    store = _store()
    store.set_problem_statement("one")
    saved = store.document
    store.set_problem_statement("two")
    store.mark_saved(saved)
    assert store.dirty
    store.mark_saved(store.document)
    assert not store.dirty


def test_selection_changes_are_mutations():
    store = _store()
    sp = store.add_sub_problem("Power")
    c = store.add_choice(sp, "Battery")
    store.mark_saved(store.document)
    store.select_choice(sp, c)
    assert store.dirty
    assert store.is_combination_complete


def test_invalid_selection_is_silent():
    store = _store()
    sp1 = store.add_sub_problem("Power")
    c1 = store.add_choice(sp1, "Battery")
    sp2 = store.add_sub_problem("Frame")
    store.mark_saved(store.document)
    seen = []
    store.subscribe(seen.append)

    store.select_choice("ghost", "zzz")
    store.select_choice(sp2, c1)

    assert store.selected_combination == {}
    assert not store.dirty
    assert seen == []


def test_save_idea_returns_none_when_incomplete():
    store = _store()
    store.add_sub_problem("Power")
    assert store.save_idea("Idea") is None
    assert store.document.saved_ideas == ()


def test_save_idea_and_scores():
    store = _store()
    sp = store.add_sub_problem("Power")
    c = store.add_choice(sp, "Battery")
    store.select_choice(sp, c)
    d = store.add_desire("Fast", DesireCategory.TARGET)
    idea_id = store.save_idea("Quick battery")
    store.rate_idea(idea_id, d, 5)
    idea = store.document.saved_ideas[0]
    assert idea.id == idea_id
    assert store.idea_scores(idea)[DesireCategory.TARGET] == 100.0


def test_remove_sub_problem_updates_selection():
    store = _store()
    sp = store.add_sub_problem("Power")
    c = store.add_choice(sp, "Battery")
    store.select_choice(sp, c)
    store.remove_sub_problem(sp)
    assert store.selected_combination == {}
    assert store.document.sub_problems == ()


def test_ranked_candidates_and_promotion():
    store = _store()
    a = store.add_candidate("A")
    b = store.add_candidate("B")
    store.toggle_reaction(b, "u1", 5)
    store.toggle_reaction(a, "u1", 2)
    assert [c.id for c in store.ranked_candidates()] == [b, a]
    store.promote_candidate(b)
    assert store.document.problem_statement == "B"
