"""Snapshot & chat body validation — boundary checks before any service runs.

Invariants:
    - Identifiers are 1-64 chars and unique per collection (choices across sub-problems)
    - Reactions 1-5, ratings 0-5, desire category closed
    - Message content is stripped and must be non-empty
    - A blank candidate_id means the project-level thread
"""

import pytest
from pydantic import ValidationError

from app.schemas.chat import MessageCreate, MarkReadRequest
from app.schemas.project import ProjectSnapshot


# --- ProjectSnapshot ----------------------------------------------------------

def test_empty_snapshot_is_valid():
    snapshot = ProjectSnapshot()
    assert snapshot.problem_statement == ""
    assert snapshot.candidates == []


def test_extra_keys_are_ignored():
    snapshot = ProjectSnapshot.model_validate({"selected_combination": {"sp1": "c1"}})
    assert "selected_combination" not in snapshot.model_dump()


def test_rejects_overlong_id():
    with pytest.raises(ValidationError):
        ProjectSnapshot.model_validate({"candidates": [{"id": "x" * 65, "text": "t"}]})


def test_rejects_empty_id():
    with pytest.raises(ValidationError):
        ProjectSnapshot.model_validate({"desires": [{"id": "", "text": "t", "category": "self"}]})


def test_rejects_duplicate_choice_ids_across_sub_problems():
    with pytest.raises(ValidationError, match="duplicate id 'c1' in choices"):
        ProjectSnapshot.model_validate({"sub_problems": [
            {"id": "sp1", "title": "a", "choices": [{"id": "c1", "text": "x"}]},
            {"id": "sp2", "title": "b", "choices": [{"id": "c1", "text": "y"}]},
        ]})


@pytest.mark.parametrize("level", [0, 6])
def test_rejects_reaction_out_of_range(level):
    with pytest.raises(ValidationError):
        ProjectSnapshot.model_validate({"candidates": [
            {"id": "C1", "text": "t", "reactions": {"u1": level}},
        ]})


@pytest.mark.parametrize("rating,ok", [(0, True), (5, True), (6, False), (-1, False)])
def test_rating_bounds(rating, ok):
    body = {"saved_ideas": [{"id": "i1", "title": "t", "ratings": {"d1": rating}}]}
    if ok:
        assert ProjectSnapshot.model_validate(body).saved_ideas[0].ratings == {"d1": rating}
    else:
        with pytest.raises(ValidationError):
            ProjectSnapshot.model_validate(body)


def test_rejects_unknown_query_kind():
    with pytest.raises(ValidationError):
        ProjectSnapshot.model_validate({"sub_problems": [{
            "id": "sp1", "title": "t", "search_queries": [{"kind": "lateral", "text": "q"}],
        }]})


# --- MessageCreate ------------------------------------------------------------

def test_message_content_is_stripped():
    body = MessageCreate(content="  hi  ", author_id="u1")
    assert body.content == "hi"
    assert body.mentioned_member_ids == []


def test_whitespace_message_rejected():
    with pytest.raises(ValidationError):
        MessageCreate(content="   ", author_id="u1")


def test_blank_candidate_id_is_project_thread():
    assert MessageCreate(content="hi", author_id="u1", candidate_id="").candidate_id is None


def test_mark_read_defaults_to_empty():
    assert MarkReadRequest().notification_ids == []
