"""Reconcile Plan — pure diff of snapshot rows against stored rows.

Tests cover:
    - PRESERVE_REFERENCED: unchanged rows produce nothing, changed rows update,
      vanished rows delete, new rows insert
    - REPLACE_ALL: delete every stored id, insert every snapshot row
    - Apply order: deletes children-first, writes parents-first
    - Row flattening carries positions and parent ids
"""

from app.core.domain_types import IdentityPolicy, DesireCategory, QueryKind
from app.core.entities import (
    ProjectDocument, SubProblem, Choice, Candidate, Desire, SearchQuery,
)
from app.core.reconcile_plan import (
    COLLECTION_POLICIES, document_rows, plan_collection, plan_project,
)


def _candidate_row(cid, text, position, reactions=None):
    return {"id": cid, "text": text, "reactions": reactions or {}, "position": position}


def test_candidates_preserve_identity_by_default():
    assert COLLECTION_POLICIES["candidates"] is IdentityPolicy.PRESERVE_REFERENCED
    assert COLLECTION_POLICIES["sub_problems"] is IdentityPolicy.REPLACE_ALL


def test_preserve_unchanged_rows_emit_nothing():
    stored = {"C1": {"text": "a", "reactions": {}, "position": 0}}
    plan = plan_collection(
        "candidates", stored, [_candidate_row("C1", "a", 0)],
        IdentityPolicy.PRESERVE_REFERENCED,
    )
    assert plan.is_empty


def test_preserve_diffs_by_id():
    stored = {
        "C1": {"text": "a", "reactions": {}, "position": 0},
        "C2": {"text": "b", "reactions": {}, "position": 1},
    }
    incoming = [
        _candidate_row("C2", "b", 0),
        _candidate_row("C3", "c", 1),
    ]
    plan = plan_collection(
        "candidates", stored, incoming, IdentityPolicy.PRESERVE_REFERENCED,
    )
    assert plan.deletes == ("C1",)
    # position moved 1 -> 0
    assert [r["id"] for r in plan.updates] == ["C2"]
    assert [r["id"] for r in plan.inserts] == ["C3"]


def test_preserve_detects_reaction_change():
    stored = {"C1": {"text": "a", "reactions": {"u1": 3}, "position": 0}}
    plan = plan_collection(
        "candidates", stored, [_candidate_row("C1", "a", 0, {"u1": 4})],
        IdentityPolicy.PRESERVE_REFERENCED,
    )
    assert plan.counts() == {"deletes": 0, "updates": 1, "inserts": 0}


def test_replace_all_deletes_and_reinserts():
    stored = {"d1": {}, "d2": {}}
    incoming = [{"id": "d1", "text": "x", "category": "self", "position": 0}]
    plan = plan_collection("desires", stored, incoming, IdentityPolicy.REPLACE_ALL)
    assert set(plan.deletes) == {"d1", "d2"}
    assert plan.inserts == tuple(incoming)
    assert plan.updates == ()


def test_document_rows_carry_positions_and_parents():
    doc = ProjectDocument(sub_problems=(
        SubProblem(
            id="sp1", title="Power",
            choices=(Choice(id="c1", text="a"), Choice(id="c2", text="b")),
            search_queries=(SearchQuery(kind=QueryKind.GENERAL, text="q"),),
        ),
    ))
    rows = document_rows(doc)
    assert [(c["id"], c["sub_problem_id"], c["position"]) for c in rows["choices"]] == [
        ("c1", "sp1", 0), ("c2", "sp1", 1),
    ]
    assert rows["sub_problems"][0]["search_queries"] == [{"kind": "general", "text": "q"}]


def test_plan_project_orders_deletes_children_first():
    plan = plan_project(ProjectDocument(), {})
    deletion = [c.name for c in plan.deletion_order()]
    writes = [c.name for c in plan.write_order()]
    assert deletion.index("choices") < deletion.index("sub_problems")
    assert writes.index("sub_problems") < writes.index("choices")


def test_plan_project_empty_snapshot_deletes_everything_stored():
    stored = {
        "candidates": {"C1": {"text": "a", "reactions": {}, "position": 0}},
        "desires": {"d1": {}},
    }
    plan = plan_project(ProjectDocument(problem_statement="p"), stored)
    assert plan.problem_statement == "p"
    assert plan.collections["candidates"].deletes == ("C1",)
    assert plan.collections["desires"].deletes == ("d1",)
    assert plan.summary()["choices"] == {"deletes": 0, "updates": 0, "inserts": 0}


def test_plan_project_respects_policy_override():
    doc = ProjectDocument(
        candidates=(Candidate(id="C1", text="a"),),
        desires=(Desire(id="d1", text="x", category=DesireCategory.SELF),),
    )
    stored = {"candidates": {"C1": {"text": "a", "reactions": {}, "position": 0}}}
    policies = {**COLLECTION_POLICIES, "candidates": IdentityPolicy.REPLACE_ALL}
    plan = plan_project(doc, stored, policies)
    assert plan.collections["candidates"].deletes == ("C1",)
    assert len(plan.collections["candidates"].inserts) == 1


def test_plan_project_resave_leaves_candidates_untouched():
    """Stored rows never carry their id as a field; only real fields are compared."""
    doc = ProjectDocument(candidates=(
        Candidate(id="C1", text="a", reactions={"u": 4}),
        Candidate(id="C2", text="b"),
    ))
    stored = {
        "candidates": {
            row["id"]: {k: v for k, v in row.items() if k != "id"}
            for row in document_rows(doc)["candidates"]
        },
    }
    plan = plan_project(doc, stored)
    assert plan.collections["candidates"].is_empty
