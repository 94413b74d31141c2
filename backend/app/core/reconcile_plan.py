"""Reconcile Plan — pure diff of a snapshot against persisted rows.

Invariants:
    - plan_collection never does IO; it maps (stored rows, snapshot rows, policy) to
      a CollectionPlan of deletes / updates / inserts
    - PRESERVE_REFERENCED: unchanged rows produce NO mutation (identity kept)
    - REPLACE_ALL: every stored id is deleted and every snapshot row inserted
    - Deletes run children-first, writes parents-first (see APPLY_ORDER)

Design Decisions:
    - One planner parameterized by IdentityPolicy, policies declared in one table:
      a collection that gains an external reference flips one entry here instead of
      growing its own save path (ADR: candidates are referenced by chat messages)
    - Rows are plain dicts keyed by ORM column name: the shell applies them with
      Core insert/update/delete without per-entity code
    - Sub-problems and choices stay REPLACE_ALL: nothing references them yet
"""

from dataclasses import dataclass, field

from app.core.domain_types import IdentityPolicy
from app.core.entities import ProjectDocument

COLLECTION_POLICIES: dict[str, IdentityPolicy] = {
    "candidates": IdentityPolicy.PRESERVE_REFERENCED,
    "desires": IdentityPolicy.REPLACE_ALL,
    "saved_ideas": IdentityPolicy.REPLACE_ALL,
    "sub_problems": IdentityPolicy.REPLACE_ALL,
    "choices": IdentityPolicy.REPLACE_ALL,
}

# Parents before children. Deletes walk this in reverse.
APPLY_ORDER: tuple[str, ...] = (
    "candidates", "desires", "saved_ideas", "sub_problems", "choices",
)


@dataclass(frozen=True)
class CollectionPlan:
    """Mutation set for one persisted collection."""
    name: str
    policy: IdentityPolicy
    deletes: tuple[str, ...] = ()
    updates: tuple[dict, ...] = ()
    inserts: tuple[dict, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.deletes or self.updates or self.inserts)

    def counts(self) -> dict[str, int]:
        return {
            "deletes": len(self.deletes),
            "updates": len(self.updates),
            "inserts": len(self.inserts),
        }


@dataclass(frozen=True)
class ProjectPlan:
    """Everything one reconciliation pass will write, in apply order."""
    problem_statement: str
    collections: dict[str, CollectionPlan] = field(default_factory=dict)

    def deletion_order(self) -> list[CollectionPlan]:
        return [self.collections[n] for n in reversed(APPLY_ORDER) if n in self.collections]

    def write_order(self) -> list[CollectionPlan]:
        return [self.collections[n] for n in APPLY_ORDER if n in self.collections]

    def summary(self) -> dict[str, dict[str, int]]:
        return {name: plan.counts() for name, plan in self.collections.items()}


def document_rows(doc: ProjectDocument) -> dict[str, list[dict]]:
    """Flatten a document into per-collection row dicts (column name -> value)."""
    choices = [
        {
            "id": c.id,
            "sub_problem_id": sp.id,
            "text": c.text,
            "description": c.description,
            "is_outside_domain": c.is_outside_domain,
            "source": c.source,
            "position": pos,
        }
        for sp in doc.sub_problems
        for pos, c in enumerate(sp.choices)
    ]
    return {
        "candidates": [
            {"id": c.id, "text": c.text, "reactions": dict(c.reactions), "position": pos}
            for pos, c in enumerate(doc.candidates)
        ],
        "desires": [
            {"id": d.id, "text": d.text, "category": d.category.value, "position": pos}
            for pos, d in enumerate(doc.desires)
        ],
        "saved_ideas": [
            {
                "id": i.id, "title": i.title, "combination": dict(i.combination),
                "ratings": dict(i.ratings), "position": pos,
            }
            for pos, i in enumerate(doc.saved_ideas)
        ],
        "sub_problems": [
            {
                "id": sp.id, "title": sp.title, "position": pos,
                "search_queries": [
                    {"kind": q.kind.value, "text": q.text} for q in sp.search_queries
                ],
            }
            for pos, sp in enumerate(doc.sub_problems)
        ],
        "choices": choices,
    }


def _row_changed(stored: dict, incoming: dict) -> bool:
    return any(
        stored.get(key) != value for key, value in incoming.items() if key != "id"
    )


def plan_collection(
    name: str,
    stored: dict[str, dict],
    incoming: list[dict],
    policy: IdentityPolicy,
) -> CollectionPlan:
    """Diff one collection. stored maps id -> persisted row fields."""
    if policy is IdentityPolicy.REPLACE_ALL:
        return CollectionPlan(
            name=name, policy=policy,
            deletes=tuple(stored), inserts=tuple(incoming),
        )

    incoming_ids = {row["id"] for row in incoming}
    return CollectionPlan(
        name=name,
        policy=policy,
        deletes=tuple(row_id for row_id in stored if row_id not in incoming_ids),
        updates=tuple(
            row for row in incoming
            if row["id"] in stored and _row_changed(stored[row["id"]], row)
        ),
        inserts=tuple(row for row in incoming if row["id"] not in stored),
    )


def plan_project(
    doc: ProjectDocument,
    stored: dict[str, dict[str, dict]],
    policies: dict[str, IdentityPolicy] | None = None,
) -> ProjectPlan:
    """Plan every collection of a project. Pure, no IO.

    stored: collection name -> (id -> row fields) as currently persisted.
    """
    policies = policies or COLLECTION_POLICIES
    rows = document_rows(doc)
    return ProjectPlan(
        problem_statement=doc.problem_statement,
        collections={
            name: plan_collection(name, stored.get(name, {}), rows[name], policies[name])
            for name in APPLY_ORDER
        },
    )
