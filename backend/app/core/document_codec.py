"""Document Codec — JSON-safe dict <-> ProjectDocument conversion.

Invariants:
    - document_to_payload produces only dicts, lists, str, int, bool, None
    - document_from_payload tolerates missing keys (falls back to empty defaults)
    - Collection order is preserved in both directions
    - Enum fields serialize to their .value strings

Design Decisions:
    - One codec shared by the service (request body, load response) and the
      workspace client (save body, load parsing): a single wire shape
    - Maps are copied on decode so callers never alias a request body
"""

from datetime import datetime

from app.core.domain_types import QueryKind, DesireCategory
from app.core.entities import (
    ProjectDocument, ProjectHeader, SubProblem, Choice, SearchQuery,
    Candidate, Desire, SavedIdea, Member,
)


# ─── Encode ──────────────────────────────────────────────────────

def _choice_to_payload(choice: Choice) -> dict:
    return {
        "id": choice.id,
        "text": choice.text,
        "description": choice.description,
        "is_outside_domain": choice.is_outside_domain,
        "source": choice.source,
    }


def _sub_problem_to_payload(sp: SubProblem) -> dict:
    return {
        "id": sp.id,
        "title": sp.title,
        "search_queries": [
            {"kind": q.kind.value, "text": q.text} for q in sp.search_queries
        ],
        "choices": [_choice_to_payload(c) for c in sp.choices],
    }


def document_to_payload(doc: ProjectDocument) -> dict:
    """Serialize the save subset of a project. Pure, no IO."""
    return {
        "problem_statement": doc.problem_statement,
        "sub_problems": [_sub_problem_to_payload(sp) for sp in doc.sub_problems],
        "candidates": [
            {"id": c.id, "text": c.text, "reactions": dict(c.reactions)}
            for c in doc.candidates
        ],
        "desires": [
            {"id": d.id, "text": d.text, "category": d.category.value}
            for d in doc.desires
        ],
        "saved_ideas": [
            {
                "id": i.id, "title": i.title,
                "combination": dict(i.combination), "ratings": dict(i.ratings),
            }
            for i in doc.saved_ideas
        ],
    }


def member_to_payload(member: Member) -> dict:
    return {"id": member.id, "name": member.name, "avatar": member.avatar}


def project_to_payload(header: ProjectHeader, doc: ProjectDocument) -> dict:
    """Full load response: header + document + member roster."""
    return {
        "id": header.id,
        "title": header.title,
        "owner_id": header.owner_id,
        "updated_at": header.updated_at.isoformat() if header.updated_at else None,
        **document_to_payload(doc),
        "members": [member_to_payload(m) for m in header.members],
    }


# ─── Decode ──────────────────────────────────────────────────────

def _choice_from_payload(data: dict) -> Choice:
    return Choice(
        id=data["id"],
        text=data.get("text", ""),
        description=data.get("description") or "",
        is_outside_domain=bool(data.get("is_outside_domain", False)),
        source=data.get("source"),
    )


def _sub_problem_from_payload(data: dict) -> SubProblem:
    return SubProblem(
        id=data["id"],
        title=data.get("title", ""),
        choices=tuple(_choice_from_payload(c) for c in data.get("choices") or []),
        search_queries=tuple(
            SearchQuery(kind=QueryKind(q["kind"]), text=q["text"])
            for q in data.get("search_queries") or []
        ),
    )


def document_from_payload(data: dict) -> ProjectDocument:
    """Reconstruct a ProjectDocument. Missing keys fall back to empty defaults."""
    if not data:
        return ProjectDocument()
    return ProjectDocument(
        problem_statement=data.get("problem_statement") or "",
        sub_problems=tuple(
            _sub_problem_from_payload(sp) for sp in data.get("sub_problems") or []
        ),
        candidates=tuple(
            Candidate(
                id=c["id"], text=c.get("text", ""),
                reactions={k: int(v) for k, v in (c.get("reactions") or {}).items()},
            )
            for c in data.get("candidates") or []
        ),
        desires=tuple(
            Desire(id=d["id"], text=d.get("text", ""), category=DesireCategory(d["category"]))
            for d in data.get("desires") or []
        ),
        saved_ideas=tuple(
            SavedIdea(
                id=i["id"], title=i.get("title", ""),
                combination=dict(i.get("combination") or {}),
                ratings={k: int(v) for k, v in (i.get("ratings") or {}).items()},
            )
            for i in data.get("saved_ideas") or []
        ),
    )


def project_from_payload(data: dict) -> tuple[ProjectHeader, ProjectDocument]:
    """Split a load response into header (with members) and document."""
    updated_at = data.get("updated_at")
    header = ProjectHeader(
        id=data["id"],
        title=data.get("title") or "Untitled Project",
        owner_id=data.get("owner_id", ""),
        updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        members=tuple(
            Member(id=m["id"], name=m["name"], avatar=m.get("avatar"))
            for m in data.get("members") or []
        ),
    )
    return header, document_from_payload(data)
