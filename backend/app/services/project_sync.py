"""Project Sync — Load and Save (reconciliation) for one project document.

Invariants:
    - save() is ONE transaction: problem statement + every collection, or nothing
    - Candidate rows keep their identity across saves (PRESERVE_REFERENCED);
      unchanged candidates are not written at all
    - Deletes run children-first, inserts parents-first (choices vs sub-problems)
    - An id already owned by another project/sub-problem aborts the pass (ConflictError)
    - Loaded collections are ordered by position; the load response is the exact
      shape the last save received

Design Decisions:
    - Pure planning in core/reconcile_plan.py, IO here (ADR: impureim sandwich)
    - Stored rows read as column tuples, not ORM entities: keeps the identity map
      empty so bulk delete/insert of the same ids in one pass cannot collide
    - One generic apply loop over _MODELS instead of per-entity save code
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, insert, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.entities import (
    ProjectDocument, ProjectHeader, Member,
    SubProblem as SubProblemEntity, Choice as ChoiceEntity, SearchQuery,
    Candidate as CandidateEntity, Desire as DesireEntity,
    SavedIdea as SavedIdeaEntity,
)
from app.core.domain_types import QueryKind, DesireCategory
from app.core.errors import (
    ThinkBiggerError, ResourceNotFoundError, ConflictError, DatabaseError,
    ErrorContext,
)
from app.core.reconcile_plan import ProjectPlan, CollectionPlan, plan_project
from app.models.project import Project
from app.models.sub_problem import SubProblem
from app.models.choice import Choice
from app.models.candidate import Candidate
from app.models.desire import Desire
from app.models.saved_idea import SavedIdea

logger = logging.getLogger(__name__)

_MODELS = {
    "candidates": Candidate,
    "desires": Desire,
    "saved_ideas": SavedIdea,
    "sub_problems": SubProblem,
    "choices": Choice,
}

# Columns compared by the planner (everything the client controls).
_FIELDS: dict[str, tuple[str, ...]] = {
    "candidates": ("text", "reactions", "position"),
    "desires": ("text", "category", "position"),
    "saved_ideas": ("title", "combination", "ratings", "position"),
    "sub_problems": ("title", "search_queries", "position"),
    "choices": (
        "sub_problem_id", "text", "description", "is_outside_domain",
        "source", "position",
    ),
}


async def get_project_or_404(db: AsyncSession, project_id: str) -> Project:
    """Get project or raise ResourceNotFoundError. Shared by sync and chat."""
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if not project:
        raise ResourceNotFoundError(
            "Project", project_id, ErrorContext(project_id=project_id),
        )
    return project


def _members_of(project: Project) -> tuple[Member, ...]:
    """Owner first, then members, de-duplicated by id."""
    roster: dict[str, Member] = {}
    for user in [project.owner, *project.members]:
        if user is not None and user.id not in roster:
            roster[user.id] = Member(id=user.id, name=user.name, avatar=user.avatar)
    return tuple(roster.values())


class ProjectSyncService:
    """Load a project document; reconcile a snapshot into storage."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Load -----------------------------------------------------------------

    async def load(self, project_id: str) -> tuple[ProjectHeader, ProjectDocument]:
        project = await get_project_or_404(self.db, project_id)
        header = ProjectHeader(
            id=project.id,
            title=project.title,
            owner_id=project.owner_id,
            updated_at=project.updated_at,
            members=_members_of(project),
        )
        return header, await self._load_document(project)

    async def _load_document(self, project: Project) -> ProjectDocument:
        sub_problems = (await self.db.execute(
            select(SubProblem)
            .where(SubProblem.project_id == project.id)
            .order_by(SubProblem.position),
        )).scalars().all()
        choices = (await self.db.execute(
            select(Choice)
            .where(Choice.sub_problem_id.in_([sp.id for sp in sub_problems]))
            .order_by(Choice.position),
        )).scalars().all()
        choices_by_parent: dict[str, list[ChoiceEntity]] = {}
        for c in choices:
            choices_by_parent.setdefault(c.sub_problem_id, []).append(ChoiceEntity(
                id=c.id, text=c.text, description=c.description,
                is_outside_domain=c.is_outside_domain, source=c.source,
            ))

        candidates = await self._ordered(Candidate, project.id)
        desires = await self._ordered(Desire, project.id)
        saved_ideas = await self._ordered(SavedIdea, project.id)

        return ProjectDocument(
            problem_statement=project.problem_statement,
            sub_problems=tuple(
                SubProblemEntity(
                    id=sp.id,
                    title=sp.title,
                    choices=tuple(choices_by_parent.get(sp.id, [])),
                    search_queries=tuple(
                        SearchQuery(kind=QueryKind(q["kind"]), text=q["text"])
                        for q in sp.search_queries or []
                    ),
                )
                for sp in sub_problems
            ),
            candidates=tuple(
                CandidateEntity(id=c.id, text=c.text, reactions=dict(c.reactions or {}))
                for c in candidates
            ),
            desires=tuple(
                DesireEntity(id=d.id, text=d.text, category=DesireCategory(d.category))
                for d in desires
            ),
            saved_ideas=tuple(
                SavedIdeaEntity(
                    id=i.id, title=i.title,
                    combination=dict(i.combination or {}),
                    ratings=dict(i.ratings or {}),
                )
                for i in saved_ideas
            ),
        )

    async def _ordered(self, model, project_id: str) -> list:
        result = await self.db.execute(
            select(model).where(model.project_id == project_id).order_by(model.position),
        )
        return list(result.scalars().all())

    # --- Save -----------------------------------------------------------------

    async def save(self, project_id: str, document: ProjectDocument) -> ProjectPlan:
        """Reconcile storage to `document` in one transaction. Returns the applied plan."""
        ctx = ErrorContext(project_id=project_id)
        try:
            await get_project_or_404(self.db, project_id)
            plan = plan_project(document, await self._stored_rows(project_id))
            await self._check_foreign_ids(plan, ctx)
            await self._apply(project_id, plan)
            await self.db.commit()
        except ThinkBiggerError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Project sync aborted: %s", e,
                extra={"project_id": project_id}, exc_info=True,
            )
            raise DatabaseError("Project sync aborted", "commit", ctx) from e

        logger.info(
            "Project synced",
            extra={"project_id": project_id, "counts": plan.summary()},
        )
        return plan

    async def _stored_rows(self, project_id: str) -> dict[str, dict[str, dict]]:
        """Current persisted rows per collection: id -> planner-visible fields."""
        stored: dict[str, dict[str, dict]] = {}
        for name, model in _MODELS.items():
            if name == "choices":
                continue
            stored[name] = await self._select_rows(
                name, model.project_id == project_id,
            )
        stored["choices"] = await self._select_rows(
            "choices", Choice.sub_problem_id.in_(list(stored["sub_problems"])),
        )
        return stored

    async def _select_rows(self, name: str, where) -> dict[str, dict]:
        model = _MODELS[name]
        columns = [getattr(model, f) for f in _FIELDS[name]]
        result = await self.db.execute(select(model.id, *columns).where(where))
        return {
            row.id: {f: getattr(row, f) for f in _FIELDS[name]}
            for row in result
        }

    async def _check_foreign_ids(self, plan: ProjectPlan, ctx: ErrorContext) -> None:
        """Reject inserts whose id is persisted elsewhere and not freed by this pass."""
        for collection in plan.write_order():
            insert_ids = [row["id"] for row in collection.inserts]
            if not insert_ids:
                continue
            model = _MODELS[collection.name]
            result = await self.db.execute(
                select(model.id).where(model.id.in_(insert_ids)),
            )
            taken = set(result.scalars().all()) - set(collection.deletes)
            if taken:
                ctx.collection = collection.name
                raise ConflictError(
                    f"{collection.name} id(s) already belong to another project: "
                    f"{', '.join(sorted(taken))}",
                    ctx,
                )

    async def _apply(self, project_id: str, plan: ProjectPlan) -> None:
        now = datetime.now(timezone.utc)
        await self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(problem_statement=plan.problem_statement, updated_at=now),
        )
        for collection in plan.deletion_order():
            await self._apply_deletes(project_id, collection)
        for collection in plan.write_order():
            await self._apply_writes(project_id, collection, now)

    async def _apply_deletes(self, project_id: str, collection: CollectionPlan) -> None:
        if not collection.deletes:
            return
        model = _MODELS[collection.name]
        stmt = delete(model).where(model.id.in_(collection.deletes))
        if hasattr(model, "project_id"):
            stmt = stmt.where(model.project_id == project_id)
        await self.db.execute(stmt, execution_options={"synchronize_session": False})

    async def _apply_writes(
        self, project_id: str, collection: CollectionPlan, now: datetime,
    ) -> None:
        model = _MODELS[collection.name]
        scoped = hasattr(model, "project_id")
        touch = {"updated_at": now} if hasattr(model, "updated_at") else {}

        for row in collection.updates:
            values = {k: v for k, v in row.items() if k != "id"}
            stmt = update(model).where(model.id == row["id"]).values(**values, **touch)
            if scoped:
                stmt = stmt.where(model.project_id == project_id)
            await self.db.execute(stmt, execution_options={"synchronize_session": False})

        if collection.inserts:
            rows = [
                {**row, **({"project_id": project_id} if scoped else {})}
                for row in collection.inserts
            ]
            await self.db.execute(insert(model), rows)
