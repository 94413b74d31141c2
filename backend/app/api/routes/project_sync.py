"""Project Sync Routes — Load and Save of a full project document.

Invariants:
    - GET returns the document plus header and member roster
    - POST replaces the persisted document in one transaction or fails as a whole
    - Body validated by ProjectSnapshot before reaching the service

Design Decisions:
    - No partial-field save: every POST carries all collections so the
      reconciliation can recompute identity sets
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.document_codec import document_from_payload, project_to_payload
from app.infrastructure.database import get_db
from app.schemas.project import ProjectSnapshot
from app.services.project_sync import ProjectSyncService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["sync"])


@router.get("/{project_id}/sync")
async def load_project(project_id: str, db: AsyncSession = Depends(get_db)):
    """Load the full project document."""
    header, document = await ProjectSyncService(db).load(project_id)
    return {"project": project_to_payload(header, document)}


@router.post("/{project_id}/sync")
async def save_project(
    project_id: str, body: ProjectSnapshot, db: AsyncSession = Depends(get_db),
):
    """Reconcile storage to the submitted snapshot."""
    document = document_from_payload(body.model_dump(mode="json"))
    await ProjectSyncService(db).save(project_id, document)
    return {"success": True}
