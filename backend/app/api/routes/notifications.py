"""Notification Routes — per-user inbox listing and read-marking.

Invariants:
    - GET returns at most `limit` notifications, newest first
    - Read flags in the GET response are as of fetch time, even with mark_read=true
    - PUT only touches notifications addressed to the path user

Design Decisions:
    - Candidate summary is looked up at read time and is null once the
      candidate was removed (the message keeps its candidate_id regardless)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.infrastructure.database import get_db
from app.models.notification import Notification
from app.schemas.chat import MarkReadRequest
from app.services.messaging import MessagingService

router = APIRouter(prefix="/api/v1/users", tags=["notifications"])


def _notification_to_payload(n: Notification, candidate_texts: dict[str, str]) -> dict:
    message = n.message
    candidate_id = message.candidate_id
    return {
        "id": n.id,
        "read": n.read,
        "created_at": n.created_at.isoformat(),
        "message": {
            "id": message.id,
            "content": message.content,
            "candidate_id": candidate_id,
            "author": {"name": message.author.name, "avatar": message.author.avatar},
            "project": {"id": message.project.id, "title": message.project.title},
            "candidate": (
                {"id": candidate_id, "text": candidate_texts[candidate_id]}
                if candidate_id in candidate_texts else None
            ),
        },
    }


@router.get("/{user_id}/notifications")
async def list_notifications(
    user_id: str,
    limit: int | None = Query(None, ge=1, le=100),
    mark_read: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """List a user's most recent notifications."""
    service = MessagingService(db, get_settings().notification_limit)
    notifications = await service.list_notifications(user_id, limit, mark_read)
    texts = await service.candidate_texts(
        {n.message.candidate_id for n in notifications if n.message.candidate_id},
    )
    return {
        "notifications": [_notification_to_payload(n, texts) for n in notifications],
    }


@router.put("/{user_id}/notifications")
async def mark_notifications_read(
    user_id: str, body: MarkReadRequest, db: AsyncSession = Depends(get_db),
):
    """Mark notifications read."""
    updated = await MessagingService(db).mark_read(user_id, body.notification_ids)
    return {"updated": updated}
