"""Project Chat Routes — thread listing and message posting.

Invariants:
    - GET without candidate_id lists the project-level thread only
    - POST returns 201 with the created message and its author summary
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.database import get_db
from app.models.message import Message
from app.schemas.chat import MessageCreate
from app.services.messaging import MessagingService

router = APIRouter(prefix="/api/v1/projects", tags=["chat"])


def message_to_payload(message: Message) -> dict:
    author = message.author
    return {
        "id": message.id,
        "project_id": message.project_id,
        "candidate_id": message.candidate_id,
        "content": message.content,
        "created_at": message.created_at.isoformat(),
        "author": {"id": author.id, "name": author.name, "avatar": author.avatar},
    }


@router.get("/{project_id}/chat")
async def list_messages(
    project_id: str,
    candidate_id: str | None = Query(None, max_length=64),
    db: AsyncSession = Depends(get_db),
):
    """List one thread's messages, oldest first."""
    messages = await MessagingService(db).list_messages(project_id, candidate_id or None)
    return {"messages": [message_to_payload(m) for m in messages]}


@router.post("/{project_id}/chat", status_code=status.HTTP_201_CREATED)
async def post_message(
    project_id: str, body: MessageCreate, db: AsyncSession = Depends(get_db),
):
    """Post a message and notify mentioned members."""
    message, _ = await MessagingService(db).post_message(
        project_id,
        author_id=body.author_id,
        content=body.content,
        candidate_id=body.candidate_id,
        mentioned_member_ids=body.mentioned_member_ids,
    )
    return {"message": message_to_payload(message)}
