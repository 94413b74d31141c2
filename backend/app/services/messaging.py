"""Messaging — chat threads and mention-driven notification fan-out.

Invariants:
    - post_message writes the message and ALL its notifications in one transaction;
      any failure rolls back the message as well
    - One notification per distinct mentioned member, never for the author
    - Thread filter is exact: candidate_id None matches only project-level messages
    - A candidate thread is anchored in its own project: a candidate_id stored under
      another project is a conflict; an unknown or since-removed id is accepted
    - Messages ascend by created_at; notifications descend, capped at the limit

Design Decisions:
    - Mention detection is the caller's job (client roster match); the service
      trusts mentioned_member_ids and only filters the author out
    - list_notifications(mark_read=True) marks the fetched unread rows in the same
      transaction; the default keeps the two-call "read on view" flow
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ThinkBiggerError, ResourceNotFoundError, InputValidationError,
    ConflictError, DatabaseError, ErrorContext,
)
from app.core.mentions import notification_recipients
from app.models.candidate import Candidate
from app.models.message import Message
from app.models.notification import Notification
from app.models.user import User
from app.services.project_sync import get_project_or_404

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_LIMIT = 20


class MessagingService:
    """Chat messages and notifications for one request's DB session."""

    def __init__(self, db: AsyncSession, notification_limit: int = DEFAULT_NOTIFICATION_LIMIT):
        self.db = db
        self.notification_limit = notification_limit

    async def _get_user_or_404(self, user_id: str) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise ResourceNotFoundError("User", user_id, ErrorContext(user_id=user_id))
        return user

    async def _check_thread_anchor(
        self, project_id: str, candidate_id: str, ctx: ErrorContext,
    ) -> None:
        """A candidate thread may not point at another project's candidate."""
        owner = (await self.db.execute(
            select(Candidate.project_id).where(Candidate.id == candidate_id),
        )).scalar_one_or_none()
        if owner is not None and owner != project_id:
            raise ConflictError(
                f"Candidate {candidate_id} belongs to another project", ctx,
            )

    # --- Messages -------------------------------------------------------------

    async def list_messages(
        self, project_id: str, candidate_id: str | None = None,
    ) -> list[Message]:
        """Messages of one thread, oldest first."""
        await get_project_or_404(self.db, project_id)
        thread = (
            Message.candidate_id.is_(None) if candidate_id is None
            else Message.candidate_id == candidate_id
        )
        result = await self.db.execute(
            select(Message)
            .where(Message.project_id == project_id, thread)
            .order_by(Message.created_at.asc()),
        )
        return list(result.scalars().all())

    async def post_message(
        self,
        project_id: str,
        author_id: str,
        content: str,
        candidate_id: str | None = None,
        mentioned_member_ids: list[str] | None = None,
    ) -> tuple[Message, list[Notification]]:
        """Create a message plus one notification per mentioned member, atomically."""
        ctx = ErrorContext(project_id=project_id, user_id=author_id)
        content = (content or "").strip()
        if not content:
            raise InputValidationError("Message content cannot be empty", "content", ctx)

        try:
            project = await get_project_or_404(self.db, project_id)
            author = await self._get_user_or_404(author_id)
            if candidate_id:
                await self._check_thread_anchor(project_id, candidate_id, ctx)
            message = Message(
                project=project,
                author=author,
                candidate_id=candidate_id or None,
                content=content,
            )
            self.db.add(message)
            await self.db.flush()

            notifications = [
                Notification(recipient_id=recipient_id, message_id=message.id)
                for recipient_id in notification_recipients(
                    author_id, mentioned_member_ids or [],
                )
            ]
            self.db.add_all(notifications)
            await self.db.commit()
        except ThinkBiggerError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Message post aborted: %s", e,
                extra={"project_id": project_id, "user_id": author_id},
            )
            raise DatabaseError("Message post aborted", "commit", ctx) from e

        logger.info(
            "Message posted",
            extra={
                "project_id": project_id, "message_id": message.id,
                "candidate_id": candidate_id, "counts": len(notifications),
            },
        )
        return message, notifications

    # --- Notifications --------------------------------------------------------

    async def list_notifications(
        self, user_id: str, limit: int | None = None, mark_read: bool = False,
    ) -> list[Notification]:
        """Most recent notifications, newest first. Read flags as of fetch time."""
        await self._get_user_or_404(user_id)
        result = await self.db.execute(
            select(Notification)
            .where(Notification.recipient_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit or self.notification_limit),
        )
        notifications = list(result.scalars().all())

        unread = [n.id for n in notifications if not n.read]
        if mark_read and unread:
            await self._set_read(user_id, unread)
        return notifications

    async def mark_read(self, user_id: str, notification_ids: list[str]) -> int:
        """Mark the given notifications read; ids of other recipients are ignored."""
        if not notification_ids:
            return 0
        return await self._set_read(user_id, notification_ids)

    async def _set_read(self, user_id: str, notification_ids: list[str]) -> int:
        try:
            result = await self.db.execute(
                update(Notification)
                .where(
                    Notification.id.in_(notification_ids),
                    Notification.recipient_id == user_id,
                )
                .values(read=True),
                execution_options={"synchronize_session": False},
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Mark read failed: %s", e, extra={"user_id": user_id})
            raise DatabaseError(
                "Mark read failed", "update", ErrorContext(user_id=user_id),
            ) from e
        return result.rowcount

    async def candidate_texts(self, candidate_ids: set[str]) -> dict[str, str]:
        """Current text of the candidates that still exist."""
        if not candidate_ids:
            return {}
        result = await self.db.execute(
            select(Candidate.id, Candidate.text).where(Candidate.id.in_(candidate_ids)),
        )
        return {row.id: row.text for row in result}
