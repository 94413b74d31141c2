"""Messaging — thread listing and mention-driven notifications.

Invariants:
    - One notification per distinct mentioned member, none for the author
    - A failed notification insert rolls the message back too
    - Thread filter is exact (project-level vs candidate thread)
    - A thread cannot be anchored to another project's candidate
    - Notifications newest first, capped, read flags as of fetch time
"""

import pytest
from sqlalchemy import select, func

from app.core.entities import ProjectDocument, Candidate
from app.core.errors import (
    ResourceNotFoundError, InputValidationError, ConflictError, DatabaseError,
)
from app.models.message import Message
from app.models.notification import Notification
from app.services.messaging import MessagingService
from app.services.project_sync import ProjectSyncService


async def _post(factory, **kwargs):
    async with factory() as db:
        return await MessagingService(db).post_message("p-1", **kwargs)


async def _count(factory, model) -> int:
    async with factory() as db:
        return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def test_post_creates_one_notification_per_mentioned_member(
    test_session_factory, seed_project,
):
    message, notifications = await _post(
        test_session_factory, author_id="u-ana", content="@Ben @Cleo thoughts?",
        mentioned_member_ids=["u-ben", "u-cleo", "u-ben"],
    )
    assert {n.recipient_id for n in notifications} == {"u-ben", "u-cleo"}
    assert all(n.message_id == message.id for n in notifications)
    assert await _count(test_session_factory, Notification) == 2


async def test_self_mention_creates_no_notification(test_session_factory, seed_project):
    _, notifications = await _post(
        test_session_factory, author_id="u-ana", content="note to @Ana",
        mentioned_member_ids=["u-ana"],
    )
    assert notifications == []
    assert await _count(test_session_factory, Notification) == 0


async def test_failed_notification_rolls_back_message(test_session_factory, seed_project):
    with pytest.raises(DatabaseError):
        await _post(
            test_session_factory, author_id="u-ana", content="hello @Ghost",
            mentioned_member_ids=["u-ghost"],
        )
    assert await _count(test_session_factory, Message) == 0
    assert await _count(test_session_factory, Notification) == 0


async def test_blank_content_rejected(test_session_factory, seed_project):
    with pytest.raises(InputValidationError):
        await _post(test_session_factory, author_id="u-ana", content="   ")


async def test_unknown_project_or_author(test_session_factory, seed_project):
    async with test_session_factory() as db:
        with pytest.raises(ResourceNotFoundError):
            await MessagingService(db).post_message("nope", "u-ana", "hi")
    with pytest.raises(ResourceNotFoundError):
        await _post(test_session_factory, author_id="u-nobody", content="hi")


async def test_thread_filter_is_exact(test_session_factory, seed_project):
    await _post(test_session_factory, author_id="u-ana", content="project-wide")
    await _post(test_session_factory, author_id="u-ben", content="on C1", candidate_id="C1")
    await _post(test_session_factory, author_id="u-ana", content="more on C1", candidate_id="C1")

    async with test_session_factory() as db:
        service = MessagingService(db)
        project_thread = await service.list_messages("p-1")
        c1_thread = await service.list_messages("p-1", "C1")
        c2_thread = await service.list_messages("p-1", "C2")

    assert [m.content for m in project_thread] == ["project-wide"]
    assert [m.content for m in c1_thread] == ["on C1", "more on C1"]
    assert c2_thread == []


async def test_notifications_newest_first_and_capped(test_session_factory, seed_project):
    for i in range(3):
        await _post(
            test_session_factory, author_id="u-ana", content=f"@Ben #{i}",
            mentioned_member_ids=["u-ben"],
        )
    async with test_session_factory() as db:
        notifications = await MessagingService(db, notification_limit=2).list_notifications("u-ben")
        assert [n.message.content for n in notifications] == ["@Ben #2", "@Ben #1"]


async def test_mark_read_on_fetch_reports_previous_state(test_session_factory, seed_project):
    await _post(
        test_session_factory, author_id="u-ana", content="@Ben hi",
        mentioned_member_ids=["u-ben"],
    )
    async with test_session_factory() as db:
        first = await MessagingService(db).list_notifications("u-ben", mark_read=True)
        assert [n.read for n in first] == [False]
    async with test_session_factory() as db:
        second = await MessagingService(db).list_notifications("u-ben")
        assert [n.read for n in second] == [True]


async def test_mark_read_ignores_other_recipients(test_session_factory, seed_project):
    _, notifications = await _post(
        test_session_factory, author_id="u-ana", content="@Ben hi",
        mentioned_member_ids=["u-ben"],
    )
    async with test_session_factory() as db:
        updated = await MessagingService(db).mark_read("u-cleo", [notifications[0].id])
    assert updated == 0
    async with test_session_factory() as db:
        assert await MessagingService(db).mark_read("u-ben", [notifications[0].id]) == 1


async def test_notifications_for_unknown_user(test_session_factory, seed_users):
    async with test_session_factory() as db:
        with pytest.raises(ResourceNotFoundError):
            await MessagingService(db).list_notifications("u-nobody")


async def test_candidate_of_other_project_rejected(
    test_session_factory, seed_project, other_project,
):
    async with test_session_factory() as db:
        await ProjectSyncService(db).save(
            "p-2", ProjectDocument(candidates=(Candidate(id="C9", text="Theirs"),)),
        )

    with pytest.raises(ConflictError):
        await _post(
            test_session_factory, author_id="u-ana", content="hijack",
            candidate_id="C9", mentioned_member_ids=["u-ben"],
        )
    assert await _count(test_session_factory, Message) == 0
    assert await _count(test_session_factory, Notification) == 0


async def test_own_or_unsaved_candidate_thread_accepted(test_session_factory, seed_project):
    async with test_session_factory() as db:
        await ProjectSyncService(db).save(
            "p-1", ProjectDocument(candidates=(Candidate(id="C1", text="Ours"),)),
        )
    await _post(test_session_factory, author_id="u-ana", content="saved", candidate_id="C1")
    await _post(test_session_factory, author_id="u-ana", content="not yet", candidate_id="C7")
    assert await _count(test_session_factory, Message) == 2
