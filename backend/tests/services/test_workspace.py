"""Project Workspace — end-to-end over the ASGI app via ProjectApiClient.

Invariants:
    - Edits reach storage after the quiet period without an explicit save
    - Leaving the workspace flushes a pending save
    - A missing project fails open() and nothing is wired
    - @mentions typed in a message notify exactly the named members
    - Viewing notifications marks them read on the server
"""

import pytest

from app.config import Settings
from app.core.domain_types import DesireCategory
from app.core.entities import ProjectDocument, ProjectHeader
from app.core.errors import ResourceNotFoundError, RemoteSyncError
from app.services.project_sync import ProjectSyncService
from app.workspace.project_workspace import ProjectWorkspace, open_workspace

QUIET = 0.05


def _settings(quiet: float = QUIET) -> Settings:
    return Settings(
        api_base_url="http://test",
        autosave_quiet_seconds=quiet,
        chat_poll_interval_seconds=60,
    )


async def _stored(factory, project_id="p-1") -> ProjectDocument:
    async with factory() as db:
        _, document = await ProjectSyncService(db).load(project_id)
    return document


async def test_edits_autosave_after_quiet_period(
    asgi_transport, test_session_factory, seed_project,
):
    async with open_workspace("p-1", "u-ana", _settings(), asgi_transport) as ws:
        assert ws.header.title == "Commuter bikes"
        store = ws.store
        sp = store.add_sub_problem("Power")
        store.add_choice(sp, "Battery")
        candidate = store.add_candidate("Longer rides")
        store.toggle_reaction(candidate, "u-ana", 5)
        store.add_desire("Light", DesireCategory.TARGET)
        assert store.dirty

        await ws.scheduler.wait_idle()

        assert not store.dirty
        assert ws.last_error is None
        assert await _stored(test_session_factory) == store.document


async def test_close_flushes_pending_save(
    asgi_transport, test_session_factory, seed_project,
):
    async with open_workspace("p-1", "u-ana", _settings(quiet=60), asgi_transport) as ws:
        ws.store.set_problem_statement("How might commuters ride further?")
        assert ws.scheduler.pending

    stored = await _stored(test_session_factory)
    assert stored.problem_statement == "How might commuters ride further?"


async def test_open_unknown_project_fails(asgi_transport, seed_users):
    with pytest.raises(ResourceNotFoundError):
        async with open_workspace("nope", "u-ana", _settings(), asgi_transport):
            pass


async def test_mentions_notify_named_members(asgi_transport, seed_project):
    async with open_workspace("p-1", "u-ana", _settings(), asgi_transport) as ana:
        await ana.send_message("@Ben and @Cleo, thoughts? cc @Ana")

    async with open_workspace("p-1", "u-ben", _settings(), asgi_transport) as ben:
        first = await ben.view_notifications()
        assert [n["read"] for n in first] == [False]
        assert first[0]["message"]["author"]["name"] == "Ana"
        second = await ben.view_notifications()
        assert [n["read"] for n in second] == [True]

    async with open_workspace("p-1", "u-ana", _settings(), asgi_transport) as ana:
        assert await ana.view_notifications() == []


async def test_open_chat_shows_thread_and_appends_sent(asgi_transport, seed_project):
    async with open_workspace("p-1", "u-ana", _settings(), asgi_transport) as ws:
        candidate = ws.store.add_candidate("Longer rides")
        await ws.scheduler.flush()
        await ws.send_message("first on candidate", candidate_id=candidate)

        messages = await ws.open_chat(candidate)
        assert [m["content"] for m in messages] == ["first on candidate"]

        await ws.send_message("second", candidate_id=candidate)
        await ws.send_message("project-level")
        assert [m["content"] for m in ws.messages] == ["first on candidate", "second"]

        await ws.close_chat()
        assert ws.messages == []


# ─── Failure handling with a fake gateway ────────────────────────

class _FlakyGateway:
    """Loads an empty project; the first save fails."""

    def __init__(self):
        self.saves = []
        self.fail_next = True

    async def load_project(self, project_id):
        return ProjectHeader(id=project_id, title="t", owner_id="u1"), ProjectDocument()

    async def save_project(self, project_id, document):
        if self.fail_next:
            self.fail_next = False
            raise RemoteSyncError("offline")
        self.saves.append(document)


async def test_failed_save_keeps_store_dirty_and_retries():
    gateway = _FlakyGateway()
    async with ProjectWorkspace(gateway, "u1", quiet_seconds=QUIET) as ws:
        await ws.open("p1")
        ws.store.add_candidate("one")
        await ws.scheduler.wait_idle()

        assert ws.store.dirty
        assert isinstance(ws.last_error, RemoteSyncError)
        assert gateway.saves == []

        ws.store.add_candidate("two")
        await ws.scheduler.wait_idle()

        assert not ws.store.dirty
        assert ws.last_error is None
        assert [c.text for c in gateway.saves[0].candidates] == ["one", "two"]
