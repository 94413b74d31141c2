"""Project Workspace — one open project: store, autosave, chat and inbox.

Invariants:
    - open() loads before anything can mutate; a missing project is terminal
      (ResourceNotFoundError propagates and nothing is wired)
    - Every effective store mutation arms the autosave scheduler
    - A successful save clears dirty only if no newer mutation happened meanwhile
    - close() stops chat polling first, then flushes any pending save

Design Decisions:
    - Lifecycle-scoped async context manager: the scheduler and poller never
      outlive the workspace that created them
    - Mentions resolved here against the loaded roster, so the service only
      ever sees member ids
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Protocol

import httpx

from app.config import Settings, get_settings
from app.core.domain_types import new_id
from app.core.entities import ProjectDocument, ProjectHeader
from app.core.errors import ThinkBiggerError, InputValidationError, ErrorContext
from app.core.mentions import detect_mentions
from app.core.repository_protocols import ProjectGateway, ChatGateway
from app.core.working_store import WorkingStore
from app.workspace.api_client import ProjectApiClient
from app.workspace.autosave import AutosaveScheduler, DEFAULT_QUIET_SECONDS
from app.workspace.chat_poller import ChatPoller, DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)


class Gateway(ProjectGateway, ChatGateway, Protocol):
    """Both boundaries, as served by ProjectApiClient."""


class ProjectWorkspace:
    """Client-side session for one project and one signed-in user."""

    def __init__(
        self,
        gateway: Gateway,
        user_id: str,
        quiet_seconds: float = DEFAULT_QUIET_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        id_factory: Callable[[], str] = new_id,
    ):
        self.gateway = gateway
        self.user_id = user_id
        self.poll_interval = poll_interval
        self.store = WorkingStore(id_factory=id_factory)
        self.scheduler = AutosaveScheduler(
            save=self._save,
            snapshot=self._snapshot,
            quiet_seconds=quiet_seconds,
            on_error=self._record_error,
        )
        self.header: ProjectHeader | None = None
        self.last_error: ThinkBiggerError | None = None
        self.messages: list[dict] = []
        self.notifications: list[dict] = []
        self.chat_candidate_id: str | None = None
        self._chat: ChatPoller | None = None
        self._unsubscribe: Callable[[], None] | None = None

    async def __aenter__(self) -> "ProjectWorkspace":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def project_id(self) -> str | None:
        return self.store.project_id

    def _require_open(self) -> str:
        if self.store.project_id is None:
            raise InputValidationError(
                "No project is open", "project_id", ErrorContext(user_id=self.user_id),
            )
        return self.store.project_id

    # --- Load / Save ----------------------------------------------------------

    async def open(self, project_id: str) -> "ProjectWorkspace":
        header, document = await self.gateway.load_project(project_id)
        self.store.load(project_id, document, header.members)
        self.header = header
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.scheduler.mark_dirty)
        logger.info(
            "Project opened",
            extra={"project_id": project_id, "user_id": self.user_id},
        )
        return self

    def _snapshot(self) -> tuple[str | None, ProjectDocument]:
        return self.store.project_id, self.store.document

    async def _save(self, project_id: str, document: ProjectDocument) -> None:
        await self.gateway.save_project(project_id, document)
        self.store.mark_saved(document)
        self.last_error = None

    def _record_error(self, error: ThinkBiggerError) -> None:
        self.last_error = error

    # --- Chat -----------------------------------------------------------------

    def _set_messages(self, messages: list[dict]) -> None:
        self.messages = messages

    async def open_chat(self, candidate_id: str | None = None) -> list[dict]:
        """Show one thread (project-level when candidate_id is None) and start polling."""
        project_id = self._require_open()
        await self.close_chat()
        self.chat_candidate_id = candidate_id
        self._chat = ChatPoller(
            fetch=lambda: self.gateway.list_messages(project_id, candidate_id),
            on_update=self._set_messages,
            interval=self.poll_interval,
        )
        await self._chat.start()
        return self.messages

    async def close_chat(self) -> None:
        if self._chat is not None:
            await self._chat.stop()
            self._chat = None
        self.messages = []
        self.chat_candidate_id = None

    async def send_message(self, content: str, candidate_id: str | None = None) -> dict:
        """Post to a thread, notifying every roster member @-mentioned by name."""
        project_id = self._require_open()
        mentioned = detect_mentions(content, self.store.members)
        message = await self.gateway.post_message(
            project_id, self.user_id, content,
            candidate_id=candidate_id, mentioned_member_ids=mentioned,
        )
        if self._chat is not None and self.chat_candidate_id == candidate_id:
            self.messages = [*self.messages, message]
        return message

    # --- Notifications --------------------------------------------------------

    async def view_notifications(self, limit: int | None = None) -> list[dict]:
        """Fetch the inbox, then mark what was unread as read."""
        notifications = await self.gateway.list_notifications(self.user_id, limit)
        unread = [n["id"] for n in notifications if not n["read"]]
        if unread:
            await self.gateway.mark_notifications_read(self.user_id, unread)
        self.notifications = notifications
        return notifications

    # --- Lifecycle ------------------------------------------------------------

    async def close(self) -> None:
        await self.close_chat()
        await self.scheduler.aclose()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


@asynccontextmanager
async def open_workspace(
    project_id: str,
    user_id: str,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[ProjectWorkspace]:
    """Open a project over HTTP; pending saves are flushed on exit."""
    settings = settings or get_settings()
    async with httpx.AsyncClient(
        base_url=settings.api_base_url, transport=transport, timeout=10.0,
    ) as http:
        async with ProjectWorkspace(
            ProjectApiClient(http),
            user_id,
            quiet_seconds=settings.autosave_quiet_seconds,
            poll_interval=settings.chat_poll_interval_seconds,
        ) as workspace:
            await workspace.open(project_id)
            yield workspace
