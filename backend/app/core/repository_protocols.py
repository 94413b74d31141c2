"""Boundary Protocols — contracts between the workspace core and its transport.

Invariants:
    - Core NEVER imports from workspace/ or services/ — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy; tests pass
      plain fakes to the autosave scheduler and workspace
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the Working Store that feeds them is never async itself
"""

from typing import Protocol

from app.core.entities import ProjectDocument, ProjectHeader


class ProjectGateway(Protocol):
    """Load/Save boundary — implemented by ProjectApiClient."""
    async def load_project(
        self, project_id: str,
    ) -> tuple[ProjectHeader, ProjectDocument]: ...
    async def save_project(
        self, project_id: str, document: ProjectDocument,
    ) -> None: ...


class ChatGateway(Protocol):
    """Messaging boundary — implemented by ProjectApiClient."""
    async def list_messages(
        self, project_id: str, candidate_id: str | None = None,
    ) -> list[dict]: ...
    async def post_message(
        self, project_id: str, author_id: str, content: str,
        candidate_id: str | None = None,
        mentioned_member_ids: list[str] | None = None,
    ) -> dict: ...
    async def list_notifications(
        self, user_id: str, limit: int | None = None, mark_read: bool = False,
    ) -> list[dict]: ...
    async def mark_notifications_read(
        self, user_id: str, notification_ids: list[str],
    ) -> int: ...
