"""Project API Client — httpx transport for Load/Save, chat and notifications.

Invariants:
    - Every non-2xx response is mapped onto the ThinkBiggerError taxonomy
    - Transport failures (connect, timeout) surface as RemoteSyncError (recoverable)
    - 404 surfaces as ResourceNotFoundError (terminal for the caller's view)

Design Decisions:
    - AsyncClient injected, never created per call: one connection pool per
      workspace, and tests hand in a client bound to the ASGI app
    - Wire shapes come from core/document_codec.py (same codec as the server)
"""

import logging

import httpx

from app.core.document_codec import document_to_payload, project_from_payload
from app.core.entities import ProjectDocument, ProjectHeader
from app.core.errors import (
    ResourceNotFoundError, InputValidationError,
    ConflictError, RemoteSyncError, ErrorContext,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message", "")
    return str(body)


def _raise_for_status(
    response: httpx.Response, resource: str, resource_id: str, ctx: ErrorContext,
) -> None:
    """Translate an HTTP error response into a ThinkBiggerError."""
    if response.is_success:
        return
    message = _error_message(response)
    if response.status_code == 404:
        raise ResourceNotFoundError(resource, resource_id, ctx)
    if response.status_code in (400, 422):
        raise InputValidationError(message or "Invalid request", "body", ctx)
    if response.status_code == 409:
        raise ConflictError(message or "Conflict", ctx)
    raise RemoteSyncError(
        message or f"Request failed with {response.status_code}",
        response.status_code, ctx,
    )


class ProjectApiClient:
    """Implements ProjectGateway and ChatGateway over HTTP."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def _request(
        self, method: str, url: str, resource: str, resource_id: str,
        ctx: ErrorContext, **kwargs,
    ) -> dict:
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(
                "Request to %s failed: %s", url, e,
                extra={"project_id": ctx.project_id, "user_id": ctx.user_id},
            )
            raise RemoteSyncError(f"Could not reach service: {e}", None, ctx) from e
        _raise_for_status(response, resource, resource_id, ctx)
        return response.json()

    # --- ProjectGateway -------------------------------------------------------

    async def load_project(self, project_id: str) -> tuple[ProjectHeader, ProjectDocument]:
        data = await self._request(
            "GET", f"/api/v1/projects/{project_id}/sync",
            "Project", project_id, ErrorContext(project_id=project_id),
        )
        return project_from_payload(data["project"])

    async def save_project(self, project_id: str, document: ProjectDocument) -> None:
        ctx = ErrorContext(project_id=project_id)
        data = await self._request(
            "POST", f"/api/v1/projects/{project_id}/sync",
            "Project", project_id, ctx, json=document_to_payload(document),
        )
        if not data.get("success"):
            raise RemoteSyncError("Save was not acknowledged", None, ctx)

    # --- ChatGateway ----------------------------------------------------------

    async def list_messages(
        self, project_id: str, candidate_id: str | None = None,
    ) -> list[dict]:
        params = {"candidate_id": candidate_id} if candidate_id else {}
        data = await self._request(
            "GET", f"/api/v1/projects/{project_id}/chat",
            "Project", project_id, ErrorContext(project_id=project_id),
            params=params,
        )
        return data["messages"]

    async def post_message(
        self, project_id: str, author_id: str, content: str,
        candidate_id: str | None = None,
        mentioned_member_ids: list[str] | None = None,
    ) -> dict:
        data = await self._request(
            "POST", f"/api/v1/projects/{project_id}/chat",
            "Project", project_id,
            ErrorContext(project_id=project_id, user_id=author_id),
            json={
                "content": content,
                "author_id": author_id,
                "candidate_id": candidate_id,
                "mentioned_member_ids": mentioned_member_ids or [],
            },
        )
        return data["message"]

    async def list_notifications(
        self, user_id: str, limit: int | None = None, mark_read: bool = False,
    ) -> list[dict]:
        params: dict = {}
        if limit:
            params["limit"] = limit
        if mark_read:
            params["mark_read"] = "true"
        data = await self._request(
            "GET", f"/api/v1/users/{user_id}/notifications",
            "User", user_id, ErrorContext(user_id=user_id), params=params,
        )
        return data["notifications"]

    async def mark_notifications_read(
        self, user_id: str, notification_ids: list[str],
    ) -> int:
        data = await self._request(
            "PUT", f"/api/v1/users/{user_id}/notifications",
            "User", user_id, ErrorContext(user_id=user_id),
            json={"notification_ids": notification_ids},
        )
        return data["updated"]
