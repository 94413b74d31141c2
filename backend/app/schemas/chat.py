"""Chat Schemas — message posting and notification read-marking.

Invariants:
    - MessageCreate.content: 1-10000 chars, stripped, non-empty
    - mentioned_member_ids is supplied by the caller (detection happens client-side)
"""

from pydantic import BaseModel, Field, field_validator


class MessageCreate(BaseModel):
    """Post body for a chat message."""
    content: str = Field(min_length=1, max_length=10_000)
    author_id: str = Field(min_length=1, max_length=64)
    candidate_id: str | None = Field(None, max_length=64)
    mentioned_member_ids: list[str] = []

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content cannot be empty or whitespace")
        return v

    @field_validator("candidate_id")
    @classmethod
    def blank_candidate_is_project_thread(cls, v: str | None) -> str | None:
        return v or None


class MarkReadRequest(BaseModel):
    notification_ids: list[str] = Field(default_factory=list, max_length=200)
