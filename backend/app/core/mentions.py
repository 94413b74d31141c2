"""Mentions — @-mention detection and notification recipient selection.

Invariants:
    - A member is mentioned iff "@<name>" occurs as a substring of the content
    - Recipients exclude the author and contain each member at most once
    - Output order follows input order (roster order / mention order)
"""

from typing import Iterable

from app.core.entities import Member


def detect_mentions(content: str, members: Iterable[Member]) -> list[str]:
    """Ids of roster members whose @name appears in content."""
    return [m.id for m in members if m.name and f"@{m.name}" in content]


def notification_recipients(author_id: str, mentioned_ids: Iterable[str]) -> list[str]:
    """Distinct mentioned ids other than the author."""
    seen: set[str] = set()
    recipients = []
    for member_id in mentioned_ids:
        if member_id == author_id or member_id in seen:
            continue
        seen.add(member_id)
        recipients.append(member_id)
    return recipients
