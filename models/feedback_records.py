from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class TagRecord:
    """In-memory representation of a row in the tags table.

    Attributes:
        id: Primary key (hex UUID).
        name: Tag label, unique within its session.
        session_id: Session that owns the tag.
        created_at: ISO-8601 UTC timestamp when the row was inserted.
        votes: Vote count relative to the viewpoint the tag was read for.
    """

    id: str
    name: str
    session_id: str
    created_at: str
    votes: int = 0

    def to_json(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "sessionId": self.session_id,
            "createdAt": self.created_at,
            "votes": self.votes,
        }


@dataclass
class FeedbackRecord:
    """In-memory representation of a row in the feedback table.

    Attributes:
        id: Primary key (hex UUID), None before insertion.
        viewpoint_id: Viewpoint the comment refers to.
        session_id: Session the comment was written in.
        text: Free-text comment.
        tags: Tag names selected with the comment.
        timestamp: ISO-8601 UTC creation time.
    """

    id: Optional[str]
    viewpoint_id: str
    session_id: str
    text: str
    tags: List[str] = field(default_factory=list)
    timestamp: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "viewpointId": self.viewpoint_id,
            "sessionId": self.session_id,
            "text": self.text,
            "tags": list(self.tags),
            "timestamp": self.timestamp,
        }
