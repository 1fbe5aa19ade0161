"""Async Data Access Layer for tags and their per-viewpoint vote counters.

Provides TagDAL with async operations compatible with
`utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import uuid4

import aiosqlite

from models.feedback_records import TagRecord
from utils.database_init import AsyncDatabaseInitializer


class TagConflictError(Exception):
    """A tag with the same name already exists in the session."""


class TagNotFoundError(LookupError):
    """The tag does not exist in the given session."""


class TagDAL:
    """Data access layer for tags and viewpoint votes.

    Votes are not stored on the tag itself: each (tag, session, viewpoint)
    triple owns its own counter row, created lazily on the first vote.
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_tag(self, name: str, session_id: str) -> TagRecord:
        """Insert a new tag and return it with a zero vote count.

        Raises:
            TagConflictError: If `name` is already used within `session_id`.
        """
        record = TagRecord(
            id=uuid4().hex,
            name=name,
            session_id=session_id,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        async with self._db.connection() as conn:
            try:
                await conn.execute(
                    "INSERT INTO tags (id, name, session_id, created_at) VALUES (?, ?, ?, ?)",
                    (record.id, record.name, record.session_id, record.created_at),
                )
            except aiosqlite.IntegrityError as exc:
                raise TagConflictError(f"Tag {name!r} already exists in session {session_id}") from exc
            await conn.commit()
        return record

    async def list_tags(self, session_id: str, viewpoint_id: Optional[str] = None) -> List[TagRecord]:
        """List the session's tags with vote counts relative to `viewpoint_id`.

        Tags without a counter row for the viewpoint (or when no viewpoint is
        given) report zero votes.
        """
        async with self._db.connection() as conn:
            cur = await conn.execute(
                """
                SELECT t.id, t.name, t.session_id, t.created_at, COALESCE(v.count, 0)
                FROM tags AS t
                LEFT JOIN viewpoint_votes AS v
                    ON v.tag_id = t.id AND v.session_id = t.session_id AND v.viewpoint_id = ?
                WHERE t.session_id = ?
                ORDER BY t.created_at, t.rowid
                """,
                (viewpoint_id, session_id),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def vote_tag(self, tag_id: str, session_id: str, viewpoint_id: str, action: str) -> int:
        """Apply one vote and return the resulting count (never below zero).

        Args:
            tag_id: Tag being voted on.
            session_id: Session owning the tag.
            viewpoint_id: Viewpoint the vote applies to.
            action: "add" to increment, "remove" to decrement.

        Raises:
            TagNotFoundError: If the tag does not exist in the session.
            ValueError: If `action` is not "add" or "remove".
        """
        if action not in ("add", "remove"):
            raise ValueError(f"Unsupported vote action: {action!r}")
        delta = 1 if action == "add" else -1

        async with self._db.connection() as conn:
            cur = await conn.execute(
                "SELECT 1 FROM tags WHERE id = ? AND session_id = ?",
                (tag_id, session_id),
            )
            if await cur.fetchone() is None:
                raise TagNotFoundError(f"Tag {tag_id} not found in session {session_id}")

            if delta < 0:
                cur = await conn.execute(
                    "SELECT count FROM viewpoint_votes WHERE tag_id = ? AND session_id = ? AND viewpoint_id = ?",
                    (tag_id, session_id, viewpoint_id),
                )
                row = await cur.fetchone()
                if row is None or row[0] <= 0:
                    return 0

            await conn.execute(
                """
                INSERT INTO viewpoint_votes (tag_id, session_id, viewpoint_id, count, created_at)
                VALUES (?, ?, ?, MAX(0, ?), ?)
                ON CONFLICT (tag_id, session_id, viewpoint_id)
                DO UPDATE SET count = MAX(0, viewpoint_votes.count + ?)
                """,
                (tag_id, session_id, viewpoint_id, delta, datetime.now(timezone.utc).isoformat(), delta),
            )
            cur = await conn.execute(
                "SELECT count FROM viewpoint_votes WHERE tag_id = ? AND session_id = ? AND viewpoint_id = ?",
                (tag_id, session_id, viewpoint_id),
            )
            row = await cur.fetchone()
            await conn.commit()
            return max(0, int(row[0])) if row else 0

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> TagRecord:
        """Convert a DB row tuple into a TagRecord."""
        return TagRecord(
            id=row[0],
            name=row[1],
            session_id=row[2],
            created_at=row[3],
            votes=int(row[4]) if len(row) > 4 else 0,
        )
