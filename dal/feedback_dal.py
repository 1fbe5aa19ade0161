"""Async Data Access Layer for the feedback table."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List, Sequence
from uuid import uuid4

from models.feedback_records import FeedbackRecord
from utils.database_init import AsyncDatabaseInitializer


class FeedbackDAL:
    """Data access layer for feedback items scoped to (viewpoint, session)."""

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_feedback(
        self,
        viewpoint_id: str,
        session_id: str,
        text: str,
        tags: Sequence[str],
    ) -> FeedbackRecord:
        """Insert a feedback item and return it with its id and timestamp."""
        record = FeedbackRecord(
            id=uuid4().hex,
            viewpoint_id=viewpoint_id,
            session_id=session_id,
            text=text,
            tags=list(tags),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        async with self._db.connection() as conn:
            await conn.execute(
                "INSERT INTO feedback (id, viewpoint_id, session_id, text, tags_json, timestamp) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.viewpoint_id,
                    record.session_id,
                    record.text,
                    json.dumps(record.tags),
                    record.timestamp,
                ),
            )
            await conn.commit()
        return record

    async def list_feedback(self, viewpoint_id: str, session_id: str) -> List[FeedbackRecord]:
        """List feedback for one viewpoint within one session, newest first."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                """
                SELECT id, viewpoint_id, session_id, text, tags_json, timestamp
                FROM feedback
                WHERE viewpoint_id = ? AND session_id = ?
                ORDER BY timestamp DESC, rowid DESC
                """,
                (viewpoint_id, session_id),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> FeedbackRecord:
        try:
            tags = json.loads(row[4]) if row[4] else []
        except ValueError:
            tags = []
        return FeedbackRecord(
            id=row[0],
            viewpoint_id=row[1],
            session_id=row[2],
            text=row[3],
            tags=tags,
            timestamp=row[5],
        )
