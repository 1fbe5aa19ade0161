"""Feedback persistence and the broadcast that follows a successful write."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import HTTPException, Request

from dal.feedback_dal import FeedbackDAL
from models.events import FeedbackPayload
from services.realtime.event_router import EventRouter

logger = logging.getLogger(__name__)


async def list_feedback(request: Request, viewpoint_id: str, session_id: str) -> List[Dict[str, Any]]:
    """Return feedback for one viewpoint in one session, newest first."""
    items = await FeedbackDAL(request.app.state.db_initializer).list_feedback(viewpoint_id, session_id)
    return [item.to_json() for item in items]


async def submit_feedback(
    request: Request,
    viewpoint_id: str,
    session_id: str,
    text: str,
    tags: Sequence[str],
    socket_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Store a feedback item, then publish it to the members of its session.

    The write is the source of truth: a failed broadcast is logged and does
    not fail the request, and a failed write never broadcasts.
    """
    viewpoint_id = viewpoint_id.strip()
    session_id = session_id.strip()
    if not viewpoint_id or not session_id:
        raise HTTPException(status_code=400, detail="viewpointId and sessionId are required")

    record = await FeedbackDAL(request.app.state.db_initializer).create_feedback(
        viewpoint_id, session_id, text, [tag for tag in tags if tag]
    )
    logger.info("Stored feedback %s for viewpoint %s in session %s", record.id, viewpoint_id, session_id)

    router: EventRouter = request.app.state.event_router
    try:
        await router.publish_feedback(FeedbackPayload.model_validate(record.to_json()), socket_id=socket_id)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Failed to publish feedback %s to session %s", record.id, session_id)

    return {"success": True, "feedbackId": record.id}
