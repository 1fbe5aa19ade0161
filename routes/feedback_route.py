"""FastAPI routes for viewpoint feedback."""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from controllers.feedback_controller import list_feedback, submit_feedback

router = APIRouter(prefix="/api/feedback", tags=["feedback"])
logger = logging.getLogger(__name__)


class SubmitFeedbackPayload(BaseModel):
    viewpoint_id: str = Field(alias="viewpointId")
    session_id: str = Field(alias="sessionId")
    text: str
    tags: List[str] = Field(default_factory=list)
    socket_id: Optional[str] = Field(default=None, alias="socketId")


@router.get("")
async def list_feedback_route(
    request: Request,
    viewpoint_id: str = Query(..., alias="viewpointId", min_length=1),
    session_id: str = Query(..., alias="sessionId", min_length=1),
):
    try:
        return await list_feedback(request, viewpoint_id, session_id)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.exception("Error fetching feedback for %s in session %s", viewpoint_id, session_id)
        raise HTTPException(status_code=500, detail="Failed to fetch feedback") from exc


@router.post("")
async def submit_feedback_route(request: Request, payload: SubmitFeedbackPayload):
    try:
        return await submit_feedback(
            request,
            payload.viewpoint_id,
            payload.session_id,
            payload.text,
            payload.tags,
            socket_id=payload.socket_id,
        )
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.exception("Error saving feedback for session %s", payload.session_id)
        raise HTTPException(status_code=500, detail="Failed to save feedback") from exc
