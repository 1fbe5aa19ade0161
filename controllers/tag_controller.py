"""Tag creation, listing and voting against the tag store."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request

from dal.tag_dal import TagConflictError, TagDAL, TagNotFoundError

logger = logging.getLogger(__name__)


def _tag_dal(request: Request) -> TagDAL:
    return TagDAL(request.app.state.db_initializer)


async def list_tags(request: Request, session_id: str, viewpoint_id: Optional[str]) -> List[Dict[str, Any]]:
    """Return the session's tags with vote counts for `viewpoint_id`."""
    tags = await _tag_dal(request).list_tags(session_id, viewpoint_id)
    return [tag.to_json() for tag in tags]


async def create_tag(request: Request, name: str, session_id: str) -> Dict[str, Any]:
    """Persist a new tag and return it as the client will relay it.

    Raises:
        HTTPException(400) if the name is blank or already used in the session.
    """
    name = name.strip()
    session_id = session_id.strip()
    if not name or not session_id:
        raise HTTPException(status_code=400, detail="name and sessionId are required")
    try:
        tag = await _tag_dal(request).create_tag(name, session_id)
    except TagConflictError as exc:
        raise HTTPException(status_code=400, detail="Tag already exists") from exc
    logger.info("Created tag %s (%s) in session %s", tag.id, tag.name, session_id)
    return tag.to_json()


async def vote_tag(
    request: Request,
    tag_id: str,
    session_id: str,
    viewpoint_id: str,
    action: str,
) -> Dict[str, Any]:
    """Apply a vote and return the resolved count in `tagVoted` shape.

    Raises:
        HTTPException(404) if the tag does not exist in the session.
    """
    try:
        votes = await _tag_dal(request).vote_tag(tag_id, session_id, viewpoint_id, action)
    except TagNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Tag not found") from exc
    return {
        "tagId": tag_id,
        "sessionId": session_id,
        "viewpointId": viewpoint_id,
        "votes": votes,
        "action": action,
    }
