"""FastAPI routes for session tags and viewpoint votes."""

import logging
from typing import Literal, Optional, Union

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from controllers.tag_controller import create_tag, list_tags, vote_tag
from models.viewpoint import resolve_viewpoint_id

router = APIRouter(prefix="/api/tags", tags=["tags"])
logger = logging.getLogger(__name__)


class CreateTagPayload(BaseModel):
    name: str
    session_id: str = Field(alias="sessionId")


class VoteTagPayload(BaseModel):
    tag_id: str = Field(alias="tagId")
    session_id: str = Field(alias="sessionId")
    action: Literal["add", "remove"]
    viewpoint_id: Optional[str] = Field(default=None, alias="viewpointId")
    lat: Optional[Union[int, float, str]] = None
    lng: Optional[Union[int, float, str]] = None
    dir: Optional[Union[int, float, str]] = None


@router.get("")
async def list_tags_route(
    request: Request,
    session_id: str = Query(..., alias="sessionId", min_length=1),
    viewpoint_id: Optional[str] = Query(None, alias="viewpointId"),
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    dir: Optional[str] = None,
):
    try:
        resolved = resolve_viewpoint_id(viewpoint_id, lat, lng, dir)
        return await list_tags(request, session_id, resolved)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.exception("Error listing tags for session %s", session_id)
        raise HTTPException(status_code=500, detail="Failed to fetch tags") from exc


@router.post("", status_code=201)
async def create_tag_route(request: Request, payload: CreateTagPayload):
    try:
        return await create_tag(request, payload.name, payload.session_id)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.exception("Error creating tag %r", payload.name)
        raise HTTPException(status_code=500, detail="Failed to create tag") from exc


@router.put("")
async def vote_tag_route(request: Request, payload: VoteTagPayload):
    try:
        resolved = resolve_viewpoint_id(payload.viewpoint_id, payload.lat, payload.lng, payload.dir)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if resolved is None:
        raise HTTPException(status_code=400, detail="viewpointId or lat, lng and dir are required")
    try:
        return await vote_tag(request, payload.tag_id, payload.session_id, resolved, payload.action)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.exception("Error voting on tag %s", payload.tag_id)
        raise HTTPException(status_code=500, detail="Failed to update votes") from exc
