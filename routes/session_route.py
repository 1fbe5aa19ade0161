"""FastAPI routes exposing live session membership."""

from fastapi import APIRouter, Request

from controllers.session_controller import describe_session

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("/{session_id}")
async def describe_session_route(request: Request, session_id: str):
	return await describe_session(request, session_id)
