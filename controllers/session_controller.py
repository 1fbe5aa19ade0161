"""Read-only views over live realtime sessions."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from services.realtime.session_registry import SessionRegistry


async def describe_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return how many connections are currently joined to a session."""
	registry: SessionRegistry = request.app.state.session_registry
	return {"sessionId": session_id, "clientCount": registry.count(session_id)}
