"""Dispatch realtime websocket frames to the lifecycle manager and router."""
from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from models.events import (
	JOIN_SESSION,
	PONG,
	JoinSessionFrame,
	LeaveSessionFrame,
	NewFeedbackFrame,
	NewTagFrame,
	PingFrame,
	TagVotedFrame,
	parse_frame,
)
from services.realtime.connection_manager import MISSING_SESSION_MESSAGE, ConnectionLifecycleManager
from services.realtime.event_router import EventRouter

logger = logging.getLogger(__name__)


def _join_error_message(exc: ValidationError) -> str:
	"""Turn a rejected ``joinSession`` payload into a message for the client."""
	reasons = []
	for error in exc.errors(include_url=False):
		# loc is (event, "data", field, ...)
		field_path = ".".join(str(part) for part in error["loc"][2:])
		if field_path == "sessionId":
			return MISSING_SESSION_MESSAGE
		reasons.append(f"{field_path}: {error['msg']}" if field_path else error["msg"])
	return "; ".join(reasons) or MISSING_SESSION_MESSAGE


class RealtimeSessionHandler:
	"""Route inbound frames for every realtime connection."""

	def __init__(self, manager: ConnectionLifecycleManager, router: EventRouter) -> None:
		self.manager = manager
		self.router = router

	async def handle_text(self, client_id: str, raw: str) -> None:
		"""Decode one text frame and process it."""
		try:
			payload = json.loads(raw)
		except ValueError:
			logger.warning("Dropped non-JSON frame from %s", client_id)
			return
		await self.handle(client_id, payload)

	async def handle(self, client_id: str, payload: Any) -> None:
		"""Validate a decoded frame into its event variant and dispatch it."""
		if not isinstance(payload, dict) or not isinstance(payload.get("event"), str):
			logger.warning("Dropped frame without an event name from %s", client_id)
			return
		try:
			frame = parse_frame(payload)
		except ValidationError as exc:
			logger.warning(
				"Dropped malformed %s from %s: %s",
				payload["event"],
				client_id,
				exc.errors(include_url=False),
			)
			if payload["event"] == JOIN_SESSION:
				await self.manager.reject_join(client_id, _join_error_message(exc))
			return

		if isinstance(frame, JoinSessionFrame):
			viewpoint = frame.data.viewpoint
			await self.manager.join(client_id, frame.data.session_id, viewpoint.key() if viewpoint else None)
		elif isinstance(frame, LeaveSessionFrame):
			await self.manager.leave(client_id)
		elif isinstance(frame, PingFrame):
			await self.manager.transport.send(client_id, PONG, {"socketId": client_id})
		elif isinstance(frame, NewTagFrame):
			await self.router.relay_tag_created(client_id, frame.data)
		elif isinstance(frame, TagVotedFrame):
			await self.router.relay_vote_changed(client_id, frame.data)
		elif isinstance(frame, NewFeedbackFrame):
			await self.router.relay_feedback_created(client_id, frame.data)
