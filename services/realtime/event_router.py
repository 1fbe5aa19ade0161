"""Relay tag, vote and feedback events to every member of a session."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from models.events import (
	FEEDBACK,
	NEW_FEEDBACK,
	NEW_TAG,
	TAG_ADDED,
	TAG_VOTED,
	FeedbackPayload,
	TagPayload,
	VotePayload,
	feedback_event_payload,
	tag_added_payload,
	tag_voted_payload,
)
from services.realtime.connection_manager import ConnectionLifecycleManager
from services.realtime.session_registry import SessionRegistry
from services.realtime.transport import WebSocketTransport

logger = logging.getLogger(__name__)


class EventRouter:
	"""Session-scoped fan-out of already validated events.

	The router never computes state: vote counts arrive resolved from the
	store and tags are relayed as-is. Receivers de-duplicate by `_id` and
	replace vote counts rather than accumulate them. The sender is always
	part of the fan-out.
	"""

	def __init__(
		self,
		manager: ConnectionLifecycleManager,
		registry: SessionRegistry,
		transport: WebSocketTransport,
	) -> None:
		self.manager = manager
		self.registry = registry
		self.transport = transport

	async def relay_tag_created(self, client_id: str, tag: TagPayload) -> Optional[int]:
		session_id = self._sender_session(client_id, NEW_TAG)
		if session_id is None:
			return None
		if tag.session_id and tag.session_id != session_id:
			logger.warning(
				"Dropped newTag from %s: tag session %s does not match joined session %s",
				client_id,
				tag.session_id,
				session_id,
			)
			return None
		return await self._deliver(session_id, TAG_ADDED, tag_added_payload(tag))

	async def relay_vote_changed(self, client_id: str, vote: VotePayload) -> Optional[int]:
		session_id = self._sender_session(client_id, TAG_VOTED)
		if session_id is None:
			return None
		if vote.session_id and vote.session_id != session_id:
			logger.warning(
				"Dropped tagVoted from %s: vote session %s does not match joined session %s",
				client_id,
				vote.session_id,
				session_id,
			)
			return None
		return await self._deliver(session_id, TAG_VOTED, tag_voted_payload(vote, session_id))

	async def relay_feedback_created(self, client_id: str, feedback: FeedbackPayload) -> Optional[int]:
		session_id = self._sender_session(client_id, NEW_FEEDBACK)
		if session_id is None:
			return None
		if feedback.session_id != session_id:
			logger.warning(
				"Dropped newFeedback from %s: feedback session %s does not match joined session %s",
				client_id,
				feedback.session_id,
				session_id,
			)
			return None
		handle = self.manager.handle(client_id)
		joined_viewpoint = handle.viewpoint_id if handle is not None else None
		if joined_viewpoint and feedback.viewpoint_id != joined_viewpoint:
			logger.warning(
				"Dropped newFeedback from %s: viewpoint %s does not match joined viewpoint %s",
				client_id,
				feedback.viewpoint_id,
				joined_viewpoint,
			)
			return None
		return await self._deliver(session_id, FEEDBACK, feedback_event_payload(feedback, client_id))

	async def publish_feedback(self, feedback: FeedbackPayload, socket_id: Optional[str] = None) -> int:
		"""Broadcast stored feedback to its session on behalf of the server.

		Delivery is scoped by the feedback's session, not by a connection, so
		members still receive it when the submitting socket is already gone.
		"""
		return await self._deliver(feedback.session_id, FEEDBACK, feedback_event_payload(feedback, socket_id))

	def _sender_session(self, client_id: str, event: str) -> Optional[str]:
		session_id = self.manager.current_session(client_id)
		if session_id is None:
			logger.debug("Dropped %s from %s: not joined to a session", event, client_id)
		return session_id

	async def _deliver(self, session_id: str, event: str, payload: Dict[str, Any]) -> int:
		members = self.registry.members_of(session_id)
		if not members:
			logger.debug("No members in session %s for %s", session_id, event)
			return 0
		delivered = await self.transport.send_to_group(session_id, event, payload)
		logger.info("Relayed %s to session %s (%d/%d clients)", event, session_id, delivered, len(members))
		return delivered
