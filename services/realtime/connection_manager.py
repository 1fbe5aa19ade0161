"""Connection lifecycle for the realtime session core.

Each accepted websocket gets one `ClientHandle`. A handle starts unjoined,
belongs to at most one session at a time, and is discarded on disconnect.
The manager is the only writer of the `SessionRegistry`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import WebSocket

from models.events import ERROR, SESSION_JOINED, SESSION_LEFT
from models.session_models import ClientHandle
from services.realtime.session_registry import SessionRegistry
from services.realtime.transport import WebSocketTransport

logger = logging.getLogger(__name__)

MISSING_SESSION_MESSAGE = "sessionId is required to join a session"


class ConnectionLifecycleManager:
	"""Drive connect/join/leave/disconnect transitions for client handles."""

	def __init__(self, registry: SessionRegistry, transport: WebSocketTransport) -> None:
		self.registry = registry
		self.transport = transport
		self._handles: Dict[str, ClientHandle] = {}

	def connect(self, websocket: WebSocket) -> ClientHandle:
		"""Create an unjoined handle for a freshly accepted websocket."""
		client_id = self.transport.attach(websocket)
		handle = ClientHandle(client_id=client_id)
		self._handles[client_id] = handle
		logger.info("Client connected: %s (total %d)", client_id, len(self._handles))
		return handle

	def handle(self, client_id: str) -> Optional[ClientHandle]:
		return self._handles.get(client_id)

	def current_session(self, client_id: str) -> Optional[str]:
		"""Return the session the client is joined to, or None."""
		handle = self._handles.get(client_id)
		return handle.session_id if handle is not None else None

	def connection_count(self) -> int:
		return len(self._handles)

	async def join(
		self,
		client_id: str,
		session_id: Optional[str],
		viewpoint_id: Optional[str] = None,
	) -> Optional[Dict[str, Any]]:
		"""Move a client into `session_id` and acknowledge it.

		Leaving the previous session and registering under the new one happen
		without any suspension point in between, so no other event can observe
		the client in two sessions.

		Returns:
			The acknowledgment payload, or None when the join was rejected or
			the client is no longer connected.
		"""
		handle = self._handles.get(client_id)
		if handle is None:
			return None
		session_id = (session_id or "").strip()
		if not session_id:
			await self.reject_join(client_id, MISSING_SESSION_MESSAGE)
			return None

		if handle.session_id != session_id:
			if handle.session_id is not None:
				self._leave_current(handle)
			self.registry.register(session_id, client_id)
			self.transport.join_group(client_id, session_id)
			handle.session_id = session_id
		if viewpoint_id:
			handle.viewpoint_id = viewpoint_id

		ack = {
			"sessionId": session_id,
			"socketId": client_id,
			"clientCount": self.registry.count(session_id),
		}
		logger.info("Client %s joined session %s (%d clients)", client_id, session_id, ack["clientCount"])
		await self.transport.send(client_id, SESSION_JOINED, ack)
		return ack

	async def reject_join(self, client_id: str, reason: str) -> None:
		"""Answer a join that cannot be honoured with an ``error`` frame."""
		logger.warning("Rejected join from %s: %s", client_id, reason)
		await self.transport.send(client_id, ERROR, {"message": reason})

	async def leave(self, client_id: str) -> bool:
		"""Explicitly leave the current session; returns False when not joined."""
		handle = self._handles.get(client_id)
		if handle is None or handle.session_id is None:
			return False
		session_id = handle.session_id
		self._leave_current(handle)
		await self.transport.send(client_id, SESSION_LEFT, {"sessionId": session_id, "socketId": client_id})
		return True

	def disconnect(self, client_id: str) -> None:
		"""Tear down a connection. Safe to call more than once."""
		handle = self._handles.pop(client_id, None)
		if handle is None:
			return
		if handle.session_id is not None:
			self._leave_current(handle)
		handle.disconnected = True
		self.transport.detach(client_id)
		logger.info("Client disconnected: %s (remaining %d)", client_id, len(self._handles))

	def _leave_current(self, handle: ClientHandle) -> None:
		session_id = handle.session_id
		if session_id is None:
			return
		self.registry.unregister(session_id, handle.client_id)
		self.transport.leave_group(handle.client_id, session_id)
		handle.session_id = None
		handle.viewpoint_id = None
		logger.info("Client %s left session %s", handle.client_id, session_id)
