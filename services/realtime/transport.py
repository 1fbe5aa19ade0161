"""Named-message transport over FastAPI websockets.

Wraps each accepted websocket under a connection id and offers the
primitives the realtime core needs: direct send, named groups and
group delivery. Frames are JSON text ``{"event": ..., "data": ...}``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Set
from uuid import uuid4

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from models.events import encode_frame

logger = logging.getLogger(__name__)


@dataclass
class _Connection:
	websocket: WebSocket
	send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class WebSocketTransport:
	"""Track live websockets and deliver named messages to them."""

	def __init__(self) -> None:
		self._connections: Dict[str, _Connection] = {}
		self._groups: Dict[str, Set[str]] = {}

	def attach(self, websocket: WebSocket) -> str:
		"""Register an accepted websocket and return its new connection id."""
		client_id = uuid4().hex
		self._connections[client_id] = _Connection(websocket)
		return client_id

	def detach(self, client_id: str) -> None:
		"""Forget a connection and drop it from every group it was in."""
		self._connections.pop(client_id, None)
		for group_id in [gid for gid, members in self._groups.items() if client_id in members]:
			self.leave_group(client_id, group_id)

	def is_attached(self, client_id: str) -> bool:
		return client_id in self._connections

	def connection_count(self) -> int:
		return len(self._connections)

	def join_group(self, client_id: str, group_id: str) -> None:
		self._groups.setdefault(group_id, set()).add(client_id)

	def leave_group(self, client_id: str, group_id: str) -> None:
		members = self._groups.get(group_id)
		if members is None:
			return
		members.discard(client_id)
		if not members:
			del self._groups[group_id]

	def group_members(self, group_id: str) -> Set[str]:
		return set(self._groups.get(group_id, ()))

	async def send(self, client_id: str, event: str, payload: Any) -> bool:
		"""Send one named message; returns False if the client is gone."""
		connection = self._connections.get(client_id)
		if connection is None:
			logger.debug("Dropping %s for unknown connection %s", event, client_id)
			return False
		text = json.dumps(encode_frame(event, payload), default=str)
		websocket = connection.websocket
		async with connection.send_lock:
			if websocket.application_state != WebSocketState.CONNECTED:
				logger.debug("Dropping %s for closed connection %s", event, client_id)
				return False
			try:
				await websocket.send_text(text)
			except (WebSocketDisconnect, RuntimeError, OSError) as exc:
				logger.debug("Failed to send %s to %s: %s", event, client_id, exc)
				return False
		return True

	async def send_to_group(self, group_id: str, event: str, payload: Any) -> int:
		"""Send a named message to every member of a group.

		Returns:
			The number of members the message was delivered to.
		"""
		targets = list(self._groups.get(group_id, ()))
		delivered = 0
		for client_id in targets:
			if await self.send(client_id, event, payload):
				delivered += 1
		return delivered
