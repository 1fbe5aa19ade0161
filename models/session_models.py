"""Connection state models for the realtime session core."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ConnectionState(str, Enum):
	"""Lifecycle states of one client handle."""

	UNJOINED = "unjoined"
	JOINED = "joined"
	DISCONNECTED = "disconnected"


@dataclass
class ClientHandle:
	"""Server-side representative of one live websocket connection."""

	client_id: str
	session_id: Optional[str] = None
	viewpoint_id: Optional[str] = None
	disconnected: bool = False
	connected_at: float = field(default_factory=lambda: time.time())

	@property
	def state(self) -> ConnectionState:
		if self.disconnected:
			return ConnectionState.DISCONNECTED
		if self.session_id is None:
			return ConnectionState.UNJOINED
		return ConnectionState.JOINED
