"""In-memory registry of which connections belong to which session."""

from __future__ import annotations

from typing import Dict, FrozenSet, Set


class SessionRegistry:
	"""Map session ids to the set of connection ids currently joined.

	A session only exists while at least one connection is registered to it;
	the entry is dropped as soon as its last member leaves.
	"""

	def __init__(self) -> None:
		self._sessions: Dict[str, Set[str]] = {}

	def register(self, session_id: str, client_id: str) -> None:
		"""Add a connection to a session, creating the session if needed."""
		self._sessions.setdefault(session_id, set()).add(client_id)

	def unregister(self, session_id: str, client_id: str) -> None:
		"""Remove a connection from a session and drop the session once empty."""
		members = self._sessions.get(session_id)
		if members is None:
			return
		members.discard(client_id)
		if not members:
			del self._sessions[session_id]

	def members_of(self, session_id: str) -> FrozenSet[str]:
		"""Return a snapshot of the session's members (empty when unknown)."""
		return frozenset(self._sessions.get(session_id, ()))

	def count(self, session_id: str) -> int:
		return len(self._sessions.get(session_id, ()))

	def session_ids(self) -> FrozenSet[str]:
		return frozenset(self._sessions)

	def __contains__(self, session_id: object) -> bool:
		return session_id in self._sessions

	def __len__(self) -> int:
		return len(self._sessions)
