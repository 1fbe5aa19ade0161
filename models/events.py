"""Wire event variants exchanged over the realtime websocket.

Every frame is a JSON object ``{"event": <name>, "data": <payload>}``.
Inbound frames are validated into one of the tagged variants below before
they reach the connection manager or the event router.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from models.viewpoint import viewpoint_id

# Client -> server
JOIN_SESSION = "joinSession"
LEAVE_SESSION = "leaveSession"
NEW_TAG = "newTag"
TAG_VOTED = "tagVoted"
NEW_FEEDBACK = "newFeedback"
PING = "ping"

# Server -> client
SESSION_JOINED = "sessionJoined"
SESSION_LEFT = "sessionLeft"
TAG_ADDED = "tagAdded"
FEEDBACK = "feedback"
PONG = "pong"
ERROR = "error"

NonEmptyStr = Annotated[str, Field(min_length=1)]


class ViewpointPayload(BaseModel):
	lat: Union[int, float, str]
	lng: Union[int, float, str]
	dir: Union[int, float, str]

	@model_validator(mode="after")
	def _check_key(self) -> "ViewpointPayload":
		self.key()
		return self

	def key(self) -> str:
		return viewpoint_id(self.lat, self.lng, self.dir)


class JoinSessionPayload(BaseModel):
	session_id: NonEmptyStr = Field(alias="sessionId")
	viewpoint: Optional[ViewpointPayload] = None

	@field_validator("session_id")
	@classmethod
	def _strip_session(cls, value: str) -> str:
		value = value.strip()
		if not value:
			raise ValueError("sessionId must not be blank")
		return value


class EmptyPayload(BaseModel):
	model_config = ConfigDict(extra="ignore")


class TagPayload(BaseModel):
	"""A tag announcement; carries an ``_id``, a ``name`` or both."""

	model_config = ConfigDict(extra="allow", populate_by_name=True)

	id: Optional[NonEmptyStr] = Field(default=None, alias="_id")
	name: Optional[NonEmptyStr] = None
	session_id: Optional[str] = Field(default=None, alias="sessionId")

	@model_validator(mode="after")
	def _require_identity(self) -> "TagPayload":
		if self.id is None and self.name is None:
			raise ValueError("a tag needs an _id or a name")
		return self


class VotePayload(BaseModel):
	"""A resolved vote count for one tag within one viewpoint."""

	model_config = ConfigDict(populate_by_name=True)

	tag_id: NonEmptyStr = Field(alias="tagId")
	action: Literal["add", "remove"]
	votes: int
	session_id: Optional[str] = Field(default=None, alias="sessionId")
	viewpoint_id: Optional[str] = Field(default=None, alias="viewpointId")

	@field_validator("votes")
	@classmethod
	def _clamp_votes(cls, value: int) -> int:
		return max(0, value)


class FeedbackPayload(BaseModel):
	"""A feedback item scoped to a viewpoint and a session."""

	model_config = ConfigDict(extra="allow", populate_by_name=True)

	viewpoint_id: NonEmptyStr = Field(alias="viewpointId")
	session_id: NonEmptyStr = Field(alias="sessionId")
	text: str = ""
	tags: List[str] = Field(default_factory=list)
	id: Optional[str] = Field(default=None, alias="_id")
	timestamp: Optional[Union[datetime, str]] = None


class JoinSessionFrame(BaseModel):
	event: Literal[JOIN_SESSION]
	data: JoinSessionPayload


class LeaveSessionFrame(BaseModel):
	event: Literal[LEAVE_SESSION]
	data: EmptyPayload = Field(default_factory=EmptyPayload)


class PingFrame(BaseModel):
	event: Literal[PING]
	data: EmptyPayload = Field(default_factory=EmptyPayload)


class NewTagFrame(BaseModel):
	event: Literal[NEW_TAG]
	data: TagPayload


class TagVotedFrame(BaseModel):
	event: Literal[TAG_VOTED]
	data: VotePayload


class NewFeedbackFrame(BaseModel):
	event: Literal[NEW_FEEDBACK]
	data: FeedbackPayload


InboundFrame = Annotated[
	Union[
		JoinSessionFrame,
		LeaveSessionFrame,
		PingFrame,
		NewTagFrame,
		TagVotedFrame,
		NewFeedbackFrame,
	],
	Field(discriminator="event"),
]

INBOUND_FRAME = TypeAdapter(InboundFrame)


def parse_frame(raw: Dict[str, Any]) -> InboundFrame:
	"""Validate a decoded frame into its tagged variant.

	Raises:
		pydantic.ValidationError: If the event name is unknown or the payload is malformed.
	"""
	if isinstance(raw, dict) and raw.get("data") is None and "data" in raw:
		raw = {**raw, "data": {}}
	return INBOUND_FRAME.validate_python(raw)


def encode_frame(event: str, payload: Any) -> Dict[str, Any]:
	return {"event": event, "data": payload}


def utc_timestamp() -> str:
	return datetime.now(timezone.utc).isoformat()


def tag_added_payload(tag: TagPayload) -> Dict[str, Any]:
	return tag.model_dump(by_alias=True, exclude_none=True)


def tag_voted_payload(vote: VotePayload, session_id: str) -> Dict[str, Any]:
	return {
		"tagId": vote.tag_id,
		"sessionId": session_id,
		"viewpointId": vote.viewpoint_id,
		"votes": vote.votes,
		"action": vote.action,
	}


def feedback_event_payload(feedback: FeedbackPayload, socket_id: Optional[str]) -> Dict[str, Any]:
	"""Wrap a feedback item the way listeners of the ``feedback`` event expect it."""
	data = feedback.model_dump(by_alias=True, exclude_none=True, mode="json")
	data["viewpointId"] = feedback.viewpoint_id
	data["sessionId"] = feedback.session_id
	data.setdefault("timestamp", utc_timestamp())
	data["socketId"] = socket_id
	return {"type": "newFeedback", "data": data}
