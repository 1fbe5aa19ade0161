"""WebSocket endpoint for live session collaboration."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from services.realtime.connection_manager import ConnectionLifecycleManager
from services.realtime.ws_session import RealtimeSessionHandler

router = APIRouter()
logger = logging.getLogger(__name__)


def _require_handler(websocket: WebSocket) -> RealtimeSessionHandler:
	handler = getattr(websocket.app.state, "session_handler", None)
	if handler is None:
		raise HTTPException(status_code=500, detail="Realtime session handler unavailable")
	return handler


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, handler: RealtimeSessionHandler = Depends(_require_handler)):
	"""Serve one client connection until it closes, errors or goes idle."""
	await websocket.accept()
	manager: ConnectionLifecycleManager = handler.manager
	client = manager.connect(websocket)
	idle_timeout = websocket.app.state.settings.ws_idle_timeout or None
	try:
		while True:
			try:
				raw = await asyncio.wait_for(websocket.receive_text(), timeout=idle_timeout)
			except asyncio.TimeoutError:
				logger.info("Closing idle connection %s after %.0fs", client.client_id, idle_timeout)
				break
			except WebSocketDisconnect:
				break
			except KeyError:
				logger.warning("Dropped non-text frame from %s", client.client_id)
				continue
			try:
				await handler.handle_text(client.client_id, raw)
			except Exception:  # pylint: disable=broad-exception-caught
				logger.exception("Error handling frame from %s", client.client_id)
	except Exception:  # pylint: disable=broad-exception-caught
		logger.exception("Websocket error for %s", client.client_id)
	finally:
		manager.disconnect(client.client_id)
		if websocket.client_state != WebSocketState.DISCONNECTED:
			try:
				await websocket.close()
			except (RuntimeError, OSError):
				pass
