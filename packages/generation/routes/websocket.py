"""
Progress WebSocket.

Auth is a token query parameter since browsers cannot set headers on a
WebSocket handshake. Leaving only drops the subscription; the session
keeps running.
"""

import asyncio
import json
from typing import Optional
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.websockets import WebSocketState

from common.core.config import settings
from common.core.constants import ProgressChannelProvider
from common.core.otel_axiom_exporter import get_logger
from packages.auth.dependencies import authenticate_token
from packages.generation.models.domain.enums import GenerationDomain
from packages.generation.progress.factory import get_progress_channel
from packages.generation.progress.interface import ProgressChannelInterface
from packages.generation.progress.topics import build_topic
from packages.generation.services.orchestrator import get_orchestrator

logger = get_logger(__name__)

router = APIRouter()


async def stream_progress(
    websocket: WebSocket,
    channel: ProgressChannelInterface,
    topic: str,
    idle_timeout: Optional[float] = None,
) -> None:
    """
    Forward every event on ``topic`` to the socket.

    Stops at the terminal event or a client disconnect. A stream that stays
    silent for ``idle_timeout`` seconds is given up on as well. The
    subscription is always closed on the way out.
    """
    if idle_timeout is None:
        idle_timeout = settings.progress_idle_timeout_seconds

    subscription = await channel.join(topic)
    next_event = asyncio.ensure_future(subscription.__anext__())
    watcher = asyncio.ensure_future(websocket.receive())
    try:
        while True:
            done, _ = await asyncio.wait(
                {next_event, watcher},
                timeout=idle_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if not done:
                logger.info(f"No progress on {topic} for {idle_timeout}s, closing")
                return

            if watcher in done:
                message = watcher.result()
                if message.get("type") == "websocket.disconnect":
                    logger.info(f"Client left {topic}")
                    return
                # Clients have nothing to say on this socket; ignore and keep listening
                watcher = asyncio.ensure_future(websocket.receive())

            if next_event in done:
                try:
                    event = next_event.result()
                except StopAsyncIteration:
                    return
                await websocket.send_text(json.dumps(event.to_wire()))
                next_event = asyncio.ensure_future(subscription.__anext__())
    finally:
        for task in (next_event, watcher):
            if not task.done():
                task.cancel()
        await asyncio.gather(next_event, watcher, return_exceptions=True)
        await subscription.close()


def _session_is_local_and_gone(session_id: str, user_id: str) -> bool:
    """With the in-memory channel only this process can publish, so a missing session will never emit."""
    if settings.progress_channel_provider != ProgressChannelProvider.MEMORY:
        return False
    return get_orchestrator().get_session_status(session_id, user_id) is None


@router.websocket("/{domain}/sessions/{session_id}/ws")
async def progress_websocket(
    websocket: WebSocket,
    domain: GenerationDomain,
    session_id: str,
    token: Optional[str] = None,
):
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        user = await authenticate_token(token)
    except HTTPException as e:
        logger.info(f"Progress WebSocket rejected: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    topic = build_topic(domain, user.user_id, session_id)

    if _session_is_local_and_gone(session_id, user.user_id):
        logger.info(f"Progress WebSocket for inactive session on {topic}")
        await websocket.close(code=status.WS_1000_NORMAL_CLOSURE, reason="Session not active")
        return

    logger.info(f"Progress WebSocket connected on {topic}")

    try:
        await stream_progress(websocket, get_progress_channel(), topic)
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
    except WebSocketDisconnect:
        logger.info(f"Progress WebSocket disconnected from {topic}")
