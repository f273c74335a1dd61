"""
FastAPI endpoints for the random chat service.
Chat websocket, admin statistics (REST and websocket) and health check.
"""
import asyncio
import json
import logging
import time
import uuid
from typing import Optional, Set

from fastapi import FastAPI, HTTPException, Header, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from redis.exceptions import RedisError

from api.admin_channel import AdminChannel, build_admin_stats
from api.connections import ConnectionHub
from api.schemas import AdminStatsResponse, FindPartnerRequest, LeaveChatRequest, SendMessageRequest
from config.settings import settings
from core.chat_service import ChatService
from core.exceptions import PersistenceError
from core.interfaces import MessageStore
from utils.rate_limiter import MessageRateLimiter

logger = logging.getLogger(__name__)

RATE_LIMITED_NOTICE = "You are sending messages too fast. Please slow down."

app = FastAPI(title="Random Chat API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global instances, set from main
chat_service: Optional[ChatService] = None
connection_hub: Optional[ConnectionHub] = None
admin_channel: Optional[AdminChannel] = None
message_store: Optional[MessageStore] = None
rate_limiter: Optional[MessageRateLimiter] = None

started_at = time.monotonic()
_background_tasks: Set[asyncio.Task] = set()


def set_chat_service(service: ChatService, hub: ConnectionHub):
    """Set chat service and the connection hub it notifies."""
    global chat_service, connection_hub
    chat_service = service
    connection_hub = hub


def set_admin_channel(channel: AdminChannel):
    """Set admin channel and subscribe it to statistics pushes."""
    global admin_channel
    admin_channel = channel
    if chat_service is not None:
        chat_service.subscribe(channel.on_stats)


def set_message_store(store: MessageStore):
    """Set message store instance."""
    global message_store
    message_store = store


def set_rate_limiter(limiter: Optional[MessageRateLimiter]):
    """Set rate limiter instance (None disables rate limiting)."""
    global rate_limiter
    rate_limiter = limiter


def verify_api_key_sync(x_api_key: Optional[str]) -> bool:
    """Verify API key for admin access."""
    return x_api_key == settings.API_SECRET_KEY


def _spawn(coro) -> None:
    task = asyncio.get_running_loop().create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def _count_view() -> None:
    if message_store is None:
        return
    try:
        await message_store.increment_views()
    except PersistenceError:
        # Already logged by the store
        pass


async def _allow_message(participant_id: str) -> bool:
    if rate_limiter is None:
        return True
    try:
        allowed, _ = await rate_limiter.check_message_limit(participant_id)
    except RedisError as e:
        logger.warning(f"Rate limiter unavailable, allowing message from {participant_id}: {e}")
        return True
    return allowed


async def handle_client_event(participant_id: str, data) -> None:
    """
    Dispatch one decoded frame from a chat client.

    Args:
        participant_id: Connection id of the sender
        data: Decoded JSON frame
    """
    event_type = data.get("type") if isinstance(data, dict) else None

    try:
        if event_type == "find_partner":
            request = FindPartnerRequest.model_validate(data)
            await chat_service.request_match(participant_id, request.to_profile())
        elif event_type == "send_message":
            request = SendMessageRequest.model_validate(data)
            if not await _allow_message(participant_id):
                connection_hub.system_notice(participant_id, RATE_LIMITED_NOTICE)
                return
            await chat_service.message_sent(participant_id, request.roomId, request.content)
        elif event_type == "leave_chat":
            LeaveChatRequest.model_validate(data)
            await chat_service.leave_requested(participant_id)
        else:
            connection_hub.send_error(participant_id, f"Unknown event type: {event_type}")
    except ValidationError as e:
        logger.info(f"Invalid {event_type} frame from {participant_id}: {e.error_count()} error(s)")
        connection_hub.send_error(participant_id, f"Invalid {event_type} request")


@app.websocket("/ws/chat")
async def chat_websocket(websocket: WebSocket):
    """
    WebSocket endpoint for anonymous chat.

    Each connection is one participant; the id lives as long as the socket.
    """
    if chat_service is None or connection_hub is None:
        await websocket.close(code=1011, reason="Service not ready")
        return

    await websocket.accept()
    participant_id = uuid.uuid4().hex
    connection_hub.attach(participant_id, websocket)
    await chat_service.connected(participant_id)
    _spawn(_count_view())

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                connection_hub.send_error(participant_id, "Malformed JSON")
                continue
            await handle_client_event(participant_id, data)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error for {participant_id}: {e}", exc_info=True)
        try:
            await websocket.close(code=1011, reason="Internal error")
        except RuntimeError:
            # Socket already closed by the client
            pass
    finally:
        await chat_service.disconnected(participant_id)
        await connection_hub.detach(participant_id)


@app.websocket("/ws/admin")
async def admin_websocket(websocket: WebSocket, token: str = ""):
    """WebSocket endpoint streaming admin statistics."""
    if not verify_api_key_sync(token):
        await websocket.close(code=1008, reason="Invalid token")
        return
    if chat_service is None or admin_channel is None:
        await websocket.close(code=1011, reason="Service not ready")
        return

    await websocket.accept()
    admin_id = uuid.uuid4().hex
    admin_channel.attach(admin_id, websocket)
    await admin_channel.push(chat_service.stats())

    try:
        while True:
            # Dashboards only listen; anything they send is ignored
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await admin_channel.detach(admin_id)


@app.get("/api/admin/stats", response_model=AdminStatsResponse)
async def get_admin_stats(x_api_key: Optional[str] = Header(default=None)):
    """
    Get live statistics for the admin dashboard.

    Args:
        x_api_key: API key for authentication

    Returns:
        Online count, stored message and view totals, top tags and uptime
    """
    if not verify_api_key_sync(x_api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")
    if chat_service is None or message_store is None:
        raise HTTPException(status_code=503, detail="Service not ready")

    try:
        payload = await build_admin_stats(chat_service.stats(), message_store)
    except Exception as e:
        logger.error(f"Error building admin stats: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    payload["uptime"] = time.monotonic() - started_at
    return AdminStatsResponse(**payload)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "online": len(connection_hub) if connection_hub is not None else 0,
    }
