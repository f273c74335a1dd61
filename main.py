"""
Main entry point for the random chat service.
Initializes database, Redis, the chat service and the FastAPI server.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI
import uvicorn

from config.settings import settings
from db.database import init_db, close_db, AsyncSessionLocal
from db.message_store import SqlMessageStore
from core.chat_service import ChatService
from utils.rate_limiter import MessageRateLimiter
from api.admin_channel import AdminChannel
from api.connections import ConnectionHub
from api.chat_api import (
    app as fastapi_app,
    set_chat_service,
    set_admin_channel,
    set_message_store,
    set_rate_limiter,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global instances
redis_client = None
chat_service = None


async def setup_redis():
    """Setup Redis connection with connection pooling."""
    global redis_client

    try:
        redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD if settings.REDIS_PASSWORD else None,
            decode_responses=False,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )

        await redis_client.ping()
        logger.info("✅ Redis connected successfully with connection pooling")

        return redis_client
    except Exception as e:
        logger.error(f"❌ Failed to connect to Redis: {e}")
        raise


async def setup_chat_service():
    """Create the chat service and hand it to the API layer."""
    global chat_service

    store = SqlMessageStore(AsyncSessionLocal)
    hub = ConnectionHub()
    chat_service = ChatService(hub, store, top_tags_limit=settings.TOP_TAGS_LIMIT)

    set_message_store(store)
    set_chat_service(chat_service, hub)
    set_admin_channel(AdminChannel(store))
    logger.info("✅ Chat service initialized")

    return chat_service


async def setup_rate_limiter():
    """Setup rate limiter (skipped when the limit is 0)."""
    if settings.RATE_LIMIT_MESSAGES_PER_MINUTE <= 0:
        set_rate_limiter(None)
        logger.info("ℹ️ Message rate limiting disabled")
        return None

    if not redis_client:
        await setup_redis()

    rate_limiter = MessageRateLimiter(redis_client, settings.RATE_LIMIT_MESSAGES_PER_MINUTE)
    set_rate_limiter(rate_limiter)
    logger.info("✅ Rate limiter initialized")

    return rate_limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app."""
    # Startup
    logger.info("🚀 Starting application...")

    try:
        await init_db()
        logger.info("✅ Database initialized")
    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {e}")

    await setup_chat_service()
    await setup_rate_limiter()

    yield

    # Shutdown
    logger.info("🛑 Shutting down application...")

    if chat_service:
        await chat_service.wait_for_pending_writes()

    try:
        await close_db()
        logger.info("✅ Database closed")
    except Exception as e:
        logger.error(f"❌ Error closing database: {e}")

    if redis_client:
        await redis_client.aclose()
        logger.info("✅ Redis closed")


async def run_fastapi():
    """Run FastAPI server."""
    fastapi_app.router.lifespan_context = lifespan

    config = uvicorn.Config(
        fastapi_app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_fastapi())
    except KeyboardInterrupt:
        logger.info("👋 Application stopped by user")
    except Exception as e:
        logger.error(f"❌ Application error: {e}")
