"""
Redis-based rate limiting utility.
Prevents flooding by limiting chat messages per connection per time window.
"""
import time
import redis.asyncio as redis

from config.settings import settings


class RateLimiter:
    """Redis-based fixed-window rate limiter."""

    def __init__(self, redis_client: redis.Redis):
        """
        Initialize rate limiter with Redis client.

        Args:
            redis_client: Redis async client instance
        """
        self.redis = redis_client

    async def check_rate_limit(
        self,
        key: str,
        limit: int,
        window_seconds: int = 60
    ) -> tuple[bool, int]:
        """
        Check if an action is allowed based on rate limit.

        Args:
            key: Unique identifier for rate limiting (e.g., f"rate_limit:{participant_id}")
            limit: Maximum number of actions allowed
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        current_time = int(time.time())
        window_key = f"{key}:{current_time // window_seconds}"

        # The count returned by INCR decides, never a separate GET
        pipe = self.redis.pipeline()
        pipe.incr(window_key)
        pipe.expire(window_key, window_seconds + 1)
        current_count, _ = await pipe.execute()

        if current_count > limit:
            return False, 0
        return True, limit - current_count

    async def reset_rate_limit(self, key: str) -> None:
        """Reset every window for a key."""
        async for key_name in self.redis.scan_iter(match=f"{key}:*"):
            await self.redis.delete(key_name)


class MessageRateLimiter(RateLimiter):
    """Rate limiter for chat messages sent over a connection."""

    def __init__(self, redis_client: redis.Redis, limit_per_minute: int = None):
        super().__init__(redis_client)
        if limit_per_minute is None:
            limit_per_minute = settings.RATE_LIMIT_MESSAGES_PER_MINUTE
        self.limit_per_minute = limit_per_minute

    async def check_message_limit(self, participant_id: str) -> tuple[bool, int]:
        """
        Check if a connection can send another message.

        A limit of 0 disables the check.
        """
        if self.limit_per_minute <= 0:
            return True, -1
        return await self.check_rate_limit(
            f"rate_limit:message:{participant_id}",
            self.limit_per_minute,
            window_seconds=60,
        )

    async def reset(self, participant_id: str) -> None:
        await self.reset_rate_limit(f"rate_limit:message:{participant_id}")
