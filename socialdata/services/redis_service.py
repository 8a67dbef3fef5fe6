# socialdata/services/redis_service.py
from typing import Optional
from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from socialdata.config import settings

class RedisService:
    def __init__(self, url: Optional[str] = None):
        self.redis: Redis = Redis.from_url(url or settings.redis_url, decode_responses=True)

    async def publish(self, channel: str, message: str) -> int:
        """Publish a message, returning the number of receivers"""
        return await self.redis.publish(channel, message)

    def pubsub(self) -> PubSub:
        """Create a pub/sub handle on the shared connection pool"""
        return self.redis.pubsub(ignore_subscribe_messages=True)

    async def ping(self) -> bool:
        return await self.redis.ping()

    async def close(self):
        """Close the Redis connection"""
        await self.redis.aclose()
