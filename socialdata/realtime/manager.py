import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from socialdata.config import settings
from socialdata.db.query import Query, Snapshot
from socialdata.services.redis_service import RedisService

logger = logging.getLogger(__name__)

SnapshotHandler = Callable[[List[Snapshot]], Any]
Fetcher = Callable[[Query], Awaitable[List[Snapshot]]]


class QueryListener:
    """A standing query that re-delivers its whole result set on every change"""

    def __init__(self, query: Query, handler: SnapshotHandler, fetch: Fetcher):
        self.query = query
        self.handler = handler
        self.fetch = fetch
        self.active = True
        self.deliveries = 0
        self._pending = False
        self._delivering = False

    async def refresh(self):
        """Run the query and hand the full result set to the handler.

        Only one delivery runs at a time. A refresh requested while one is
        running (including from inside the handler, when it writes to the
        collection it watches) is folded into a follow-up delivery made by
        the running call once the handler returns.
        """
        if not self.active:
            return

        self._pending = True
        if self._delivering:
            return

        self._delivering = True
        try:
            while self._pending and self.active:
                self._pending = False

                snapshots = await self.fetch(self.query)

                # Removed while the query was in flight
                if not self.active:
                    return

                self.deliveries += 1
                result = self.handler(snapshots)
                if inspect.isawaitable(result):
                    await result
        finally:
            self._delivering = False


class ListenerRegistration:
    """Handle returned by a subscription; calling it detaches the listener"""

    def __init__(self, feed: "LocalChangeFeed", listener: QueryListener):
        self.feed = feed
        self.listener = listener

    @property
    def active(self) -> bool:
        return self.listener.active

    def remove(self):
        """Detach the listener. Safe to call any number of times."""
        if not self.listener.active:
            return
        self.listener.active = False
        self.feed.discard(self.listener)
        logger.debug(f"Removed listener on {self.listener.query.collection}")

    __call__ = remove


class LocalChangeFeed:
    """In-process fan-out of collection changes to query listeners"""

    def __init__(self):
        self.listeners: Dict[str, Set[QueryListener]] = defaultdict(set)

    def add(self, listener: QueryListener) -> ListenerRegistration:
        """Register a listener on its query's collection"""
        self.listeners[listener.query.collection].add(listener)
        logger.debug(
            f"Listener added on {listener.query.collection}. "
            f"Total listeners: {len(self.listeners[listener.query.collection])}"
        )
        return ListenerRegistration(self, listener)

    def discard(self, listener: QueryListener):
        collection = listener.query.collection
        if collection in self.listeners:
            self.listeners[collection].discard(listener)
            if not self.listeners[collection]:
                del self.listeners[collection]

    async def publish(self, collection: str):
        """Announce that a collection changed"""
        await self.dispatch(collection)

    async def dispatch(self, collection: str):
        """Refresh every listener on a collection"""
        listeners = self.listeners.get(collection, set())

        if not listeners:
            return

        # Use copy to avoid modification during iteration
        for listener in list(listeners):
            try:
                await listener.refresh()
            except Exception as e:
                logger.error(f"Error delivering snapshot on {collection}: {e}")

    def get_listener_count(self, collection: Optional[str] = None) -> int:
        """Get count of active listeners, optionally for one collection"""
        if collection is not None:
            return len(self.listeners.get(collection, set()))
        return sum(len(listeners) for listeners in self.listeners.values())

    async def start(self):
        pass

    async def close(self):
        """Detach every listener"""
        for listeners in list(self.listeners.values()):
            for listener in list(listeners):
                listener.active = False
        self.listeners.clear()


class RedisChangeFeed(LocalChangeFeed):
    """Change feed shared between processes over Redis pub/sub.

    Writers publish the collection name; every process (the writer included)
    refreshes its own listeners when the message comes back. When the
    subscription drops, the reader resubscribes with exponential backoff and
    then refreshes every listener, since changes published while it was
    disconnected are lost.
    """

    def __init__(
        self,
        redis_service: Optional[RedisService] = None,
        channel: Optional[str] = None,
        reconnect_delay: Optional[float] = None,
        max_reconnect_delay: Optional[float] = None
    ):
        super().__init__()
        self.redis = redis_service or RedisService()
        self.channel = channel or settings.CHANGE_FEED_CHANNEL
        self.reconnect_delay = (
            reconnect_delay if reconnect_delay is not None else settings.CHANGE_FEED_RECONNECT_DELAY
        )
        self.max_reconnect_delay = (
            max_reconnect_delay if max_reconnect_delay is not None else settings.CHANGE_FEED_MAX_RECONNECT_DELAY
        )
        self.connected = False
        self.reconnects = 0
        self._pubsub = None
        self._reader: Optional[asyncio.Task] = None

    async def publish(self, collection: str):
        """Publish a change to every process listening on the channel"""
        receivers = await self.redis.publish(self.channel, collection)
        logger.debug(f"Published change on {collection} to {receivers} receivers")

    async def start(self):
        """Subscribe to the channel and start the background reader"""
        if self._reader is not None:
            return
        await self._subscribe()
        self._reader = asyncio.create_task(self._read_loop())
        logger.info(f"Change feed subscribed to {self.channel}")

    async def _subscribe(self):
        self._pubsub = self.redis.pubsub()
        await self._pubsub.subscribe(self.channel)
        self.connected = True

    async def _drop_subscription(self):
        self.connected = False
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is None:
            return
        try:
            await pubsub.aclose()
        except Exception as e:
            logger.warning(f"Error closing change feed subscription: {e}")

    async def _read_loop(self):
        delay = self.reconnect_delay
        while True:
            try:
                if self._pubsub is None:
                    await self._subscribe()
                    self.reconnects += 1
                    logger.info(f"Change feed resubscribed to {self.channel}")
                    await self.refresh_all()

                async for message in self._pubsub.listen():
                    delay = self.reconnect_delay
                    await self.handle_message(message)

                logger.warning("Change feed subscription ended")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Change feed reader error, retrying in {delay}s: {e}")

            await self._drop_subscription()
            await asyncio.sleep(delay)
            delay = min(max(delay, 0.1) * 2, self.max_reconnect_delay)

    async def handle_message(self, message: Dict[str, Any]):
        """Dispatch one pub/sub message to local listeners"""
        if message.get("type") != "message":
            return
        collection = message.get("data")
        if isinstance(collection, bytes):
            collection = collection.decode()
        await self.dispatch(collection)

    async def refresh_all(self):
        """Refresh every listener on every collection"""
        for collection in list(self.listeners):
            await self.dispatch(collection)

    async def close(self):
        """Stop the reader and release the Redis connection"""
        await super().close()

        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None

        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe(self.channel)
            except Exception as e:
                logger.warning(f"Error unsubscribing change feed: {e}")
            await self._drop_subscription()

        await self.redis.close()


def create_change_feed() -> LocalChangeFeed:
    """Build the change feed selected by settings"""
    if settings.CHANGE_FEED == "redis":
        return RedisChangeFeed()
    return LocalChangeFeed()
