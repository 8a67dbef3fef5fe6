import asyncio
import pytest

from socialdata.db.query import Query
from socialdata.db.session import create_store
from socialdata.realtime.manager import LocalChangeFeed, QueryListener, RedisChangeFeed
from socialdata.schemas.comment_schema import CommentCreate
from socialdata.schemas.post_schema import PostCreate
from socialdata.services.comment_service import CommentService
from socialdata.services.post_service import PostService

class FakePubSub:
    """In-memory stand-in for a redis.asyncio PubSub"""

    def __init__(self, drop_connection=False):
        self.queue = asyncio.Queue()
        self.channels = []
        self.closed = False
        self.drop_connection = drop_connection

    async def subscribe(self, channel):
        self.channels.append(channel)

    async def unsubscribe(self, channel):
        self.channels.remove(channel)

    async def listen(self):
        if self.drop_connection:
            raise ConnectionError("Connection closed by server.")
        while True:
            yield await self.queue.get()

    async def aclose(self):
        self.closed = True
        self.channels.clear()

class FakeRedisService:
    def __init__(self, dropped_connections=0):
        self.published = []
        self.pubsubs = []
        self.closed = False
        self.dropped_connections = dropped_connections
        self.publish_error = None

    async def publish(self, channel, message):
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append((channel, message))
        for pubsub in self.pubsubs:
            if channel in pubsub.channels:
                await pubsub.queue.put({"type": "message", "channel": channel, "data": message})
        return len(self.pubsubs)

    def pubsub(self):
        pubsub = FakePubSub(drop_connection=self.dropped_connections > 0)
        self.dropped_connections = max(0, self.dropped_connections - 1)
        self.pubsubs.append(pubsub)
        return pubsub

    async def close(self):
        self.closed = True

async def empty_fetch(query):
    return []

@pytest.mark.asyncio
async def test_local_feed_counts_and_discard():
    feed = LocalChangeFeed()
    registration = feed.add(QueryListener(Query("posts"), lambda snapshots: None, empty_fetch))
    feed.add(QueryListener(Query("comments"), lambda snapshots: None, empty_fetch))

    assert feed.get_listener_count() == 2
    assert feed.get_listener_count("posts") == 1

    registration.remove()
    registration.remove()

    assert feed.get_listener_count("posts") == 0
    await feed.close()
    assert feed.get_listener_count() == 0

@pytest.mark.asyncio
async def test_redis_feed_publishes_collection_name():
    redis_service = FakeRedisService()
    feed = RedisChangeFeed(redis_service, channel="test:changes")

    await feed.publish("posts")

    assert redis_service.published == [("test:changes", "posts")]

@pytest.mark.asyncio
async def test_redis_feed_handle_message_dispatches():
    feed = RedisChangeFeed(FakeRedisService(), channel="test:changes")
    deliveries = []

    async def fetch(query):
        return []

    feed.add(QueryListener(Query("posts"), lambda snapshots: deliveries.append("posts"), fetch))

    await feed.handle_message({"type": "subscribe", "data": 1})
    await feed.handle_message({"type": "message", "data": b"comments"})
    await feed.handle_message({"type": "message", "data": b"posts"})

    assert deliveries == ["posts"]

@pytest.mark.asyncio
async def test_store_over_redis_feed(test_engine):
    """Writes round-trip through the channel before listeners refresh"""
    redis_service = FakeRedisService()
    feed = RedisChangeFeed(redis_service, channel="test:changes")
    store = create_store(test_engine, feed)
    await feed.start()

    deliveries = []
    delivered = asyncio.Event()

    def on_change(snapshots):
        deliveries.append(len(snapshots))
        if snapshots:
            delivered.set()

    registration = await store.listen(Query("notes"), on_change)
    await store.add("notes", {"text": "hello"})
    await asyncio.wait_for(delivered.wait(), timeout=5)
    registration()

    await feed.close()

    assert deliveries == [0, 1]
    assert redis_service.pubsubs[0].closed
    assert redis_service.closed

@pytest.mark.asyncio
async def test_publish_failure_keeps_committed_write(test_engine):
    """A Redis outage after commit does not fail the write or skip the counter"""
    redis_service = FakeRedisService()
    redis_service.publish_error = ConnectionError("Error 111 connecting to localhost:6379.")
    store = create_store(test_engine, RedisChangeFeed(redis_service, channel="test:changes"))
    post_service = PostService(store)
    comment_service = CommentService(store)

    post_id = await post_service.create_post(PostCreate(
        user_id="user-1", user_name="Test User", title="Hello World", content="This is my first post!"
    ))
    comment_id = await comment_service.create_comment(CommentCreate(
        post_id=post_id, user_id="user-2", user_name="Other", content="Nice!"
    ))

    assert await comment_service.get_comment(comment_id) is not None
    assert (await post_service.get_post(post_id)).comments_count == 1

@pytest.mark.asyncio
async def test_reader_resubscribes_after_connection_loss(test_engine):
    redis_service = FakeRedisService(dropped_connections=1)
    feed = RedisChangeFeed(redis_service, channel="test:changes", reconnect_delay=0)
    store = create_store(test_engine, feed)
    await feed.start()

    async def resubscribed():
        while not (feed.reconnects == 1 and feed.connected):
            await asyncio.sleep(0.01)

    await asyncio.wait_for(resubscribed(), timeout=5)

    deliveries = []
    delivered = asyncio.Event()

    def on_change(snapshots):
        deliveries.append(len(snapshots))
        if snapshots:
            delivered.set()

    registration = await store.listen(Query("notes"), on_change)
    await store.add("notes", {"text": "after reconnect"})
    await asyncio.wait_for(delivered.wait(), timeout=5)
    registration()
    await feed.close()

    assert redis_service.pubsubs[0].closed
    assert len(redis_service.pubsubs) == 2
    assert deliveries == [0, 1]
