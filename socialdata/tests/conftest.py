import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from socialdata.config import settings
from socialdata.db.session import create_store, init_db
from socialdata.db.store import DocumentStore
from socialdata.realtime.manager import LocalChangeFeed
from socialdata.services.auth_service import AuthSession, LocalIdentityProvider
from socialdata.services.comment_service import CommentService
from socialdata.services.event_service import EventService
from socialdata.services.group_service import GroupService
from socialdata.services.like_service import LikeService
from socialdata.services.message_service import MessageService
from socialdata.services.notification_service import NotificationService
from socialdata.services.post_service import PostService
from socialdata.services.topic_service import TopicService
from socialdata.services.user_service import SettingsService, UserProfileService

# Set testing mode
settings.TESTING = True

# Test store URL - in-memory SQLite
TEST_STORE_URL = "sqlite+aiosqlite:///:memory:"

@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory store for each test"""
    engine = create_async_engine(
        TEST_STORE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)

    yield engine

    await engine.dispose()

@pytest.fixture
async def feed() -> AsyncGenerator[LocalChangeFeed, None]:
    change_feed = LocalChangeFeed()
    yield change_feed
    await change_feed.close()

@pytest.fixture
def store(test_engine: AsyncEngine, feed: LocalChangeFeed) -> DocumentStore:
    return create_store(test_engine, feed)

@pytest.fixture
def post_service(store):
    return PostService(store)

@pytest.fixture
def comment_service(store):
    return CommentService(store)

@pytest.fixture
def like_service(store):
    return LikeService(store)

@pytest.fixture
def group_service(store):
    return GroupService(store)

@pytest.fixture
def event_service(store):
    return EventService(store)

@pytest.fixture
def notification_service(store):
    return NotificationService(store)

@pytest.fixture
def topic_service(store):
    return TopicService(store)

@pytest.fixture
def profile_service(store):
    return UserProfileService(store)

@pytest.fixture
def settings_service(store):
    return SettingsService(store)

@pytest.fixture
def message_service(store):
    return MessageService(store)

@pytest.fixture
def identity_provider(store):
    return LocalIdentityProvider(store)

@pytest.fixture
async def auth_session(identity_provider) -> AsyncGenerator[AuthSession, None]:
    async with AuthSession(identity_provider) as session:
        yield session

@pytest.fixture
async def test_post(post_service):
    """Create a test post"""
    from socialdata.schemas.post_schema import PostCreate

    post_id = await post_service.create_post(PostCreate(
        user_id="user-1",
        user_name="Test User",
        title="Hello World",
        content="This is my first post!",
    ))
    return post_id
