import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from socialdata.config import settings
from socialdata.db.session import create_engine, create_store, init_db, check_connection, close_db
from socialdata.realtime.manager import LocalChangeFeed, create_change_feed
from socialdata.services.auth_service import AuthSession, IdentityProvider, LocalIdentityProvider
from socialdata.services.comment_service import CommentService
from socialdata.services.event_service import EventService
from socialdata.services.group_service import GroupService
from socialdata.services.like_service import LikeService
from socialdata.services.message_service import MessageService
from socialdata.services.notification_service import NotificationService
from socialdata.services.post_service import PostService
from socialdata.services.topic_service import TopicService
from socialdata.services.user_service import SettingsService, UserProfileService

logger = logging.getLogger(__name__)

def configure_logging(level: Optional[str] = None):
    """Configure logging for the running client"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


class SocialClient:
    """Wires the store, change feed, services and auth session together.

    Use as ``async with SocialClient() as client:``; start() prepares the
    store and change feed, close() releases them.
    """

    def __init__(
        self,
        engine: Optional[AsyncEngine] = None,
        feed: Optional[LocalChangeFeed] = None,
        provider: Optional[IdentityProvider] = None
    ):
        self.engine = engine or create_engine()
        self.feed = feed or create_change_feed()
        self.store = create_store(self.engine, self.feed)

        self.posts = PostService(self.store)
        self.comments = CommentService(self.store)
        self.likes = LikeService(self.store)
        self.groups = GroupService(self.store)
        self.events = EventService(self.store)
        self.notifications = NotificationService(self.store)
        self.topics = TopicService(self.store)
        self.profiles = UserProfileService(self.store)
        self.settings = SettingsService(self.store)
        self.messages = MessageService(self.store)

        self.provider = provider or LocalIdentityProvider(self.store)
        self.auth = AuthSession(self.provider)

    async def start(self):
        """Create tables, check the connection and start the change feed"""
        configure_logging()
        logger.info(f"Starting {settings.PROJECT_NAME} {settings.VERSION}...")

        await init_db(self.engine)

        if not await check_connection(self.engine):
            logger.warning("Continuing without a confirmed store connection")

        await self.feed.start()
        await self.auth.start()

    async def close(self):
        """Stop listeners and release connections"""
        logger.info("Shutting down...")
        await self.auth.close()
        await self.feed.close()
        await close_db(self.engine)

    async def __aenter__(self) -> "SocialClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
