from typing import List, Optional
import logging

from socialdata.config import settings
from socialdata.db.collections import TOPICS, TOPIC_FOLLOWERS
from socialdata.db.query import Query, DESCENDING
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.exceptions import ConflictError, NotFoundError
from socialdata.models.topic import Topic, TopicFollower
from socialdata.schemas.topic_schema import TopicCreate
from socialdata.services.counters import adjust_counter

logger = logging.getLogger(__name__)

class TopicService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_topic(self, topic_data: TopicCreate) -> str:
        """Create a topic; its creator is the first follower"""
        try:
            document = topic_data.to_document()
            document.update({
                "postCount": 0,
                "followerCount": 1,
                "isActive": True,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            })

            topic_id = await self.store.add(TOPICS, document)

            # Add creator as follower
            await self._add_follower(topic_id, topic_data.created_by, topic_data.creator_name)

            logger.info(f"Created topic {topic_id} by user {topic_data.created_by}")

            return topic_id

        except Exception as e:
            logger.error(f"Error creating topic: {e}")
            raise

    async def get_topics(self, limit: Optional[int] = None) -> List[Topic]:
        """Get active topics, most followed first"""
        try:
            query = Query(TOPICS).where("isActive", True).order_by("followerCount", DESCENDING).limit(
                limit if limit is not None else settings.DEFAULT_PAGE_SIZE
            )
            snapshots = await self.store.find(query)
            return [Topic.from_snapshot(snapshot) for snapshot in snapshots]
        except Exception as e:
            logger.error(f"Error getting topics: {e}")
            raise

    async def get_topic(self, topic_id: str) -> Optional[Topic]:
        """Get a topic by ID"""
        try:
            snapshot = await self.store.get(TOPICS, topic_id)
            if snapshot is None:
                return None
            return Topic.from_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Error getting topic: {e}")
            raise

    async def follow_topic(self, topic_id: str, user_id: str, user_name: str) -> str:
        """Follow a topic"""
        try:
            if await self.get_topic_follower(topic_id, user_id) is not None:
                raise ConflictError("Already following this topic")

            follower_id = await self._add_follower(topic_id, user_id, user_name)

            # Update follower count
            await adjust_counter(self.store, TOPICS, topic_id, "followerCount", 1)

            logger.info(f"User {user_id} followed topic {topic_id}")

            return follower_id

        except Exception as e:
            logger.error(f"Error following topic: {e}")
            raise

    async def unfollow_topic(self, topic_id: str, user_id: str) -> None:
        """Stop following a topic"""
        try:
            follower = await self.get_topic_follower(topic_id, user_id)
            if follower is None:
                raise NotFoundError("Not following this topic")

            await self.store.delete(TOPIC_FOLLOWERS, follower.id)

            # Update follower count
            await adjust_counter(self.store, TOPICS, topic_id, "followerCount", -1)

            logger.info(f"User {user_id} unfollowed topic {topic_id}")

        except Exception as e:
            logger.error(f"Error unfollowing topic: {e}")
            raise

    async def get_topic_follower(self, topic_id: str, user_id: str) -> Optional[TopicFollower]:
        snapshots = await self.store.find(
            Query(TOPIC_FOLLOWERS).where("topicId", topic_id).where("userId", user_id).limit(1)
        )
        if not snapshots:
            return None
        return TopicFollower.from_snapshot(snapshots[0])

    async def _add_follower(self, topic_id: str, user_id: str, user_name: str) -> str:
        return await self.store.add(TOPIC_FOLLOWERS, {
            "topicId": topic_id,
            "userId": user_id,
            "userName": user_name,
            "followedAt": SERVER_TIMESTAMP,
        })
