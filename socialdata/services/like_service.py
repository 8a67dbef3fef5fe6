from typing import List, Optional
import logging

from socialdata.db.collections import LIKES, POSTS
from socialdata.db.query import Query
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.models.like import Like
from socialdata.services.counters import adjust_counter

logger = logging.getLogger(__name__)

class LikeService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def toggle_like(self, post_id: str, user_id: str, user_name: str) -> bool:
        """Like or unlike a post; returns True when the post is now liked.

        The lookup and the insert/delete are separate round trips, so two
        concurrent toggles by the same user can both see "not liked" and
        insert two likes.
        """
        try:
            existing = await self._get_existing_like(post_id, user_id)

            if existing is None:
                await self.store.add(LIKES, {
                    "postId": post_id,
                    "userId": user_id,
                    "userName": user_name,
                    "createdAt": SERVER_TIMESTAMP,
                })

                # Update like count
                await adjust_counter(self.store, POSTS, post_id, "likesCount", 1)

                logger.info(f"Created like: user={user_id}, post={post_id}")

                return True

            await self.store.delete(LIKES, existing.id)

            # Update like count
            await adjust_counter(self.store, POSTS, post_id, "likesCount", -1)

            logger.info(f"Deleted like: user={user_id}, post={post_id}")

            return False

        except Exception as e:
            logger.error(f"Error toggling like: {e}")
            raise

    async def has_user_liked(self, post_id: str, user_id: str) -> bool:
        """Check if user has liked a post"""
        try:
            return await self._get_existing_like(post_id, user_id) is not None
        except Exception as e:
            logger.error(f"Error checking if user liked: {e}")
            raise

    async def get_user_likes(self, user_id: str) -> List[str]:
        """Get the IDs of every post a user has liked"""
        try:
            snapshots = await self.store.find(Query(LIKES).where("userId", user_id))
            return [snapshot.get("postId") for snapshot in snapshots]
        except Exception as e:
            logger.error(f"Error getting user likes: {e}")
            raise

    async def get_post_likes(self, post_id: str) -> List[Like]:
        """Get the likes on a post, oldest first"""
        try:
            snapshots = await self.store.find(Query(LIKES).where("postId", post_id))
            likes = [Like.from_snapshot(snapshot) for snapshot in snapshots]
            likes.sort(key=lambda like: like.created_at)
            return likes
        except Exception as e:
            logger.error(f"Error getting post likes: {e}")
            raise

    async def _get_existing_like(self, post_id: str, user_id: str) -> Optional[Like]:
        """Check if like already exists"""
        snapshots = await self.store.find(
            Query(LIKES).where("postId", post_id).where("userId", user_id).limit(1)
        )
        if not snapshots:
            return None
        return Like.from_snapshot(snapshots[0])
