from typing import Callable, List, Optional
import logging

from socialdata.config import settings
from socialdata.db.collections import POSTS, COMMENTS, LIKES
from socialdata.db.query import Query, DESCENDING
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.models.post import Post
from socialdata.realtime.manager import ListenerRegistration
from socialdata.schemas.post_schema import PostCreate, PostUpdate
from socialdata.services.validation import check_post, ensure_valid

logger = logging.getLogger(__name__)

class PostService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_post(self, post_data: PostCreate) -> str:
        """Create a new post"""
        try:
            ensure_valid(check_post(post_data))

            document = post_data.to_document()
            document.update({
                "likesCount": 0,
                "commentsCount": 0,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            })

            post_id = await self.store.add(POSTS, document)

            logger.info(f"Created post {post_id} by user {post_data.user_id}")

            return post_id

        except Exception as e:
            logger.error(f"Error creating post: {e}")
            raise

    async def get_posts(self, limit: Optional[int] = None) -> List[Post]:
        """Get the most recent posts, newest first"""
        try:
            query = self._recent_posts_query(limit)
            snapshots = await self.store.find(query)
            return [Post.from_snapshot(snapshot) for snapshot in snapshots]
        except Exception as e:
            logger.error(f"Error getting posts: {e}")
            raise

    async def get_post(self, post_id: str) -> Optional[Post]:
        """Get a post by ID"""
        try:
            snapshot = await self.store.get(POSTS, post_id)
            if snapshot is None:
                return None
            return Post.from_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Error getting post: {e}")
            raise

    async def update_post(self, post_id: str, post_update: PostUpdate) -> None:
        """Update a post"""
        try:
            ensure_valid(check_post(post_update, partial=True))

            changes = post_update.to_changes()
            changes["updatedAt"] = SERVER_TIMESTAMP

            await self.store.update(POSTS, post_id, changes)

            logger.info(f"Updated post {post_id}")

        except Exception as e:
            logger.error(f"Error updating post: {e}")
            raise

    async def delete_post(self, post_id: str) -> None:
        """Delete a post with its comments and likes.

        Runs comments, then likes, then the post. There is no transaction
        across the three: if a later step fails, the earlier deletions stay
        and likes can be left pointing at a deleted post.
        """
        try:
            comments = await self.store.find(Query(COMMENTS).where("postId", post_id))
            await self.store.delete_many(COMMENTS, [snapshot.id for snapshot in comments])

            likes = await self.store.find(Query(LIKES).where("postId", post_id))
            await self.store.delete_many(LIKES, [snapshot.id for snapshot in likes])

            await self.store.delete(POSTS, post_id)

            logger.info(
                f"Deleted post {post_id} with {len(comments)} comments and {len(likes)} likes"
            )

        except Exception as e:
            logger.error(f"Error deleting post: {e}")
            raise

    async def subscribe_to_posts(
        self,
        callback: Callable[[List[Post]], None],
        limit: Optional[int] = None
    ) -> ListenerRegistration:
        """Deliver the most recent posts now and on every change"""
        def deliver(snapshots):
            return callback([Post.from_snapshot(snapshot) for snapshot in snapshots])

        return await self.store.listen(self._recent_posts_query(limit), deliver)

    @staticmethod
    def _recent_posts_query(limit: Optional[int]) -> Query:
        return Query(POSTS).order_by("createdAt", DESCENDING).limit(
            limit if limit is not None else settings.DEFAULT_PAGE_SIZE
        )
