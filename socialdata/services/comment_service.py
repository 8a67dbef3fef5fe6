from typing import Callable, List, Optional
import logging

from socialdata.db.collections import COMMENTS, POSTS
from socialdata.db.query import Query, Snapshot
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.models.comment import Comment
from socialdata.realtime.manager import ListenerRegistration
from socialdata.schemas.comment_schema import CommentCreate
from socialdata.services.counters import adjust_counter
from socialdata.services.validation import check_comment, ensure_valid

logger = logging.getLogger(__name__)

class CommentService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_comment(self, comment_data: CommentCreate) -> str:
        """Create a new comment and bump the post's comment count"""
        try:
            ensure_valid(check_comment(comment_data))

            document = comment_data.to_document()
            document.update({
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            })

            comment_id = await self.store.add(COMMENTS, document)

            # Update post comment count
            await adjust_counter(self.store, POSTS, comment_data.post_id, "commentsCount", 1)

            logger.info(f"Created comment {comment_id} by user {comment_data.user_id} on post {comment_data.post_id}")

            return comment_id

        except Exception as e:
            logger.error(f"Error creating comment: {e}")
            raise

    async def get_comment(self, comment_id: str) -> Optional[Comment]:
        """Get a comment by ID"""
        try:
            snapshot = await self.store.get(COMMENTS, comment_id)
            if snapshot is None:
                return None
            return Comment.from_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Error getting comment: {e}")
            raise

    async def get_comments(self, post_id: str) -> List[Comment]:
        """Get a post's comments, oldest first"""
        try:
            snapshots = await self.store.find(self._post_comments_query(post_id))
            return self._sorted(snapshots)
        except Exception as e:
            logger.error(f"Error getting comments: {e}")
            raise

    async def delete_comment(self, comment_id: str, post_id: str) -> None:
        """Delete a comment and decrement the post's comment count"""
        try:
            await self.store.delete(COMMENTS, comment_id)

            # Update post comment count, never below zero
            await adjust_counter(self.store, POSTS, post_id, "commentsCount", -1)

            logger.info(f"Deleted comment {comment_id} from post {post_id}")

        except Exception as e:
            logger.error(f"Error deleting comment: {e}")
            raise

    async def subscribe_to_comments(
        self,
        post_id: str,
        callback: Callable[[List[Comment]], None]
    ) -> ListenerRegistration:
        """Deliver a post's comments now and on every change, oldest first"""
        def deliver(snapshots):
            return callback(self._sorted(snapshots))

        return await self.store.listen(self._post_comments_query(post_id), deliver)

    @staticmethod
    def _post_comments_query(post_id: str) -> Query:
        # Filter only; ordering happens client-side so no composite index is needed
        return Query(COMMENTS).where("postId", post_id)

    @staticmethod
    def _sorted(snapshots: List[Snapshot]) -> List[Comment]:
        comments = [Comment.from_snapshot(snapshot) for snapshot in snapshots]
        comments.sort(key=lambda comment: comment.created_at)
        return comments
