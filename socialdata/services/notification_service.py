from typing import Callable, List, Optional
import logging

from socialdata.config import settings
from socialdata.db.collections import NOTIFICATIONS
from socialdata.db.query import Query, Snapshot
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.models.notification import Notification
from socialdata.realtime.manager import ListenerRegistration
from socialdata.schemas.notification_schema import NotificationCreate

logger = logging.getLogger(__name__)

class NotificationService:
    def __init__(self, store: DocumentStore):
        self.store = store

        # Notification templates
        self.templates = {
            "like": {
                "title": "New Like",
                "message": "{sender} liked your post",
            },
            "comment": {
                "title": "New Comment",
                "message": "{sender} commented on your post",
            },
            "follow": {
                "title": "New Follower",
                "message": "{sender} started following you",
            },
            "group_invite": {
                "title": "Group Invitation",
                "message": "{sender} invited you to join {target}",
            },
            "event_invite": {
                "title": "Event Invitation",
                "message": "{sender} invited you to {target}",
            },
            "system": {
                "title": "System Notification",
                "message": "{target}",
            },
        }

    async def create_notification(self, notification_data: NotificationCreate) -> str:
        """Create a new notification"""
        try:
            document = notification_data.to_document()
            document["createdAt"] = SERVER_TIMESTAMP

            notification_id = await self.store.add(NOTIFICATIONS, document)

            logger.info(f"Created notification: {notification_id} for user: {notification_data.user_id}")

            return notification_id

        except Exception as e:
            logger.error(f"Error creating notification: {e}")
            raise

    async def notify(
        self,
        user_id: str,
        type: str,
        sender_name: str,
        related_id: Optional[str] = None,
        target: str = ""
    ) -> str:
        """Create a notification from the template for its type"""
        template = self.templates[type]
        return await self.create_notification(NotificationCreate(
            user_id=user_id,
            type=type,
            title=template["title"],
            message=template["message"].format(sender=sender_name or "Someone", target=target),
            related_id=related_id,
        ))

    async def get_user_notifications(self, user_id: str, limit: Optional[int] = None) -> List[Notification]:
        """Get a user's notifications, newest first"""
        try:
            snapshots = await self.store.find(self._user_query(user_id, limit))
            return self._sorted(snapshots)
        except Exception as e:
            logger.error(f"Error getting notifications: {e}")
            raise

    async def get_unread_count(self, user_id: str) -> int:
        """Get count of unread notifications"""
        try:
            snapshots = await self.store.find(
                Query(NOTIFICATIONS).where("userId", user_id).where("isRead", False)
            )
            return len(snapshots)
        except Exception as e:
            logger.error(f"Error getting unread count: {e}")
            raise

    async def mark_notification_as_read(self, notification_id: str) -> None:
        """Mark a notification as read"""
        try:
            await self.store.update(NOTIFICATIONS, notification_id, {"isRead": True})
            logger.info(f"Marked notification {notification_id} as read")
        except Exception as e:
            logger.error(f"Error marking notification as read: {e}")
            raise

    async def mark_all_as_read(self, user_id: str) -> int:
        """Mark all notifications as read for a user"""
        try:
            snapshots = await self.store.find(
                Query(NOTIFICATIONS).where("userId", user_id).where("isRead", False)
            )
            for snapshot in snapshots:
                await self.store.update(NOTIFICATIONS, snapshot.id, {"isRead": True})

            logger.info(f"Marked {len(snapshots)} notifications as read for user {user_id}")

            return len(snapshots)

        except Exception as e:
            logger.error(f"Error marking all notifications as read: {e}")
            raise

    async def subscribe_to_user_notifications(
        self,
        user_id: str,
        callback: Callable[[List[Notification]], None],
        limit: Optional[int] = None
    ) -> ListenerRegistration:
        """Deliver a user's notifications now and on every change, newest first"""
        def deliver(snapshots):
            return callback(self._sorted(snapshots))

        return await self.store.listen(self._user_query(user_id, limit), deliver)

    @staticmethod
    def _user_query(user_id: str, limit: Optional[int]) -> Query:
        # No ordering in the query; sorted client-side
        return Query(NOTIFICATIONS).where("userId", user_id).limit(
            limit if limit is not None else settings.NOTIFICATIONS_LIMIT
        )

    @staticmethod
    def _sorted(snapshots: List[Snapshot]) -> List[Notification]:
        notifications = [Notification.from_snapshot(snapshot) for snapshot in snapshots]
        notifications.sort(key=lambda notification: notification.created_at, reverse=True)
        return notifications
