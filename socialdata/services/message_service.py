from typing import Callable, List, Optional
import logging

from socialdata.db.collections import MESSAGES
from socialdata.db.query import Query, ASCENDING
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.models.message import Message
from socialdata.realtime.manager import ListenerRegistration
from socialdata.schemas.message_schema import MessageCreate
from socialdata.services.validation import check_message, ensure_valid

logger = logging.getLogger(__name__)

class MessageService:
    """Chat room backed by the shared messages collection"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def send_message(
        self,
        text: str,
        user_id: str,
        user_name: Optional[str] = None,
        user_avatar: Optional[str] = None
    ) -> str:
        """Post a chat message"""
        try:
            message_data = MessageCreate(
                text=text,
                user_id=user_id,
                user_name=user_name or "Anonymous",
                user_avatar=user_avatar,
            )
            ensure_valid(check_message(message_data))

            document = message_data.to_document()
            document["createdAt"] = SERVER_TIMESTAMP

            message_id = await self.store.add(MESSAGES, document)

            logger.info(f"User {user_id} sent message {message_id}")

            return message_id

        except Exception as e:
            logger.error(f"Error sending message: {e}")
            raise

    async def get_messages(self) -> List[Message]:
        """Get every chat message, oldest first"""
        try:
            snapshots = await self.store.find(self._messages_query())
            return [Message.from_snapshot(snapshot) for snapshot in snapshots]
        except Exception as e:
            logger.error(f"Error getting messages: {e}")
            raise

    async def subscribe_to_messages(self, callback: Callable[[List[Message]], None]) -> ListenerRegistration:
        """Deliver the chat history now and on every new message"""
        def deliver(snapshots):
            return callback([Message.from_snapshot(snapshot) for snapshot in snapshots])

        return await self.store.listen(self._messages_query(), deliver)

    @staticmethod
    def _messages_query() -> Query:
        return Query(MESSAGES).order_by("createdAt", ASCENDING)
