from datetime import datetime
from typing import Literal, Optional
from socialdata.models.base import Record, timestamp_field

NotificationType = Literal["like", "comment", "follow", "group_invite", "event_invite", "system"]

class Notification(Record):
    user_id: str
    type: NotificationType
    title: str
    message: str
    is_read: bool = False
    related_id: Optional[str] = None  # postId, groupId, eventId, etc.
    created_at: datetime = timestamp_field()
