from typing import Optional
from socialdata.models.notification import NotificationType
from socialdata.schemas.base import Payload

class NotificationCreate(Payload):
    user_id: str
    type: NotificationType
    title: str
    message: str
    is_read: bool = False
    related_id: Optional[str] = None
