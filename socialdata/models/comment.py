from typing import Optional
from socialdata.models.base import TimestampedRecord

class Comment(TimestampedRecord):
    post_id: str
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None
    content: str
