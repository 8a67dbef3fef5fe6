from datetime import datetime
from typing import Optional
from socialdata.models.base import Record, timestamp_field

class Message(Record):
    """Chat message in the shared messages collection"""
    text: str = ""
    user_id: str = ""
    user_name: str = "Anonymous"
    user_avatar: Optional[str] = None
    created_at: datetime = timestamp_field()
