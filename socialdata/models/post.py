from typing import Optional
from socialdata.models.base import TimestampedRecord

class Post(TimestampedRecord):
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None
    title: str
    content: str
    image_data: Optional[str] = None

    # Denormalized counts, maintained by comment and like operations
    likes_count: int = 0
    comments_count: int = 0
