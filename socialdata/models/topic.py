from datetime import datetime
from socialdata.models.base import Record, TimestampedRecord, timestamp_field

class Topic(TimestampedRecord):
    name: str
    description: str
    created_by: str
    creator_name: str
    post_count: int = 0
    follower_count: int = 0
    is_active: bool = True

class TopicFollower(Record):
    topic_id: str
    user_id: str
    user_name: str
    followed_at: datetime = timestamp_field()
