from datetime import datetime
from typing import Literal, Optional
from socialdata.models.base import Record, TimestampedRecord, timestamp_field

GroupRole = Literal["admin", "moderator", "member"]

class Group(TimestampedRecord):
    name: str
    description: str
    created_by: str
    creator_name: str
    member_count: int = 0
    is_private: bool = False
    image_data: Optional[str] = None

class GroupMember(Record):
    group_id: str
    user_id: str
    user_name: str
    role: GroupRole = "member"
    joined_at: datetime = timestamp_field()
