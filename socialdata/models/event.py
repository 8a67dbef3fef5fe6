from datetime import datetime
from typing import Literal, Optional
from socialdata.models.base import Record, TimestampedRecord, timestamp_field

ParticipantStatus = Literal["going", "maybe", "not_going"]

class Event(TimestampedRecord):
    title: str
    description: str
    created_by: str
    creator_name: str
    group_id: Optional[str] = None
    start_date: datetime = timestamp_field()
    end_date: datetime = timestamp_field()
    location: Optional[str] = None
    max_participants: Optional[int] = None
    current_participants: int = 0
    is_public: bool = True

    @property
    def is_full(self) -> bool:
        return self.max_participants is not None and self.current_participants >= self.max_participants

class EventParticipant(Record):
    event_id: str
    user_id: str
    user_name: str
    status: ParticipantStatus = "going"
    joined_at: datetime = timestamp_field()
