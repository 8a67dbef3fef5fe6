from datetime import datetime
from typing import Optional
from pydantic import Field
from socialdata.schemas.base import Payload

class EventCreate(Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    created_by: str
    creator_name: str
    group_id: Optional[str] = None
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    max_participants: Optional[int] = Field(None, ge=1)
    is_public: bool = True

class EventUpdate(Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    max_participants: Optional[int] = Field(None, ge=1)
    is_public: Optional[bool] = None
