from datetime import datetime
from socialdata.models.base import Record, timestamp_field

class Like(Record):
    post_id: str
    user_id: str
    user_name: str
    created_at: datetime = timestamp_field()
