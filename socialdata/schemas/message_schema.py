from typing import Optional
from socialdata.schemas.base import Payload

class MessageCreate(Payload):
    text: Optional[str] = None
    user_id: str
    user_name: str = "Anonymous"
    user_avatar: Optional[str] = None
