from typing import Optional
from socialdata.schemas.base import Payload

class CommentCreate(Payload):
    post_id: str
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None
    content: Optional[str] = None
