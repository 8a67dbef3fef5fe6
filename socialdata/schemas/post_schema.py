from typing import Optional
from socialdata.schemas.base import Payload

class PostCreate(Payload):
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    image_data: Optional[str] = None

class PostUpdate(Payload):
    title: Optional[str] = None
    content: Optional[str] = None
    image_data: Optional[str] = None
    user_avatar: Optional[str] = None
