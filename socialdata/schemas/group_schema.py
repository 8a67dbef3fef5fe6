from typing import Optional
from socialdata.schemas.base import Payload

class GroupCreate(Payload):
    name: Optional[str] = None
    description: Optional[str] = None
    created_by: str
    creator_name: str
    is_private: bool = False
    image_data: Optional[str] = None

class GroupUpdate(Payload):
    name: Optional[str] = None
    description: Optional[str] = None
    is_private: Optional[bool] = None
    image_data: Optional[str] = None
