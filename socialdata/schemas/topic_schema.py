from socialdata.schemas.base import Payload

class TopicCreate(Payload):
    name: str
    description: str
    created_by: str
    creator_name: str
