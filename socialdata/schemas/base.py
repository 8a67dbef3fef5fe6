from typing import Any, Dict
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Payload(BaseModel):
    """Write payload; dumps to the stored camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """Fields to write on create; absent optionals are left out, never null"""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_changes(self) -> Dict[str, Any]:
        """Fields to write on update; only those explicitly set"""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
