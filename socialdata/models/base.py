from datetime import datetime
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from socialdata.db.base import utcnow
from socialdata.db.query import Snapshot


class Record(BaseModel):
    """Typed view of a stored document.

    Stored keys are camelCase; attributes are snake_case. Missing or null
    fields fall back to the field defaults, so this is the one place where
    absent data is defaulted.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot):
        return cls.model_validate({**snapshot.data, "id": snapshot.id})


def timestamp_field() -> Any:
    return Field(default_factory=utcnow)


class TimestampedRecord(Record):
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
