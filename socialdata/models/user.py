from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from socialdata.models.base import Record, TimestampedRecord, timestamp_field

class UserProfile(TimestampedRecord):
    uid: str
    display_name: str
    email: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None

class SettingsSection(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class NotificationToggles(SettingsSection):
    likes: bool = True
    comments: bool = True
    follows: bool = True
    group_invites: bool = True
    event_invites: bool = True
    system_updates: bool = True

class PrivacySettings(SettingsSection):
    profile_visibility: Literal["public", "friends", "private"] = "public"
    show_email: bool = False
    show_online_status: bool = True

class PreferenceSettings(SettingsSection):
    theme: Literal["light", "dark", "system"] = "system"
    language: str = "en"
    auto_play_videos: bool = True

class UserSettings(Record):
    user_id: str
    notifications: NotificationToggles = Field(default_factory=NotificationToggles)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    preferences: PreferenceSettings = Field(default_factory=PreferenceSettings)
    updated_at: datetime = timestamp_field()
