from typing import Any, Dict, Literal, Optional
from socialdata.schemas.base import Payload

class UserProfileCreate(Payload):
    uid: str
    display_name: Optional[str] = None
    email: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None

class UserProfileUpdate(Payload):
    display_name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None

class NotificationTogglesUpdate(Payload):
    likes: Optional[bool] = None
    comments: Optional[bool] = None
    follows: Optional[bool] = None
    group_invites: Optional[bool] = None
    event_invites: Optional[bool] = None
    system_updates: Optional[bool] = None

class PrivacySettingsUpdate(Payload):
    profile_visibility: Optional[Literal["public", "friends", "private"]] = None
    show_email: Optional[bool] = None
    show_online_status: Optional[bool] = None

class PreferenceSettingsUpdate(Payload):
    theme: Optional[Literal["light", "dark", "system"]] = None
    language: Optional[str] = None
    auto_play_videos: Optional[bool] = None

class UserSettingsUpdate(Payload):
    notifications: Optional[NotificationTogglesUpdate] = None
    privacy: Optional[PrivacySettingsUpdate] = None
    preferences: Optional[PreferenceSettingsUpdate] = None

    def to_changes(self) -> Dict[str, Any]:
        """Flatten nested sections to dotted paths so untouched toggles survive"""
        changes: Dict[str, Any] = {}
        for section, values in super().to_changes().items():
            for key, value in values.items():
                changes[f"{section}.{key}"] = value
        return changes
