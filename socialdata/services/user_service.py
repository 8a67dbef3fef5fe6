"""
Profile and settings records for signed-in users
"""
import logging
from typing import Optional

from socialdata.db.collections import USER_PROFILES, USER_SETTINGS
from socialdata.db.query import Query
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.models.user import UserProfile, UserSettings
from socialdata.schemas.user_schema import UserProfileCreate, UserProfileUpdate, UserSettingsUpdate
from socialdata.services.validation import check_user_profile, ensure_valid
from socialdata.utils.image import generate_avatar_placeholder

logger = logging.getLogger(__name__)

class UserProfileService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_user_profile(self, profile_data: UserProfileCreate) -> str:
        """Create a profile; a placeholder avatar is used when no picture is given"""
        try:
            ensure_valid(check_user_profile(profile_data))

            document = profile_data.to_document()
            document["profilePicture"] = profile_data.profile_picture or generate_avatar_placeholder(
                profile_data.display_name
            )
            document.update({
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            })

            profile_id = await self.store.add(USER_PROFILES, document)

            logger.info(f"Created profile {profile_id} for user {profile_data.uid}")

            return profile_id

        except Exception as e:
            logger.error(f"Error creating user profile: {e}")
            raise

    async def get_user_profile(self, uid: str) -> Optional[UserProfile]:
        """Get the profile owned by a user"""
        try:
            snapshots = await self.store.find(Query(USER_PROFILES).where("uid", uid).limit(1))
            if not snapshots:
                return None
            return UserProfile.from_snapshot(snapshots[0])
        except Exception as e:
            logger.error(f"Error getting user profile: {e}")
            raise

    async def update_user_profile(self, profile_id: str, profile_update: UserProfileUpdate) -> None:
        """Update a profile"""
        try:
            ensure_valid(check_user_profile(profile_update, partial=True))

            changes = profile_update.to_changes()
            changes["updatedAt"] = SERVER_TIMESTAMP

            await self.store.update(USER_PROFILES, profile_id, changes)

            logger.info(f"Updated profile {profile_id}")

        except Exception as e:
            logger.error(f"Error updating user profile: {e}")
            raise


class SettingsService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_user_settings(self, user_id: str) -> str:
        """Create a user's settings with the default values.

        A user has exactly one settings record; if one already exists its
        id is returned and nothing is written. The check and the insert are
        separate round trips, so concurrent calls can still create two.
        """
        try:
            existing = await self._find_settings(user_id)
            if existing is not None:
                return existing.id

            document = UserSettings(id="", user_id=user_id).model_dump(
                by_alias=True, exclude={"id", "updated_at"}
            )
            document["updatedAt"] = SERVER_TIMESTAMP

            settings_id = await self.store.add(USER_SETTINGS, document)

            logger.info(f"Created settings {settings_id} for user {user_id}")

            return settings_id

        except Exception as e:
            logger.error(f"Error creating user settings: {e}")
            raise

    async def get_user_settings(self, user_id: str) -> Optional[UserSettings]:
        """Get a user's settings"""
        try:
            snapshot = await self._find_settings(user_id)
            if snapshot is None:
                return None
            return UserSettings.from_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Error getting user settings: {e}")
            raise

    async def update_user_settings(self, settings_id: str, settings_update: UserSettingsUpdate) -> None:
        """Update individual settings; untouched toggles keep their values"""
        try:
            changes = settings_update.to_changes()
            changes["updatedAt"] = SERVER_TIMESTAMP

            await self.store.update(USER_SETTINGS, settings_id, changes)

            logger.info(f"Updated settings {settings_id}")

        except Exception as e:
            logger.error(f"Error updating user settings: {e}")
            raise

    async def _find_settings(self, user_id: str):
        snapshots = await self.store.find(Query(USER_SETTINGS).where("userId", user_id).limit(1))
        return snapshots[0] if snapshots else None
