from typing import Callable, List, Optional
import logging

from socialdata.config import settings
from socialdata.db.collections import GROUPS, GROUP_MEMBERS
from socialdata.db.query import Query, DESCENDING
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.exceptions import ConflictError, NotFoundError
from socialdata.models.group import Group, GroupMember, GroupRole
from socialdata.realtime.manager import ListenerRegistration
from socialdata.schemas.group_schema import GroupCreate, GroupUpdate
from socialdata.services.counters import adjust_counter
from socialdata.services.validation import check_group, ensure_valid

logger = logging.getLogger(__name__)

class GroupService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_group(self, group_data: GroupCreate) -> str:
        """Create a group and enroll its creator as admin"""
        try:
            ensure_valid(check_group(group_data))

            document = group_data.to_document()
            document.update({
                "memberCount": 1,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            })

            group_id = await self.store.add(GROUPS, document)

            # Add creator as admin member
            await self._add_member(group_id, group_data.created_by, group_data.creator_name, "admin")

            logger.info(f"Created group {group_id} by user {group_data.created_by}")

            return group_id

        except Exception as e:
            logger.error(f"Error creating group: {e}")
            raise

    async def get_groups(self, limit: Optional[int] = None) -> List[Group]:
        """Get the most recent groups, newest first"""
        try:
            query = Query(GROUPS).order_by("createdAt", DESCENDING).limit(
                limit if limit is not None else settings.DEFAULT_PAGE_SIZE
            )
            snapshots = await self.store.find(query)
            return [Group.from_snapshot(snapshot) for snapshot in snapshots]
        except Exception as e:
            logger.error(f"Error getting groups: {e}")
            raise

    async def get_group(self, group_id: str) -> Optional[Group]:
        """Get a group by ID"""
        try:
            snapshot = await self.store.get(GROUPS, group_id)
            if snapshot is None:
                return None
            return Group.from_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Error getting group: {e}")
            raise

    async def update_group(self, group_id: str, group_update: GroupUpdate) -> None:
        """Update a group"""
        try:
            ensure_valid(check_group(group_update, partial=True))

            changes = group_update.to_changes()
            changes["updatedAt"] = SERVER_TIMESTAMP

            await self.store.update(GROUPS, group_id, changes)

            logger.info(f"Updated group {group_id}")

        except Exception as e:
            logger.error(f"Error updating group: {e}")
            raise

    async def join_group(self, group_id: str, user_id: str, user_name: str) -> str:
        """Add a user to a group as a plain member"""
        try:
            # Check if already a member
            if await self.get_group_member(group_id, user_id) is not None:
                raise ConflictError("Already a member of this group")

            member_id = await self._add_member(group_id, user_id, user_name, "member")

            # Update member count
            await adjust_counter(self.store, GROUPS, group_id, "memberCount", 1)

            logger.info(f"User {user_id} joined group {group_id}")

            return member_id

        except Exception as e:
            logger.error(f"Error joining group: {e}")
            raise

    async def leave_group(self, group_id: str, user_id: str) -> None:
        """Remove a user's membership"""
        try:
            member = await self.get_group_member(group_id, user_id)
            if member is None:
                raise NotFoundError("Not a member of this group")

            await self.store.delete(GROUP_MEMBERS, member.id)

            # Update member count
            await adjust_counter(self.store, GROUPS, group_id, "memberCount", -1)

            logger.info(f"User {user_id} left group {group_id}")

        except Exception as e:
            logger.error(f"Error leaving group: {e}")
            raise

    async def get_group_member(self, group_id: str, user_id: str) -> Optional[GroupMember]:
        """Get one user's membership record"""
        snapshots = await self.store.find(
            self._members_query(group_id).where("userId", user_id).limit(1)
        )
        if not snapshots:
            return None
        return GroupMember.from_snapshot(snapshots[0])

    async def get_group_members(self, group_id: str) -> List[GroupMember]:
        """Get a group's members in join order"""
        try:
            snapshots = await self.store.find(self._members_query(group_id))
            return self._sorted(snapshots)
        except Exception as e:
            logger.error(f"Error getting group members: {e}")
            raise

    async def subscribe_to_group_members(
        self,
        group_id: str,
        callback: Callable[[List[GroupMember]], None]
    ) -> ListenerRegistration:
        """Deliver a group's members now and on every change"""
        def deliver(snapshots):
            return callback(self._sorted(snapshots))

        return await self.store.listen(self._members_query(group_id), deliver)

    async def _add_member(self, group_id: str, user_id: str, user_name: str, role: GroupRole) -> str:
        return await self.store.add(GROUP_MEMBERS, {
            "groupId": group_id,
            "userId": user_id,
            "userName": user_name,
            "role": role,
            "joinedAt": SERVER_TIMESTAMP,
        })

    @staticmethod
    def _members_query(group_id: str) -> Query:
        return Query(GROUP_MEMBERS).where("groupId", group_id)

    @staticmethod
    def _sorted(snapshots) -> List[GroupMember]:
        members = [GroupMember.from_snapshot(snapshot) for snapshot in snapshots]
        members.sort(key=lambda member: member.joined_at)
        return members
