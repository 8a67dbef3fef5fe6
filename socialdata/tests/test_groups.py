import pytest

from socialdata.exceptions import ConflictError, NotFoundError, ValidationError
from socialdata.schemas.group_schema import GroupCreate, GroupUpdate

def readers_club(**overrides):
    data = {
        "name": "Readers Club",
        "description": "A club for readers",
        "created_by": "U",
        "creator_name": "U",
        "is_private": False,
    }
    data.update(overrides)
    return GroupCreate(**data)

@pytest.fixture
async def test_group(group_service):
    return await group_service.create_group(readers_club())

@pytest.mark.asyncio
async def test_short_group_name_rejected(group_service):
    with pytest.raises(ValidationError) as exc_info:
        await group_service.create_group(readers_club(name="AB"))

    assert "at least 3 characters" in str(exc_info.value)
    assert await group_service.get_groups() == []

@pytest.mark.asyncio
async def test_create_group_enrolls_creator_as_admin(group_service, test_group):
    group = await group_service.get_group(test_group)
    members = await group_service.get_group_members(test_group)

    assert group.name == "Readers Club"
    assert group.member_count == 1
    assert group.is_private is False
    assert len(members) == 1
    assert members[0].user_id == "U"
    assert members[0].role == "admin"

@pytest.mark.asyncio
async def test_join_and_leave_group(group_service, test_group):
    await group_service.join_group(test_group, "user-2", "Two")

    member = await group_service.get_group_member(test_group, "user-2")
    assert member.role == "member"
    assert (await group_service.get_group(test_group)).member_count == 2

    await group_service.leave_group(test_group, "user-2")

    assert await group_service.get_group_member(test_group, "user-2") is None
    assert (await group_service.get_group(test_group)).member_count == 1

@pytest.mark.asyncio
async def test_join_group_twice_conflicts(group_service, test_group):
    with pytest.raises(ConflictError, match="Already a member of this group"):
        await group_service.join_group(test_group, "U", "U")

    assert (await group_service.get_group(test_group)).member_count == 1

@pytest.mark.asyncio
async def test_leave_group_when_not_member(group_service, test_group):
    with pytest.raises(NotFoundError, match="Not a member of this group"):
        await group_service.leave_group(test_group, "stranger")

@pytest.mark.asyncio
async def test_update_group(group_service, test_group):
    await group_service.update_group(test_group, GroupUpdate(is_private=True))

    group = await group_service.get_group(test_group)
    assert group.is_private is True
    assert group.name == "Readers Club"

@pytest.mark.asyncio
async def test_get_groups_newest_first(group_service, test_group):
    second = await group_service.create_group(readers_club(name="Writers Circle"))

    groups = await group_service.get_groups()

    assert [group.id for group in groups] == [second, test_group]
