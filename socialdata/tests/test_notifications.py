import pytest

from socialdata.schemas.notification_schema import NotificationCreate

@pytest.mark.asyncio
async def test_notify_uses_templates(notification_service):
    await notification_service.notify("owner", "like", "Ada", related_id="post-1")
    await notification_service.notify("owner", "group_invite", "Ada", target="Readers Club")

    notifications = await notification_service.get_user_notifications("owner")

    assert [n.message for n in notifications] == [
        "Ada invited you to join Readers Club",
        "Ada liked your post",
    ]
    assert notifications[1].title == "New Like"
    assert notifications[1].related_id == "post-1"
    assert notifications[1].is_read is False

@pytest.mark.asyncio
async def test_system_notification(notification_service):
    await notification_service.notify("owner", "system", "", target="Maintenance tonight")

    notifications = await notification_service.get_user_notifications("owner")
    assert notifications[0].message == "Maintenance tonight"

@pytest.mark.asyncio
async def test_read_flags(notification_service):
    first = await notification_service.create_notification(NotificationCreate(
        user_id="owner", type="comment", title="New Comment", message="Bo commented on your post"
    ))
    await notification_service.notify("owner", "follow", "Cy")
    await notification_service.notify("someone-else", "follow", "Cy")

    assert await notification_service.get_unread_count("owner") == 2

    await notification_service.mark_notification_as_read(first)
    assert await notification_service.get_unread_count("owner") == 1

    assert await notification_service.mark_all_as_read("owner") == 1
    assert await notification_service.get_unread_count("owner") == 0
    assert await notification_service.get_unread_count("someone-else") == 1

@pytest.mark.asyncio
async def test_notifications_limit(notification_service):
    for _ in range(3):
        await notification_service.notify("owner", "like", "Ada")

    assert len(await notification_service.get_user_notifications("owner", limit=2)) == 2
