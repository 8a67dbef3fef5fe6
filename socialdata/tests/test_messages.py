import pytest

from socialdata.exceptions import ValidationError

@pytest.mark.asyncio
async def test_send_and_list_messages(message_service):
    await message_service.send_message("Hello", "user-1", "Ada")
    await message_service.send_message("Hi there", "user-2")

    messages = await message_service.get_messages()

    assert [m.text for m in messages] == ["Hello", "Hi there"]
    assert messages[1].user_name == "Anonymous"

@pytest.mark.asyncio
async def test_blank_message_rejected(message_service):
    with pytest.raises(ValidationError, match="Message text is required"):
        await message_service.send_message("   ", "user-1", "Ada")

    assert await message_service.get_messages() == []

@pytest.mark.asyncio
async def test_subscribe_to_messages(message_service):
    received = []

    unsubscribe = await message_service.subscribe_to_messages(
        lambda messages: received.append([m.text for m in messages])
    )
    await message_service.send_message("Hello", "user-1", "Ada")
    unsubscribe()
    await message_service.send_message("Anyone?", "user-1", "Ada")

    assert received == [[], ["Hello"]]
