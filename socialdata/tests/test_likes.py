import pytest

@pytest.mark.asyncio
async def test_toggle_like_twice_restores_count(post_service, like_service, test_post):
    """Like then unlike leaves the count where it started"""
    before = (await post_service.get_post(test_post)).likes_count

    assert await like_service.toggle_like(test_post, "user-2", "Other") is True
    assert (await post_service.get_post(test_post)).likes_count == before + 1
    assert await like_service.has_user_liked(test_post, "user-2") is True

    assert await like_service.toggle_like(test_post, "user-2", "Other") is False
    assert (await post_service.get_post(test_post)).likes_count == before
    assert await like_service.has_user_liked(test_post, "user-2") is False

@pytest.mark.asyncio
async def test_likes_from_several_users(post_service, like_service, test_post):
    await like_service.toggle_like(test_post, "user-2", "Two")
    await like_service.toggle_like(test_post, "user-3", "Three")

    likes = await like_service.get_post_likes(test_post)

    assert [like.user_id for like in likes] == ["user-2", "user-3"]
    assert (await post_service.get_post(test_post)).likes_count == 2

@pytest.mark.asyncio
async def test_get_user_likes_returns_post_ids(like_service, test_post):
    await like_service.toggle_like(test_post, "user-2", "Two")
    await like_service.toggle_like("another-post", "user-2", "Two")
    await like_service.toggle_like(test_post, "user-3", "Three")

    assert await like_service.get_user_likes("user-2") == [test_post, "another-post"]
    assert await like_service.get_user_likes("nobody") == []
