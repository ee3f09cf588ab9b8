"""REST Client — SocialHubClient against the real app over ASGITransport."""

import pytest

from socialhub.client.api_client import SocialHubClient
from socialhub.core.errors import ApiRequestError


@pytest.fixture
def api_for(client):
    def make(user):
        return SocialHubClient("http://test", user.id, http=client)
    return make


async def test_send_and_fetch_round_trip(api_for, users):
    alice_api, bob_api = api_for(users["alice"]), api_for(users["bob"])

    sent = await alice_api.send_message(users["bob"].id, "hello")
    history = await bob_api.get_messages(users["alice"].id)

    assert [m["id"] for m in history] == [sent["id"]]
    assert (await bob_api.get_unread_counts())["notifications"] == 1
    assert (await bob_api.get_conversations())[0]["user"]["id"] == users["alice"].id


async def test_social_actions(api_for, users, bob_post):
    alice_api = api_for(users["alice"])

    await alice_api.like_post(bob_post.id)
    await alice_api.follow(users["bob"].id)
    await alice_api.unfollow(users["bob"].id)

    kinds = [n["type"] for n in await api_for(users["bob"]).get_notifications()]
    assert sorted(kinds) == ["follow", "like"]


async def test_error_status_raises_api_request_error(api_for, users):
    with pytest.raises(ApiRequestError) as exc:
        await api_for(users["alice"]).follow(users["alice"].id)
    assert exc.value.status_code == 400


async def test_mark_reads(api_for, users):
    alice_api, bob_api = api_for(users["alice"]), api_for(users["bob"])
    sent = await alice_api.send_message(users["bob"].id, "read me")

    assert (await bob_api.mark_message_read(sent["id"]))["updated"] is True
    notification = (await bob_api.get_notifications())[0]
    assert (await bob_api.mark_notification_read(notification["id"]))["updated"] is True
    assert await bob_api.get_unread_counts() == {"notifications": 0, "messages": 0}
