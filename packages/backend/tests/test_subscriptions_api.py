"""Subscriptions and channel profiles."""

import uuid

import pytest


@pytest.mark.asyncio
async def test_cannot_subscribe_to_self(client, signup):
    alice = await signup("alice")
    r = await client.post(
        f"/api/v1/subscriptions/channel/{alice['user']['id']}", headers=alice["headers"]
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_subscribe_to_missing_channel(client, signup):
    alice = await signup("alice")
    r = await client.post(
        f"/api/v1/subscriptions/channel/{uuid.uuid4()}", headers=alice["headers"]
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_toggle_subscription(client, signup):
    alice = await signup("alice")
    bob = await signup("bob")
    url = f"/api/v1/subscriptions/channel/{alice['user']['id']}"

    r = await client.post(url, headers=bob["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["subscribed"] is True

    r = await client.post(url, headers=bob["headers"])
    assert r.json()["data"]["subscribed"] is False


@pytest.mark.asyncio
async def test_subscriber_and_channel_lists(client, signup):
    alice = await signup("alice")
    bob = await signup("bob")
    carol = await signup("carol")
    for fan in (bob, carol):
        await client.post(
            f"/api/v1/subscriptions/channel/{alice['user']['id']}", headers=fan["headers"]
        )

    r = await client.get(
        f"/api/v1/subscriptions/channel/{alice['user']['id']}/subscribers",
        headers=alice["headers"],
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["total_subscribers"] == 2
    assert {s["subscriber"]["username"] for s in data["subscribers"]} == {"bob", "carol"}

    r = await client.get(
        f"/api/v1/subscriptions/subscriber/{bob['user']['id']}/channels",
        headers=bob["headers"],
    )
    data = r.json()["data"]
    assert data["total_subscribed"] == 1
    assert data["channels"][0]["channel"]["username"] == "alice"
    assert data["channels"][0]["total_subscribers"] == 2


@pytest.mark.asyncio
async def test_channel_profile(client, signup):
    alice = await signup("alice")
    bob = await signup("bob")
    await client.post(
        f"/api/v1/subscriptions/channel/{alice['user']['id']}", headers=bob["headers"]
    )

    r = await client.get("/api/v1/users/c/Alice", headers=bob["headers"])
    assert r.status_code == 200
    profile = r.json()["data"]
    assert profile["username"] == "alice"
    assert profile["subscribers_count"] == 1
    assert profile["channels_subscribed_to_count"] == 0
    assert profile["is_subscribed"] is True

    r = await client.get("/api/v1/users/c/bob", headers=alice["headers"])
    profile = r.json()["data"]
    assert profile["channels_subscribed_to_count"] == 1
    assert profile["is_subscribed"] is False


@pytest.mark.asyncio
async def test_channel_profile_missing(client, signup):
    alice = await signup("alice")
    r = await client.get("/api/v1/users/c/ghost", headers=alice["headers"])
    assert r.status_code == 404
    assert r.json()["message"] == "Channel does not exist"
