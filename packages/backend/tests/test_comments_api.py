"""Comments — adding, paging, and owner-only edits.

Learn: A stranger editing or deleting someone else's comment gets the
same 404 as for a comment that doesn't exist, and the comment survives.
"""

import uuid

import pytest


@pytest.mark.asyncio
async def test_add_and_list_comments(client, signup, upload_video):
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"])

    r = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "  Great video!  "},
        headers=bob["headers"],
    )
    assert r.status_code == 201
    comment = r.json()["data"]
    assert comment["content"] == "Great video!"
    assert comment["owner"]["username"] == "bob"
    assert comment["video_id"] == video["id"]

    r = await client.get(
        f"/api/v1/comments/video/{video['id']}", headers=alice["headers"]
    )
    assert r.status_code == 200
    page = r.json()["data"]
    assert page["total_comments"] == 1
    assert page["current_page"] == 1
    assert page["total_pages"] == 1
    assert page["comments"][0]["id"] == comment["id"]


@pytest.mark.asyncio
async def test_comments_pagination(client, signup, upload_video):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    for i in range(3):
        await client.post(
            f"/api/v1/comments/video/{video['id']}",
            json={"content": f"comment {i}"},
            headers=alice["headers"],
        )

    r = await client.get(
        f"/api/v1/comments/video/{video['id']}",
        params={"page": 2, "limit": 2},
        headers=alice["headers"],
    )
    page = r.json()["data"]
    assert page["total_comments"] == 3
    assert page["total_pages"] == 2
    assert len(page["comments"]) == 1


@pytest.mark.asyncio
async def test_comment_on_missing_video(client, signup):
    alice = await signup("alice")
    r = await client.post(
        f"/api/v1/comments/video/{uuid.uuid4()}",
        json={"content": "hello?"},
        headers=alice["headers"],
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Video not found"


@pytest.mark.asyncio
async def test_empty_comment_rejected(client, signup, upload_video):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    r = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "   "},
        headers=alice["headers"],
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_comment_by_owner(client, signup, upload_video):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    created = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "first draft"},
        headers=alice["headers"],
    )
    comment_id = created.json()["data"]["id"]

    r = await client.patch(
        f"/api/v1/comments/{comment_id}",
        json={"content": "edited"},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    assert r.json()["data"]["content"] == "edited"


@pytest.mark.asyncio
async def test_non_owner_cannot_edit_or_delete_comment(client, signup, upload_video):
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"])
    created = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "mine"},
        headers=alice["headers"],
    )
    comment_id = created.json()["data"]["id"]

    r = await client.patch(
        f"/api/v1/comments/{comment_id}",
        json={"content": "not anymore"},
        headers=bob["headers"],
    )
    assert r.status_code == 404

    r = await client.delete(f"/api/v1/comments/{comment_id}", headers=bob["headers"])
    assert r.status_code == 404

    r = await client.get(f"/api/v1/comments/video/{video['id']}", headers=alice["headers"])
    comments = r.json()["data"]["comments"]
    assert [(c["id"], c["content"]) for c in comments] == [(comment_id, "mine")]


@pytest.mark.asyncio
async def test_delete_comment_by_owner(client, signup, upload_video):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    created = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "bye"},
        headers=alice["headers"],
    )
    comment_id = created.json()["data"]["id"]

    r = await client.delete(f"/api/v1/comments/{comment_id}", headers=alice["headers"])
    assert r.status_code == 200

    r = await client.delete(f"/api/v1/comments/{comment_id}", headers=alice["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_page_size_is_bounded(client, signup, upload_video):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    r = await client.get(
        f"/api/v1/comments/video/{video['id']}",
        params={"limit": 101},
        headers=alice["headers"],
    )
    assert r.status_code == 400

    r = await client.get(
        f"/api/v1/comments/video/{video['id']}",
        params={"page": 0},
        headers=alice["headers"],
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_non_owner_edit_looks_like_missing_comment(client, signup, upload_video):
    """A stranger's edit gets the same response as an edit of a missing id."""
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"])
    created = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "mine"},
        headers=alice["headers"],
    )
    comment_id = created.json()["data"]["id"]

    foreign = await client.patch(
        f"/api/v1/comments/{comment_id}",
        json={"content": "hijacked"},
        headers=bob["headers"],
    )
    missing = await client.patch(
        f"/api/v1/comments/{uuid.uuid4()}",
        json={"content": "hijacked"},
        headers=bob["headers"],
    )
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()


@pytest.mark.asyncio
async def test_unpublished_video_hidden_from_other_commenters(
    client, signup, upload_video
):
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"])
    await client.patch(
        f"/api/v1/videos/{video['id']}/toggle-publish", headers=alice["headers"]
    )

    r = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "sneaky"},
        headers=bob["headers"],
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Video not found"

    r = await client.get(f"/api/v1/comments/video/{video['id']}", headers=bob["headers"])
    assert r.status_code == 404

    # The owner can still discuss their draft
    r = await client.post(
        f"/api/v1/comments/video/{video['id']}",
        json={"content": "note to self"},
        headers=alice["headers"],
    )
    assert r.status_code == 201
