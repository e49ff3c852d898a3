"""Videos — publishing, visibility, owner-only edits, watching.

Learn: Non-owners get 404 on edit/delete, the same as for a missing
video, and the video is left untouched. Publishing that fails half-way
leaves no media behind.
"""

import dataclasses
import uuid

import pytest

from conftest import MP4_BYTES, PNG_BYTES
from vidtube.db.models import Video
from vidtube.media.host import IMAGE, VIDEO, LocalMediaHost, MediaUploadError, get_media_host
from vidtube.main import app
from vidtube.services.video_service import format_duration


class ThumbnailFailsHost(LocalMediaHost):
    """Stores videos fine, fails every image upload."""

    async def upload(self, local_path, resource_type="auto"):
        if resource_type == IMAGE:
            raise MediaUploadError("image storage is down")
        return await super().upload(local_path, resource_type)


class TimedHost(LocalMediaHost):
    """Reports a fixed duration for each uploaded video, in order."""

    def __init__(self, root, base_url, durations):
        super().__init__(root, base_url)
        self.durations = list(durations)

    async def upload(self, local_path, resource_type="auto"):
        asset = await super().upload(local_path, resource_type)
        if resource_type == VIDEO:
            asset = dataclasses.replace(asset, duration=self.durations.pop(0))
        return asset


class TitleTakenMidUploadHost(LocalMediaHost):
    """Another publisher claims the title while the first upload is running."""

    def __init__(self, root, base_url, session_factory, owner_id, title):
        super().__init__(root, base_url)
        self.session_factory = session_factory
        self.owner_id = owner_id
        self.title = title
        self.claimed = False

    async def upload(self, local_path, resource_type="auto"):
        asset = await super().upload(local_path, resource_type)
        if not self.claimed:
            self.claimed = True
            async with self.session_factory() as session:
                session.add(
                    Video(
                        owner_id=self.owner_id,
                        title=self.title,
                        description="got there first",
                        video_url="/elsewhere/v.mp4",
                        video_public_id="elsewhere/v.mp4",
                        thumbnail_url="/elsewhere/t.png",
                        thumbnail_public_id="elsewhere/t.png",
                    )
                )
                await session.commit()
        return asset


class DeleteFailsHost(LocalMediaHost):
    """Stores files, but cannot delete them."""

    async def delete(self, public_id, resource_type=IMAGE):
        raise OSError("read-only file system")


def _files_under(root):
    return [p for p in root.rglob("*") if p.is_file()] if root.exists() else []


# ═══════════════════════════════════════════════════════════
# Publish
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_publish_video(client, signup, upload_video, media, temp_dir):
    alice = await signup("alice")
    video = await upload_video(alice["headers"], title="Cats", description="All about cats")

    assert video["title"] == "Cats"
    assert video["owner"]["username"] == "alice"
    assert video["is_published"] is True
    assert video["views"] == 0
    assert video["duration"] == "0:00"
    assert video["video_url"].startswith("/media/video/")
    assert video["thumbnail_url"].startswith("/media/image/")
    assert len(_files_under(media.root / "video")) == 1
    assert list(temp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_publish_requires_files(client, signup):
    alice = await signup("alice")
    r = await client.post(
        "/api/v1/videos",
        data={"title": "No files", "description": "nothing"},
        headers=alice["headers"],
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Video file and thumbnail file are required"


@pytest.mark.asyncio
async def test_publish_requires_title(client, signup):
    alice = await signup("alice")
    r = await client.post(
        "/api/v1/videos",
        data={"title": "", "description": "nothing"},
        files={
            "video_file": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
        },
        headers=alice["headers"],
    )
    assert r.status_code == 400
    assert r.json()["message"] == "All fields are required"


@pytest.mark.asyncio
async def test_publish_duplicate_title(client, signup, upload_video):
    alice = await signup("alice")
    await upload_video(alice["headers"], title="Same")
    r = await client.post(
        "/api/v1/videos",
        data={"title": "Same", "description": "again"},
        files={
            "video_file": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
        },
        headers=alice["headers"],
    )
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_failed_thumbnail_upload_discards_video_asset(
    client, signup, tmp_path, temp_dir
):
    """If the second upload fails, the first asset is deleted and nothing is saved."""
    alice = await signup("alice")
    failing = ThumbnailFailsHost(str(tmp_path / "failing-media"), "/media")
    app.dependency_overrides[get_media_host] = lambda: failing

    r = await client.post(
        "/api/v1/videos",
        data={"title": "Doomed", "description": "won't make it"},
        files={
            "video_file": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
        },
        headers=alice["headers"],
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Thumbnail upload failed"
    assert _files_under(failing.root) == []
    assert list(temp_dir.iterdir()) == []

    r = await client.get("/api/v1/videos", headers=alice["headers"])
    assert r.json()["data"]["total"] == 0


@pytest.mark.asyncio
async def test_title_claimed_during_upload_discards_both_assets(
    client, signup, session_factory, tmp_path, temp_dir
):
    """The insert fails after both uploads succeeded; neither asset is kept."""
    alice = await signup("alice")
    bob = await signup("bob")
    racing = TitleTakenMidUploadHost(
        str(tmp_path / "racing-media"),
        "/media",
        session_factory,
        uuid.UUID(bob["user"]["id"]),
        "Contested",
    )
    app.dependency_overrides[get_media_host] = lambda: racing

    r = await client.post(
        "/api/v1/videos",
        data={"title": "Contested", "description": "mine"},
        files={
            "video_file": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("thumb.png", PNG_BYTES, "image/png"),
        },
        headers=alice["headers"],
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Video with this title already exists"
    assert _files_under(racing.root) == []
    assert list(temp_dir.iterdir()) == []

    r = await client.get("/api/v1/videos", headers=alice["headers"])
    videos = r.json()["data"]["videos"]
    assert [v["owner"]["username"] for v in videos] == ["bob"]


# ═══════════════════════════════════════════════════════════
# Listing and reading
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_videos_empty_is_ok(client, signup):
    alice = await signup("alice")
    r = await client.get("/api/v1/videos", headers=alice["headers"])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["videos"] == []
    assert data["total"] == 0
    assert data["total_pages"] == 0


@pytest.mark.asyncio
async def test_list_videos_search_and_paginate(client, signup, upload_video):
    alice = await signup("alice")
    for title in ("Cooking pasta", "Cooking rice", "Fixing bikes"):
        await upload_video(alice["headers"], title=title)

    r = await client.get(
        "/api/v1/videos",
        params={"query": "cooking", "limit": 1, "sort_by": "title", "sort_type": "asc"},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["total"] == 2
    assert data["total_pages"] == 2
    assert [v["title"] for v in data["videos"]] == ["Cooking pasta"]

    r = await client.get(
        "/api/v1/videos",
        params={"query": "cooking", "limit": 1, "page": 2, "sort_by": "title", "sort_type": "asc"},
        headers=alice["headers"],
    )
    assert [v["title"] for v in r.json()["data"]["videos"]] == ["Cooking rice"]


@pytest.mark.asyncio
async def test_list_videos_filter_by_owner(client, signup, upload_video):
    alice = await signup("alice")
    bob = await signup("bob")
    await upload_video(alice["headers"], title="Alice's")
    await upload_video(bob["headers"], title="Bob's")

    r = await client.get(
        "/api/v1/videos",
        params={"user_id": bob["user"]["id"]},
        headers=alice["headers"],
    )
    assert [v["title"] for v in r.json()["data"]["videos"]] == ["Bob's"]


@pytest.mark.asyncio
async def test_list_videos_rejects_bad_sort(client, signup):
    alice = await signup("alice")
    r = await client.get(
        "/api/v1/videos", params={"sort_by": "password_hash"}, headers=alice["headers"]
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_list_videos_page_out_of_range(client, signup):
    alice = await signup("alice")
    r = await client.get(
        "/api/v1/videos", params={"page": 10**20}, headers=alice["headers"]
    )
    assert r.status_code == 400

    r = await client.get(
        "/api/v1/videos", params={"page": 1_000_000}, headers=alice["headers"]
    )
    assert r.status_code == 200
    assert r.json()["data"]["videos"] == []


@pytest.mark.asyncio
async def test_sort_by_duration_is_numeric(client, signup, upload_video, tmp_path):
    alice = await signup("alice")
    app.dependency_overrides[get_media_host] = lambda: TimedHost(
        str(tmp_path / "timed-media"), "/media", [600, 599]
    )
    await upload_video(alice["headers"], title="Ten minutes")
    await upload_video(alice["headers"], title="Just under")

    r = await client.get(
        "/api/v1/videos",
        params={"sort_by": "duration", "sort_type": "asc"},
        headers=alice["headers"],
    )
    videos = r.json()["data"]["videos"]
    assert [(v["title"], v["duration"]) for v in videos] == [
        ("Just under", "9:59"),
        ("Ten minutes", "10:00"),
    ]


@pytest.mark.asyncio
async def test_get_video_not_found(client, signup):
    alice = await signup("alice")
    r = await client.get(f"/api/v1/videos/{uuid.uuid4()}", headers=alice["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_unpublished_video_only_visible_to_owner(client, signup, upload_video):
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"])

    r = await client.patch(
        f"/api/v1/videos/{video['id']}/toggle-publish", headers=alice["headers"]
    )
    assert r.status_code == 200
    assert r.json()["data"]["is_published"] is False

    assert (await client.get(f"/api/v1/videos/{video['id']}", headers=bob["headers"])).status_code == 404
    assert (await client.get(f"/api/v1/videos/{video['id']}", headers=alice["headers"])).status_code == 200

    listing = await client.get("/api/v1/videos", headers=bob["headers"])
    assert listing.json()["data"]["total"] == 0


# ═══════════════════════════════════════════════════════════
# Owner-only mutations
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_video_by_owner(client, signup, upload_video):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])

    r = await client.patch(
        f"/api/v1/videos/{video['id']}",
        data={"title": "Renamed", "description": "New words"},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["title"] == "Renamed"
    assert data["description"] == "New words"


@pytest.mark.asyncio
async def test_update_video_thumbnail_replaces_old_asset(client, signup, upload_video, media):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    images_before = set(_files_under(media.root / "image"))

    r = await client.patch(
        f"/api/v1/videos/{video['id']}",
        files={"thumbnail": ("new.png", PNG_BYTES, "image/png")},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    assert r.json()["data"]["thumbnail_url"] != video["thumbnail_url"]

    images_after = set(_files_under(media.root / "image"))
    assert len(images_after) == len(images_before)
    assert images_after != images_before


@pytest.mark.asyncio
async def test_update_video_nothing_to_change(client, signup, upload_video):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    r = await client.patch(f"/api/v1/videos/{video['id']}", headers=alice["headers"])
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_video_by_non_owner_is_404(client, signup, upload_video):
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"], title="Original")

    r = await client.patch(
        f"/api/v1/videos/{video['id']}",
        data={"title": "Hijacked"},
        headers=bob["headers"],
    )
    assert r.status_code == 404

    r = await client.get(f"/api/v1/videos/{video['id']}", headers=alice["headers"])
    assert r.json()["data"]["title"] == "Original"


@pytest.mark.asyncio
async def test_toggle_publish_by_non_owner_is_404(client, signup, upload_video):
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"])
    r = await client.patch(
        f"/api/v1/videos/{video['id']}/toggle-publish", headers=bob["headers"]
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_video_removes_media(client, signup, upload_video, media):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    assert len(_files_under(media.root / "video")) == 1

    r = await client.delete(f"/api/v1/videos/{video['id']}", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["id"] == video["id"]
    assert _files_under(media.root / "video") == []

    r = await client.get(f"/api/v1/videos/{video['id']}", headers=alice["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_video_by_non_owner_is_404(client, signup, upload_video, media):
    alice = await signup("alice")
    bob = await signup("bob")
    video = await upload_video(alice["headers"])

    r = await client.delete(f"/api/v1/videos/{video['id']}", headers=bob["headers"])
    assert r.status_code == 404
    assert len(_files_under(media.root / "video")) == 1

    r = await client.get(f"/api/v1/videos/{video['id']}", headers=alice["headers"])
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_delete_video_succeeds_when_media_cleanup_fails(
    client, signup, upload_video, media
):
    alice = await signup("alice")
    video = await upload_video(alice["headers"])
    app.dependency_overrides[get_media_host] = lambda: DeleteFailsHost(
        str(media.root), "/media"
    )

    r = await client.delete(f"/api/v1/videos/{video['id']}", headers=alice["headers"])
    assert r.status_code == 200

    r = await client.get(f"/api/v1/videos/{video['id']}", headers=alice["headers"])
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Watching
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_watch_counts_views_and_records_history(client, signup, upload_video):
    alice = await signup("alice")
    bob = await signup("bob")
    first = await upload_video(alice["headers"], title="First")
    second = await upload_video(alice["headers"], title="Second")

    r = await client.post(f"/api/v1/videos/{first['id']}/watch", headers=bob["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["views"] == 1
    await client.post(f"/api/v1/videos/{second['id']}/watch", headers=bob["headers"])
    r = await client.post(f"/api/v1/videos/{first['id']}/watch", headers=bob["headers"])
    assert r.json()["data"]["views"] == 2

    r = await client.get("/api/v1/users/history", headers=bob["headers"])
    assert r.status_code == 200
    history = r.json()["data"]
    # One entry per video, most recently watched first
    assert [v["title"] for v in history] == ["First", "Second"]
    assert history[0]["owner"]["username"] == "alice"


@pytest.mark.asyncio
async def test_watch_missing_video(client, signup):
    alice = await signup("alice")
    r = await client.post(f"/api/v1/videos/{uuid.uuid4()}/watch", headers=alice["headers"])
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "seconds, expected",
    [(None, "0:00"), (0, "0:00"), (59.6, "1:00"), (125, "2:05"), (3725, "1:02:05")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
