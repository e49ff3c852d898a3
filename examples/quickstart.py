#!/usr/bin/env python3
"""
VidTube Quickstart — a channel's life in one script.

Registers two users → publishes a video → watches, comments, likes →
subscribes → builds a playlist.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

import uuid

from _common import TINY_PNG, create_client


def main():
    creator, creator_session = create_client("creator")
    viewer, viewer_session = create_client("viewer")
    creator_id = creator_session["user"]["id"]

    # ── Publish ───────────────────────────────────────────────────
    print("\n1. Publishing a video...")
    resp = creator.post(
        "/videos",
        data={"title": f"Demo video {uuid.uuid4().hex[:6]}", "description": "Hello, VidTube"},
        files={
            # Any bytes will do for the local media host
            "video_file": ("demo.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
            "thumbnail": ("thumb.png", TINY_PNG, "image/png"),
        },
    )
    assert resp.status_code == 201, f"Failed: {resp.text}"
    video = resp.json()["data"]
    print(f"   Video: {video['title']} ({video['id'][:8]}...)")

    # ── Watch ─────────────────────────────────────────────────────
    print("\n2. Viewer watches it...")
    resp = viewer.post(f"/videos/{video['id']}/watch")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Views: {resp.json()['data']['views']}")

    # ── Comment + like ────────────────────────────────────────────
    print("\n3. Viewer comments and likes...")
    resp = viewer.post(f"/comments/video/{video['id']}", json={"content": "Great stuff!"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    comment = resp.json()["data"]
    resp = viewer.post(f"/likes/video/{video['id']}")
    print(f"   Comment: {comment['content']!r}  Like: {resp.json()['data']['action']}")

    # ── Ownership ─────────────────────────────────────────────────
    print("\n4. Creator tries to edit the viewer's comment...")
    resp = creator.patch(f"/comments/{comment['id']}", json={"content": "edited by someone else"})
    print(f"   → {resp.status_code} {resp.json()['message']}")

    # ── Subscribe ─────────────────────────────────────────────────
    print("\n5. Viewer subscribes to the creator...")
    resp = viewer.post(f"/subscriptions/channel/{creator_id}")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    resp = viewer.get(f"/users/c/{creator_session['user']['username']}")
    profile = resp.json()["data"]
    print(f"   {profile['username']}: {profile['subscribers_count']} subscriber(s)")

    # ── Playlist ──────────────────────────────────────────────────
    print("\n6. Viewer builds a playlist...")
    resp = viewer.post("/playlists", json={"name": "Watch again", "description": "favourites"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    playlist = resp.json()["data"]
    resp = viewer.post(f"/playlists/{playlist['id']}/videos/{video['id']}")
    print(f"   Playlist '{playlist['name']}' has {len(resp.json()['data']['videos'])} video(s)")

    print("\n✓ Done.")


if __name__ == "__main__":
    main()
