#!/usr/bin/env python3
"""
VidTube session lifecycle — login, refresh, replay, logout.

Shows that each refresh token works exactly once, and that logout ends
the session for good.
Run with: python examples/session_lifecycle.py
"""

import httpx

from _common import BASE, create_client


def refresh(token: str) -> httpx.Response:
    return httpx.post(f"{BASE}/users/refresh-token", json={"refresh_token": token}, timeout=10)


def main():
    client, session = create_client("session")
    first = session["refresh_token"]

    print("\n1. Exchanging the refresh token...")
    resp = refresh(first)
    assert resp.status_code == 200, f"Failed: {resp.text}"
    second = resp.json()["data"]
    print("   → new access + refresh token issued")

    print("\n2. Replaying the old refresh token...")
    resp = refresh(first)
    print(f"   → {resp.status_code} {resp.json()['message']}")

    print("\n3. Logging out with the new access token...")
    resp = client.post(
        "/users/logout", headers={"Authorization": f"Bearer {second['access_token']}"}
    )
    print(f"   → {resp.status_code} {resp.json()['message']}")

    print("\n4. Trying the latest refresh token after logout...")
    resp = refresh(second["refresh_token"])
    print(f"   → {resp.status_code} {resp.json()['message']}")


if __name__ == "__main__":
    main()
