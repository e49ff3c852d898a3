"""
Shared helpers for VidTube examples.

Handles the health check and account setup (register + login) so each
example can focus on its specific workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api/v1"
PASSWORD = "demo-password-123"

# Smallest valid PNG, good enough for avatars and thumbnails
TINY_PNG = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


def check_backend() -> None:
    """Verify the backend is reachable and healthy."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  vidtube serve --reload")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()["data"]
    print("Backend health:")
    print(f"  Database: {health['database']}")

    if health["status"] != "healthy":
        print("\nERROR: Database is not reachable. Check VIDTUBE_DATABASE_URL.")
        sys.exit(1)


def register(prefix: str = "demo") -> dict:
    """Register a fresh user with a unique username so examples are rerunnable."""
    run_id = uuid.uuid4().hex[:8]
    username = f"{prefix}{run_id}"
    resp = httpx.post(
        f"{BASE}/users/register",
        data={
            "full_name": f"Demo User {run_id}",
            "email": f"{username}@example.com",
            "username": username,
            "password": PASSWORD,
        },
        files={"avatar": ("avatar.png", TINY_PNG, "image/png")},
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)
    return resp.json()["data"]


def login(username: str) -> dict:
    """Log in and return the token pair (plus the user)."""
    resp = httpx.post(
        f"{BASE}/users/login",
        json={"username": username, "password": PASSWORD},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Login failed: {resp.status_code} {resp.text}")
        sys.exit(1)
    return resp.json()["data"]


def create_client(prefix: str = "demo") -> tuple[httpx.Client, dict]:
    """Check backend, register + login, and return an authed client and the login result."""
    check_backend()
    user = register(prefix)
    session = login(user["username"])
    print(f"  User:     {user['username']} ({user['id'][:8]}...)")
    client = httpx.Client(
        base_url=BASE,
        timeout=30,
        headers={"Authorization": f"Bearer {session['access_token']}"},
    )
    return client, session
