"""VidTube CLI — run the server and poke a running instance.

Usage:
    vidtube serve --reload                       # Run the API with uvicorn
    vidtube init-db                              # Create tables in VIDTUBE_DATABASE_URL
    vidtube health                               # Check a running server
    vidtube login alice -p secret                # Print a token pair
    vidtube whoami                               # Show the account behind VIDTUBE_TOKEN
    vidtube videos --query cats                  # Browse published videos
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("VIDTUBE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the VidTube backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _token_from_env(token: Optional[str]) -> str:
    """Resolve the access token from flag or VIDTUBE_TOKEN env var."""
    tok = token or os.environ.get("VIDTUBE_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set VIDTUBE_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _unwrap(r: httpx.Response):
    """Return the envelope's data, or exit with its message."""
    body = r.json()
    if r.is_error:
        click.secho(f"Error {r.status_code}: {body.get('message')}", fg="red", err=True)
        sys.exit(1)
    return body["data"]


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "-"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="vidtube")
def main():
    """VidTube — video sharing platform backend."""


# ---------------------------------------------------------------------------
# Server management
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: VIDTUBE_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: VIDTUBE_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from vidtube.config import settings

    uvicorn.run(
        "vidtube.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db_cmd():
    """Create all tables (idempotent)."""
    from vidtube.db.engine import engine, init_db

    async def _init():
        try:
            await init_db()
        finally:
            await engine.dispose()

    _run(_init())
    click.secho("Tables created.", fg="green")


# ---------------------------------------------------------------------------
# Remote commands
# ---------------------------------------------------------------------------


@main.command()
def health():
    """Check that a running server and its database are reachable."""
    _run(_health_impl())


async def _health_impl():
    async with _client() as c:
        data = _unwrap(await c.get("/api/v1/health"))
    color = "green" if data["status"] == "healthy" else "yellow"
    click.secho(f"{data['status']}  (v{data['version']})", fg=color)
    click.echo(f"  database: {data['database']}")


@main.command()
@click.argument("identifier")
@click.option("--password", "-p", prompt=True, hide_input=True)
def login(identifier: str, password: str):
    """Log in with a username or email and print the token pair."""
    _run(_login_impl(identifier, password))


async def _login_impl(identifier: str, password: str):
    field = "email" if "@" in identifier else "username"
    async with _client() as c:
        data = _unwrap(
            await c.post(
                "/api/v1/users/login", json={field: identifier, "password": password}
            )
        )
    click.secho(f"Logged in as {data['user']['username']}", fg="green")
    click.echo(f"export VIDTUBE_TOKEN={data['access_token']}")
    click.echo(f"refresh token: {data['refresh_token']}")


@main.command()
@click.option("--token", "-t", help="Access token (or set VIDTUBE_TOKEN)")
def whoami(token: Optional[str]):
    """Show the account the access token belongs to."""
    _run(_whoami_impl(token))


async def _whoami_impl(token: Optional[str]):
    async with _client(_token_from_env(token)) as c:
        data = _unwrap(await c.get("/api/v1/users/current-user"))
    click.echo(_pretty_json(data))


@main.command()
@click.option("--token", "-t", help="Access token (or set VIDTUBE_TOKEN)")
@click.option("--query", "-q", help="Search titles and descriptions")
@click.option("--page", default=1, help="Page number")
@click.option("--limit", "-l", default=20, help="Videos per page")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice(["created_at", "title", "views", "duration"]),
    default="created_at",
)
def videos(token: Optional[str], query: Optional[str], page: int, limit: int, sort_by: str):
    """List videos visible to you."""
    _run(_videos_impl(token, query, page, limit, sort_by))


async def _videos_impl(
    token: Optional[str], query: Optional[str], page: int, limit: int, sort_by: str
):
    params = {"page": page, "limit": limit, "sort_by": sort_by}
    if query:
        params["query"] = query
    async with _client(_token_from_env(token)) as c:
        data = _unwrap(await c.get("/api/v1/videos", params=params))

    rows = [
        {**v, "owner": v["owner"]["username"], "id": v["id"][:8]}
        for v in data["videos"]
    ]
    if not rows:
        click.echo("No videos found.")
        return
    _print_table(
        rows,
        [
            ("ID", "id", 8),
            ("Title", "title", 40),
            ("Owner", "owner", 16),
            ("Views", "views", 7),
            ("Length", "duration", 8),
        ],
    )
    click.echo(f"\npage {data['page']}/{data['total_pages']}  ({data['total']} total)")


if __name__ == "__main__":
    main()
