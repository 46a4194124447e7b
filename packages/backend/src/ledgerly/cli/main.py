"""Ledgerly CLI — run the server, prepare the database, poke the API.

Usage:
    ledgerly serve                      # Run the API with uvicorn
    ledgerly init-db                    # Create tables from the ORM models
    ledgerly token <user-id>            # Mint a development access token
    ledgerly list bills                 # List a resource kind from a running server
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
import uuid

import click
import httpx

from ledgerly import __version__
from ledgerly.services.resources import ALL_RESOURCES

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:5000"

KINDS = [resource.kind for resource in ALL_RESOURCES]


def _api_url() -> str:
    return os.environ.get("LEDGERLY_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: str) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Ledgerly API."""
    return httpx.AsyncClient(
        base_url=_api_url(),
        headers={"Authorization": f"Bearer {token}"},
        timeout=30.0,
    )


def _print_table(rows: list[dict], columns: list[str]):
    widths = {
        col: max([len(col)] + [len(str(row.get(col, ""))) for row in rows])
        for col in columns
    }
    header = "  ".join(col.ljust(widths[col]) for col in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        click.echo("  ".join(str(row.get(col, "")).ljust(widths[col]) for col in columns))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="ledgerly")
def main():
    """Ledgerly — personal-finance records API."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: LEDGERLY_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: LEDGERLY_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    from ledgerly.config import settings

    uvicorn.run(
        "ledgerly.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create any missing tables. There are no migrations."""
    from ledgerly.db.engine import create_schema, engine

    async def _init():
        try:
            await create_schema()
        finally:
            await engine.dispose()

    asyncio.run(_init())
    click.secho("Database schema is ready", fg="green")


@main.command()
@click.argument("user_id")
@click.option("--minutes", default=None, type=int, help="Lifetime in minutes")
def token(user_id: str, minutes: int | None):
    """Mint an access token for USER_ID (development only)."""
    from ledgerly.auth.jwt import create_access_token

    try:
        uuid.UUID(user_id)
    except ValueError:
        click.secho(f"Error: {user_id!r} is not a UUID", fg="red", err=True)
        sys.exit(1)
    click.echo(create_access_token(user_id, expires_minutes=minutes))


@main.command("list")
@click.argument("kind", type=click.Choice(KINDS))
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def list_kind(kind: str, as_json: bool):
    """List the caller's records of KIND (token from LEDGERLY_TOKEN)."""
    tok = os.environ.get("LEDGERLY_TOKEN")
    if not tok:
        click.secho("Error: set LEDGERLY_TOKEN to an access token", fg="red", err=True)
        sys.exit(1)

    async def _fetch():
        async with _client(tok) as c:
            return await c.get(f"/api/{kind}")

    r = asyncio.run(_fetch())
    if r.status_code != 200:
        message = r.json().get("error", r.text) if r.content else r.reason_phrase
        click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
        sys.exit(1)

    rows = r.json()
    if as_json:
        click.echo(json.dumps(rows, indent=2))
    elif not rows:
        click.echo(f"No {kind}")
    else:
        columns = [col for col in rows[0] if col != "user_id"]
        _print_table(rows, columns)


if __name__ == "__main__":
    main()
