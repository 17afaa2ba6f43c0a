"""rentdesk CLI — run the server and manage accounts from a shell.

Usage:
    rentdesk serve                                   # Run the API with uvicorn
    rentdesk init-db                                 # Create tables (dev / SQLite)
    rentdesk create-account alice99 13800000001      # Prompts for a password
    rentdesk create-account root 13900000000 --admin # Create an administrator
    rentdesk set-status alice99 disabled             # Block logins for an account
    rentdesk set-role alice99 admin                  # Promote / demote
    rentdesk accounts                                # List accounts

Learn: The HTTP API has no route that creates admins or disables
accounts, so operators do it here. Commands talk to the database
directly through the same AccountStore/AccountService the API uses —
passwords go through the same hashing hook.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from contextlib import asynccontextmanager
from typing import Optional

import click
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from rentdesk import __version__
from rentdesk.auth.store import AccountStore
from rentdesk.config import settings
from rentdesk.db.models import Account, AccountRole, AccountStatus, Base
from rentdesk.errors import AppError
from rentdesk.schemas.account import RegisterRequest
from rentdesk.services.account_service import AccountService

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


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


@asynccontextmanager
async def _session(database_url: str):
    """One engine per command; disposed before the command's event loop ends."""
    engine = create_async_engine(database_url)
    try:
        async with async_sessionmaker(engine, expire_on_commit=False)() as db:
            yield db
    finally:
        await engine.dispose()


async def _find(store: AccountStore, identifier: str) -> Account:
    account = await store.find_by_handle_or_phone(identifier)
    if not account:
        _fail(f"No account with handle or phone {identifier!r}")
    return account


def _status_color(status: str) -> str:
    return {"normal": "green", "disabled": "red"}.get(status, "white")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="rentdesk")
@click.option(
    "--database-url",
    envvar="RENTDESK_DATABASE_URL",
    default=None,
    help="Database to manage (default: RENTDESK_DATABASE_URL)",
)
@click.pass_context
def main(ctx: click.Context, database_url: Optional[str]):
    """rentdesk — accounts, sessions and storefront catalogue."""
    ctx.obj = database_url or settings.database_url


@main.command()
@click.option("--host", default=None, help="Bind address (default: RENTDESK_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: RENTDESK_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "rentdesk.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
@click.pass_obj
def init_db(database_url: str):
    """Create all tables directly from the models.

    Production databases should use `alembic upgrade head` instead.
    """
    _run(_init_db_impl(database_url))
    click.secho("Tables created", fg="green")


async def _init_db_impl(database_url: str):
    engine = create_async_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


@main.command("create-account")
@click.argument("handle")
@click.argument("phone")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--admin", is_flag=True, help="Create with role admin")
@click.pass_obj
def create_account(
    database_url: str, handle: str, phone: str, password: str, admin: bool
):
    """Register an account (same validation as POST /api/auth/register)."""
    try:
        body = RegisterRequest(
            handle=handle, phone=phone, password=password, confirm_password=password
        )
    except ValidationError as e:
        _fail(e.errors()[0]["msg"].removeprefix("Value error, "))
    role = AccountRole.ADMIN if admin else AccountRole.USER
    account_id = _run(_create_account_impl(database_url, body, role))
    click.secho(f"Created {role.value} {body.handle} ({account_id})", fg="green")


async def _create_account_impl(
    database_url: str, body: RegisterRequest, role: AccountRole
) -> str:
    async with _session(database_url) as db:
        try:
            account = await AccountService(db).register(body, role=role)
        except AppError as e:
            _fail(e.message)
        return str(account.id)


@main.command("set-status")
@click.argument("identifier")
@click.argument("status", type=click.Choice([s.value for s in AccountStatus]))
@click.pass_obj
def set_status(database_url: str, identifier: str, status: str):
    """Enable or disable an account. Disabled accounts can't log in."""
    _run(_update_impl(database_url, identifier, {"status": status}))
    click.secho(f"{identifier} → {status}", fg=_status_color(status))


@main.command("set-role")
@click.argument("identifier")
@click.argument("role", type=click.Choice([r.value for r in AccountRole]))
@click.pass_obj
def set_role(database_url: str, identifier: str, role: str):
    """Change an account's role. Takes effect on its next login."""
    _run(_update_impl(database_url, identifier, {"role": role}))
    click.echo(f"{identifier} → {role}")


async def _update_impl(database_url: str, identifier: str, changes: dict):
    async with _session(database_url) as db:
        store = AccountStore(db)
        account = await _find(store, identifier)
        await store.update(account, changes)


@main.command()
@click.option("--limit", "-l", default=50, help="Max results")
@click.pass_obj
def accounts(database_url: str, limit: int):
    """List accounts, newest first."""
    rows = _run(_accounts_impl(database_url, limit))
    if not rows:
        click.echo("No accounts found.")
        return
    click.secho(f"Accounts ({len(rows)}):", bold=True)
    for a in rows:
        status_str = click.style(a.status, fg=_status_color(a.status))
        click.echo(f"  {str(a.id)[:8]}  {a.handle:15s}  {a.phone}  {a.role:5s}  {status_str}")


async def _accounts_impl(database_url: str, limit: int) -> list[Account]:
    async with _session(database_url) as db:
        result = await db.execute(
            select(Account).order_by(Account.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
