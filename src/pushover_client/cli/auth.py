"""CLI: pushover auth login|status|logout"""

from typing import Optional

import click
from rich.console import Console

from pushover_client.errors import PushoverError

console = Console()


def _load_config() -> dict:
    from pushover_client.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from pushover_client.cli.main import _save_config
    _save_config(cfg)


def _make_client(cfg: dict):
    from pushover_client.cli.main import _make_client
    return _make_client(cfg)


def _run(coro):
    from pushover_client.cli.main import _run
    return _run(coro)


@click.group()
def auth():
    """Authentication commands."""


@auth.command("login")
@click.option("--api-url", default=None, help="Pushover API base URL")
def auth_login(api_url: Optional[str]):
    """Log in with email and password."""
    cfg = _load_config()
    if api_url:
        cfg["api_url"] = api_url

    email = click.prompt("Email")
    password = click.prompt("Password", hide_input=True)

    async def _login():
        # Fresh login: do not restore saved credentials.
        client = _make_client({"api_url": cfg["api_url"]} if "api_url" in cfg else {})
        try:
            with console.status("Logging in..."):
                return await client.login(email, password)
        finally:
            await client.close()

    try:
        user_id, secret = _run(_login())
    except PushoverError as e:
        console.print(f"[red]Login failed: {e}[/red]")
        raise SystemExit(1)

    cfg.pop("device_id", None)
    _save_config({**cfg, "user_id": user_id, "secret": secret, "email": email})
    console.print(f"[green]Logged in as {email} (ID: {user_id})[/green]")
    console.print("[dim]Credentials saved to ~/.pushover/config.json[/dim]")


@auth.command("status")
def auth_status():
    """Show current auth status."""
    cfg = _load_config()
    if cfg.get("secret"):
        console.print(f"[green]Logged in[/green] as {cfg.get('email', 'unknown')} (ID: {cfg.get('user_id')})")
    else:
        console.print("[yellow]Not logged in. Run `pushover auth login`.[/yellow]")


@auth.command("logout")
def auth_logout():
    """Clear saved credentials."""
    _save_config({})
    console.print("[green]Logged out.[/green]")
