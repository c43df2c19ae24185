"""CLI: pushover device register|status"""

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


def _get_client(**kwargs):
    from pushover_client.cli.main import _get_client
    return _get_client(**kwargs)


def _run(coro):
    from pushover_client.cli.main import _run
    return _run(coro)


@click.group()
def device():
    """Device registration."""


@device.command("register")
@click.argument("name")
def device_register(name: str):
    """Register this client as a device called NAME (max 25 characters)."""
    cfg = _load_config()
    if cfg.get("device_id"):
        console.print(f"[yellow]Device already registered: {cfg['device_id']}[/yellow]")
        raise SystemExit(1)

    client = _get_client(require_device=False)

    async def _register():
        try:
            with console.status("Registering device..."):
                return await client.register_device(name)
        finally:
            await client.close()

    try:
        device_id = _run(_register())
    except PushoverError as e:
        console.print(f"[red]Registration failed: {e}[/red]")
        raise SystemExit(1)

    _save_config({**cfg, "device_id": device_id, "device_name": name})
    console.print(f"[green]Device {name} registered (ID: {device_id})[/green]")


@device.command("status")
def device_status():
    """Show the registered device."""
    cfg = _load_config()
    if cfg.get("device_id"):
        console.print(f"[green]Registered[/green] as {cfg.get('device_name', 'unknown')} (ID: {cfg['device_id']})")
    else:
        console.print("[yellow]No device registered. Run `pushover device register NAME`.[/yellow]")
