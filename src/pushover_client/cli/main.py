"""
Pushover CLI — `pushover` command.

Commands:
  pushover auth login            Log in with email and password
  pushover device register NAME  Register this client as a device
  pushover messages list         Show (and optionally delete) pending messages
  pushover listen                Stream notifications as they arrive
"""

import asyncio
import json
import logging
from pathlib import Path

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install pushover-client[cli]")

from pushover_client.client import AsyncPushoverClient
from pushover_client.transport.http import DEFAULT_API_URL

console = Console()
CONFIG_FILE = Path.home() / ".pushover" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))
    CONFIG_FILE.chmod(0o600)


def _make_client(cfg: dict, **kwargs) -> AsyncPushoverClient:
    client = AsyncPushoverClient(api_url=cfg.get("api_url", DEFAULT_API_URL), **kwargs)
    if cfg.get("secret") and cfg.get("user_id"):
        client.restore_login(cfg["secret"], cfg["user_id"])
    if cfg.get("device_id"):
        client.restore_device(cfg["device_id"])
    return client


def _get_client(require_device: bool = True, **kwargs) -> AsyncPushoverClient:
    cfg = _load_config()
    if not cfg.get("secret") or not cfg.get("user_id"):
        console.print("[red]Not logged in. Run `pushover auth login` first.[/red]")
        raise SystemExit(1)
    if require_device and not cfg.get("device_id"):
        console.print("[red]No device registered. Run `pushover device register NAME` first.[/red]")
        raise SystemExit(1)
    return _make_client(cfg, **kwargs)


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """Pushover CLI — receive Pushover notifications in your terminal."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# Register subcommands from separate modules
from pushover_client.cli.auth import auth
from pushover_client.cli.device import device
from pushover_client.cli.messages import messages
from pushover_client.cli.listen import listen_cmd

main.add_command(auth)
main.add_command(device)
main.add_command(messages)
main.add_command(listen_cmd)


if __name__ == "__main__":
    main()
