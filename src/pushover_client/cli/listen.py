"""CLI: pushover listen"""

import json

import click
from rich.console import Console

from pushover_client.errors import PermanentError, PushoverError
from pushover_client.cli.messages import message_json, print_message

console = Console()


def _get_client(**kwargs):
    from pushover_client.cli.main import _get_client
    return _get_client(**kwargs)


def _run(coro):
    from pushover_client.cli.main import _run
    return _run(coro)


@click.command("listen")
@click.option("--timeout", "read_timeout", type=float, default=60.0, show_default=True,
              help="Seconds without a keep-alive before the connection is considered dead (0 disables)")
@click.option("--json-output", "--json", is_flag=True)
def listen_cmd(read_timeout: float, json_output: bool):
    """Stream notifications until the connection fails (Ctrl+C to exit)."""
    client = _get_client(read_timeout=read_timeout or None)

    async def _listen():
        try:
            if not json_output:
                console.print("[cyan]Listening for notifications (Ctrl+C to exit)[/cyan]")
            async for msg in client.notifications():
                if json_output:
                    click.echo(json.dumps(message_json(msg)))
                else:
                    print_message(msg)
        finally:
            await client.close()

    try:
        _run(_listen())
    except KeyboardInterrupt:
        pass
    except PermanentError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(2)
    except PushoverError as e:
        console.print(f"[red]Stream ended: {e}[/red]")
        raise SystemExit(1)
