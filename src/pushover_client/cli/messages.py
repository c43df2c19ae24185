"""CLI: pushover messages list|delete"""

import json

import click
from rich.console import Console
from rich.table import Table

from pushover_client.errors import FetchError, PushoverError
from pushover_client.models.message import Message

console = Console()


def _get_client(**kwargs):
    from pushover_client.cli.main import _get_client
    return _get_client(**kwargs)


def _run(coro):
    from pushover_client.cli.main import _run
    return _run(coro)


def message_json(msg: Message) -> dict:
    return {**msg.model_dump(), "date": msg.date.isoformat()}


def print_message(msg: Message) -> None:
    title = msg.title or msg.app_name
    console.print(f"[dim]{msg.date:%Y-%m-%d %H:%M:%S}[/dim] [bold]{title}[/bold]: {msg.text}")
    if msg.url:
        suffix = f" ({msg.url_title})" if msg.url_title else ""
        console.print(f"  [blue]{msg.url}[/blue]{suffix}")


@click.group()
def messages():
    """Pending messages."""


@messages.command("list")
@click.option("--delete", is_flag=True, help="Delete the listed messages from the server")
@click.option("--json-output", "--json", is_flag=True)
def messages_list(delete: bool, json_output: bool):
    """List pending messages."""
    client = _get_client()

    async def _list():
        try:
            try:
                msgs = await client.get_messages()
            except FetchError as e:
                if not e.messages:
                    raise
                console.print(f"[yellow]Partial result: {e}[/yellow]")
                msgs = e.messages
            if delete:
                await client.delete_old_messages(msgs)
            return msgs
        finally:
            await client.close()

    try:
        msgs = _run(_list())
    except PushoverError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    if json_output:
        click.echo(json.dumps([message_json(m) for m in msgs], indent=2))
        return
    table = Table(title=f"Messages ({len(msgs)} pending)")
    table.add_column("ID", style="bold")
    table.add_column("Date")
    table.add_column("App")
    table.add_column("Title")
    table.add_column("Message")
    for m in msgs:
        table.add_row(str(m.relative_id), f"{m.date:%Y-%m-%d %H:%M}", m.app_name, m.title, m.text)
    console.print(table)
    if delete and msgs:
        console.print(f"[green]Deleted messages through {max(m.relative_id for m in msgs)}.[/green]")


@messages.command("delete")
@click.argument("highest_id", type=int)
def messages_delete(highest_id: int):
    """Delete every message up to and including HIGHEST_ID."""
    client = _get_client()

    async def _delete():
        try:
            await client.delete_messages_by_id(highest_id)
        finally:
            await client.close()

    try:
        _run(_delete())
    except PushoverError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    console.print(f"[green]Deleted messages through {highest_id}.[/green]")
