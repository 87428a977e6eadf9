"""
Uplinx CLI — browse engines, chat and check usage from the terminal.

Usage:
    uplinx engines --q gpt --sort price
    uplinx send "Tell me a story" --engine gpt-4o
    uplinx usage --from 2024-01-01 --to 2024-01-31

Reads UPLINX_API_KEY, UPLINX_BASE_URL and UPLINX_TIMEOUT_MS (or a .env file).
The --api-key / --base-url / --timeout-ms flags override them.
"""

from __future__ import annotations

import argparse
import asyncio
import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from uplinx.client import UplinxClient
from uplinx.core.config import ClientConfig
from uplinx.core.logging import setup_logging
from uplinx.errors import UplinxError
from uplinx.models import ChatSession, Engine, Message
from uplinx.streaming import StreamCallbacks

console = Console()
err_console = Console(stderr=True)

ROLE_STYLES = {"user": "bold cyan", "assistant": "bold green", "system": "dim"}


def _price(value: float) -> str:
    return f"${value:,.2f}"


# ─── Commands ────────────────────────────────────────────────────


async def cmd_engines(client: UplinxClient, args: argparse.Namespace) -> int:
    engines = await client.list_engines(
        q=args.q,
        category=args.category,
        sort=args.sort,
        page=args.page,
        limit=args.limit,
    )
    if not engines:
        console.print("[dim]No engines found.[/dim]")
        return 0

    table = Table(title="Engines")
    for column in ("Slug", "Name", "Provider", "Category", "Context", "Latency"):
        table.add_column(column)
    table.add_column("In /1M", justify="right")
    table.add_column("Out /1M", justify="right")
    for engine in engines:
        table.add_row(
            engine.slug,
            escape(engine.name),
            engine.provider,
            escape(engine.category),
            f"{engine.context_window:,}",
            engine.latency_class,
            _price(engine.pricing_input_per_1m),
            _price(engine.pricing_output_per_1m),
        )
    console.print(table)
    return 0


def _engine_table(engine: Engine) -> Table:
    table = Table(title=escape(engine.name), show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Slug", engine.slug)
    table.add_row("Provider", engine.provider)
    table.add_row("Model", escape(engine.model_id))
    table.add_row("Category", escape(engine.category))
    table.add_row("Tags", escape(", ".join(engine.tags)) or "-")
    table.add_row("Context window", f"{engine.context_window:,} tokens")
    table.add_row("Latency", engine.latency_class)
    table.add_row("Input price", f"{_price(engine.pricing_input_per_1m)} / 1M")
    table.add_row("Output price", f"{_price(engine.pricing_output_per_1m)} / 1M")
    table.add_row("Active", "yes" if engine.is_active else "no")
    table.add_row("Description", escape(engine.description))
    return table


async def cmd_engine(client: UplinxClient, args: argparse.Namespace) -> int:
    engine = await client.get_engine(args.slug)
    console.print(_engine_table(engine))
    return 0


def _chat_row(chat: ChatSession) -> tuple[str, ...]:
    count = "-" if chat.message_count is None else str(chat.message_count)
    return (
        chat.id,
        escape(chat.title),
        chat.engine_id or "-",
        count,
        chat.last_message_at or chat.updated_at,
    )


async def cmd_chats(client: UplinxClient, args: argparse.Namespace) -> int:
    chats = await client.list_chats()
    if not chats:
        console.print("[dim]No chats yet.[/dim]")
        return 0

    table = Table(title="Chats")
    for column in ("ID", "Title", "Engine", "Messages", "Last activity"):
        table.add_column(column)
    for chat in chats:
        table.add_row(*_chat_row(chat))
    console.print(table)
    return 0


async def cmd_new_chat(client: UplinxClient, args: argparse.Namespace) -> int:
    chat = await client.create_chat(engine_id=args.engine, title=args.title)
    console.print(f"Created chat [bold]{escape(chat.id)}[/bold]")
    return 0


def _print_message(message: Message) -> None:
    style = ROLE_STYLES.get(message.role, "bold")
    console.print(f"[{style}]{message.role}[/{style}]: {escape(message.content)}")


async def cmd_messages(client: UplinxClient, args: argparse.Namespace) -> int:
    messages = await client.get_messages(args.chat_id)
    for message in messages:
        _print_message(message)
    return 0


async def cmd_send(client: UplinxClient, args: argparse.Namespace) -> int:
    if args.no_stream:
        data = await client.send_message(
            args.message, chat_session_id=args.chat, engine_id=args.engine
        )
        console.print_json(json.dumps(data))
        return 0

    def on_token(token: str) -> None:
        console.print(token, end="", markup=False, highlight=False, soft_wrap=True)

    completed = await client.send_message_stream(
        args.message,
        chat_session_id=args.chat,
        engine_id=args.engine,
        callbacks=StreamCallbacks(on_token=on_token),
    )
    console.print()
    if completed is None:
        err_console.print("[yellow]Stream ended before the reply completed.[/yellow]")
        return 1
    return 0


async def cmd_usage(client: UplinxClient, args: argparse.Namespace) -> int:
    usage = await client.get_usage(from_=args.from_, to=args.to)
    console.print(
        f"[bold]Input tokens:[/bold] {usage.total_input_tokens:,}  "
        f"[bold]Output tokens:[/bold] {usage.total_output_tokens:,}  "
        f"[bold]Cost:[/bold] ${usage.total_cost_usd:.4f}"
    )
    if not usage.records:
        return 0

    table = Table(title="Usage records")
    for column in ("Date", "Engine", "Chat"):
        table.add_column(column)
    for column in ("Input", "Output", "Cost"):
        table.add_column(column, justify="right")
    for record in usage.records:
        table.add_row(
            record.created_at,
            record.engine_id,
            record.chat_session_id or "-",
            f"{record.input_tokens:,}",
            f"{record.output_tokens:,}",
            f"${record.cost_usd:.4f}",
        )
    console.print(table)
    return 0


# ─── Entry point ─────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uplinx", description="Uplinx LLM marketplace client"
    )
    parser.add_argument("--api-key", help="API key (default: $UPLINX_API_KEY)")
    parser.add_argument("--base-url", help="API base URL (default: $UPLINX_BASE_URL)")
    parser.add_argument(
        "--timeout-ms", type=int, help="Request timeout (default: $UPLINX_TIMEOUT_MS)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    engines = sub.add_parser("engines", help="List engines")
    engines.add_argument("--q", help="Search text")
    engines.add_argument("--category")
    engines.add_argument("--sort", choices=["name", "price", "latency", "context"])
    engines.add_argument("--page", type=int)
    engines.add_argument("--limit", type=int)
    engines.set_defaults(handler=cmd_engines)

    engine = sub.add_parser("engine", help="Show one engine")
    engine.add_argument("slug")
    engine.set_defaults(handler=cmd_engine)

    chats = sub.add_parser("chats", help="List chat sessions")
    chats.set_defaults(handler=cmd_chats)

    new_chat = sub.add_parser("new-chat", help="Create a chat session")
    new_chat.add_argument("--engine", help="Default engine id")
    new_chat.add_argument("--title")
    new_chat.set_defaults(handler=cmd_new_chat)

    messages = sub.add_parser("messages", help="Show a chat transcript")
    messages.add_argument("chat_id")
    messages.set_defaults(handler=cmd_messages)

    send = sub.add_parser("send", help="Send a message")
    send.add_argument("message")
    send.add_argument("--chat", help="Chat session id (omit to start a new chat)")
    send.add_argument("--engine", help="Engine id")
    send.add_argument(
        "--no-stream", action="store_true", help="Wait for the full reply"
    )
    send.set_defaults(handler=cmd_send)

    usage = sub.add_parser("usage", help="Show usage and cost")
    usage.add_argument("--from", dest="from_", help="Start date (YYYY-MM-DD)")
    usage.add_argument("--to", help="End date (YYYY-MM-DD)")
    usage.set_defaults(handler=cmd_usage)

    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        config = ClientConfig.from_env(
            api_key=args.api_key,
            base_url=args.base_url,
            timeout_ms=args.timeout_ms,
        )
    except ValueError as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 2

    client = UplinxClient.from_config(config)
    try:
        return asyncio.run(args.handler(client, args))
    except UplinxError as e:
        err_console.print(
            f"[red]Error[/red] {escape(f'[{e.code}]')} ({e.status}): "
            f"{escape(e.message)}"
        )
        return 1
    except KeyboardInterrupt:
        return 130
