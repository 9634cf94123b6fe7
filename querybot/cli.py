"""
QueryBot CLI

Command-line interface for asking questions about the configured database.

Usage:
    querybot ask "top 5 users"     # Single question, fresh conversation
    querybot chat                  # Interactive REPL, one conversation
    querybot serve --port 8000     # Run the HTTP API
"""

import asyncio
import logging
import sys
import uuid
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from querybot import __version__
from querybot.config import get_settings, quiet_third_party_loggers
from querybot.integrations.mention import MentionEvent, MentionHandler, MentionReply
from querybot.runtime import AgentRuntime, create_runtime

console = Console()

EXIT_PHRASES = {"exit", "quit", "q", "bye"}


def configure_cli_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("querybot").setLevel(level)
    quiet_third_party_loggers()


def print_reply(reply: MentionReply, csv_path: Path | None = None) -> None:
    """Display a reply and optionally save its CSV attachment."""
    answer = reply.answer
    if answer is not None and answer.failed:
        border = "red"
    elif answer is not None and answer.has_result:
        border = "green"
    else:
        border = "yellow"
    console.print(Panel(Markdown(reply.text), title="[bold]Answer[/bold]", border_style=border))

    if csv_path is not None and reply.csv:
        csv_path.write_text(reply.csv + "\n", encoding="utf-8")
        console.print(f"[dim]Saved full result to {csv_path}[/dim]")


def _should_exit_chat(text: str) -> bool:
    return text.strip().lower() in EXIT_PHRASES


async def _ask_once(runtime: AgentRuntime, question: str, conversation_id: str) -> MentionReply:
    handler = MentionHandler(runtime.agent, runtime.renderer)
    with console.status("[cyan]Thinking...[/cyan]", spinner="dots"):
        return await handler.handle(MentionEvent(text=question, thread_id=conversation_id))


@click.group()
@click.version_option(version=__version__, prog_name="QueryBot")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """QueryBot - ask your database questions in plain language."""
    configure_cli_logging(verbose)


@cli.command()
@click.argument("question")
@click.option(
    "--csv",
    "csv_path",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the full result to this CSV file",
)
def ask(question: str, csv_path: Path | None):
    """Ask a single question in a new conversation and exit."""

    async def run() -> MentionReply:
        runtime = await create_runtime(get_settings())
        try:
            return await _ask_once(runtime, question, uuid.uuid4().hex)
        finally:
            await runtime.close()

    try:
        reply = asyncio.run(run())
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    print_reply(reply, csv_path)
    if reply.answer is None or reply.answer.failed:
        sys.exit(1)


@cli.command()
def chat():
    """Interactive REPL; every question continues the same conversation."""
    console.print(
        Panel.fit(
            "[bold green]QueryBot Interactive Mode[/bold green]\n"
            "Ask questions in natural language. Type 'exit' or 'quit' to leave.",
            border_style="green",
        )
    )
    conversation_id = uuid.uuid4().hex

    async def run_chat() -> None:
        runtime = await create_runtime(get_settings())
        try:
            while True:
                try:
                    question = console.input("[bold cyan]You:[/bold cyan] ").strip()
                except (EOFError, KeyboardInterrupt):
                    console.print("\n[yellow]Goodbye![/yellow]")
                    break
                if not question:
                    continue
                if _should_exit_chat(question):
                    console.print("[yellow]Goodbye![/yellow]")
                    break
                print_reply(await _ask_once(runtime, question, conversation_id))
        finally:
            await runtime.close()

    try:
        asyncio.run(run_chat())
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind host (defaults to API_HOST)")
@click.option("--port", default=None, type=int, help="Bind port (defaults to API_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "querybot.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
