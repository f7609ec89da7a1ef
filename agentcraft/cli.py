"""Command line interface: template catalog, schema setup and a local chat REPL."""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from agentcraft.db.engine import create_tables, get_engine
from agentcraft.errors import AgentCraftError
from agentcraft.models.conversation_models import ChatMessage, MessageRole
from agentcraft.providers import describe_model
from agentcraft.services.completion import CompletionGateway, PydanticAICompletionGateway
from agentcraft.settings import load_settings
from agentcraft.templates import get_template, list_templates, render_system_prompt

console = Console()


def show_templates() -> int:
    """Print the template catalog as a table."""
    table = Table(title="Agent templates")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Category", style="magenta")
    table.add_column("Description")
    for template in list_templates():
        table.add_row(template.id, template.name, template.category, template.description)
    console.print(table)
    return 0


async def init_db() -> int:
    """Create all tables in the configured database."""
    settings = load_settings()
    if not settings.database_url:
        console.print("[red]DATABASE_URL is not configured[/red]")
        return 1

    engine = await get_engine(settings.database_url)
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()
    console.print("[bold green]OK[/bold green] Tables created")
    return 0


async def chat_loop(
    gateway: CompletionGateway,
    system_prompt: str,
    agent_name: str,
    banner: str = "",
) -> int:
    """
    Interactive chat against the completion gateway.

    History is kept in memory only; nothing is persisted.
    """
    console.print(
        Panel(
            f"[bold blue]{agent_name}[/bold blue]\n{banner}\n\n"
            "[dim]Type 'exit' to quit, 'prompt' to show the system prompt, "
            "'clear' to reset the conversation[/dim]",
            style="blue",
            padding=(1, 2),
        )
    )
    history: list[ChatMessage] = []

    while True:
        try:
            user_input = Prompt.ask("[bold green]You").strip()
        except (KeyboardInterrupt, EOFError):
            break

        command = user_input.lower()
        if command in ("exit", "quit", "q"):
            break
        if command == "prompt":
            console.print(Panel(system_prompt, title="System prompt", border_style="magenta"))
            continue
        if command == "clear":
            history.clear()
            console.print("[dim]Conversation cleared[/dim]")
            continue
        if not user_input:
            continue

        history.append(ChatMessage(role=MessageRole.USER, content=user_input))
        try:
            reply = await gateway.complete(system_prompt, history)
        except AgentCraftError as e:
            # The user turn stays in history, as it does for stored conversations.
            console.print(f"[red]{e.error}: {e.message}[/red]")
            continue

        history.append(ChatMessage(role=MessageRole.ASSISTANT, content=reply))
        console.print(f"[bold blue]{agent_name}:[/bold blue] {reply}\n")

    console.print("\n[yellow]Goodbye![/yellow]")
    return 0


async def run_chat(template_id: str, name: str, description: str) -> int:
    if get_template(template_id) is None:
        console.print(f"[yellow]Unknown template '{template_id}', using the generic prompt[/yellow]")

    settings = load_settings()
    gateway = PydanticAICompletionGateway.from_settings(settings)
    banner = f"[dim]Template: {template_id} | Model: {describe_model(settings)}[/dim]"
    return await chat_loop(
        gateway, render_system_prompt(template_id, name, description), name, banner
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentcraft", description="AgentCraft utilities")
    subcommands = parser.add_subparsers(dest="command", required=True)

    subcommands.add_parser("templates", help="List agent templates")
    subcommands.add_parser("init-db", help="Create database tables")

    chat = subcommands.add_parser("chat", help="Chat with a template-configured agent")
    chat.add_argument("--template", default="website-faq", help="Template id")
    chat.add_argument("--name", default="Assistant", help="Agent name")
    chat.add_argument("--description", default="", help="Agent description")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "templates":
        return show_templates()
    if args.command == "init-db":
        return asyncio.run(init_db())
    return asyncio.run(run_chat(args.template, args.name, args.description))


if __name__ == "__main__":
    sys.exit(main())
