"""Console prompts, notices and listings."""
import logging
from typing import Sequence

from prompt_toolkit import PromptSession
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from termassist.commands.groups import GroupOption
from termassist.commands.models import CommandDefinition
from termassist.commands.templates import highlight_parameters

logger = logging.getLogger(__name__)


class ConsolePrompter:
    """Prompt host reading parameter values from the terminal."""

    def __init__(self, session: PromptSession | None = None):
        self._session = session

    @property
    def session(self) -> PromptSession:
        if self._session is None:
            self._session = PromptSession()
        return self._session

    async def request_value(
        self, prompt: str, placeholder: str, default: str
    ) -> str | None:
        """Ask for a value. Ctrl+C or Ctrl+D cancels and returns None."""
        try:
            return await self.session.prompt_async(
                f"{prompt}: ",
                default=default,
                placeholder=placeholder,
            )
        except (KeyboardInterrupt, EOFError):
            return None


class ConsoleNotifier:
    """Shows informational and error notices with rich."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]ℹ {escape(message)}[/cyan]")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]✖ {escape(message)}[/bold red]")


def render_commands(console: Console, commands: Sequence[CommandDefinition]) -> None:
    """Print commands as one table per group."""
    if not commands:
        console.print("No terminal commands defined.")
        return

    grouped: dict[str, list[CommandDefinition]] = {}
    for cmd in commands:
        grouped.setdefault(cmd.group, []).append(cmd)

    for group, cmds in grouped.items():
        table = Table(title=group, title_justify="left", expand=True)
        table.add_column("Label", style="bold")
        table.add_column("Command")
        table.add_column("Description")
        table.add_column("Mode")

        for cmd in cmds:
            command_text = highlight_parameters(
                escape(cmd.command),
                cmd.parameters,
                lambda placeholder: f"[bold cyan]{placeholder}[/bold cyan]",
            )
            table.add_row(
                escape(cmd.label),
                command_text,
                escape(cmd.description or "-"),
                "Auto" if cmd.auto_execute else "Manual",
            )
        console.print(table)

    console.print(f"[dim]Total commands: {len(commands)}[/dim]")


def render_groups(console: Console, options: Sequence[GroupOption]) -> None:
    """Print an indented group tree."""
    for option in options:
        console.print(f"{escape(option.label)} [dim]{escape(option.description)}[/dim]")
