"""Test console prompts and listings."""
import io

import pytest
from rich.console import Console
from unittest.mock import AsyncMock, MagicMock

from termassist.commands.groups import build_group_hierarchy, format_groups
from termassist.commands.models import CommandDefinition, CommandParameter
from termassist.ui.console import (
    ConsoleNotifier,
    ConsolePrompter,
    render_commands,
    render_groups,
)


def make_console() -> tuple[Console, io.StringIO]:
    """Create a console writing plain text to a buffer."""
    buffer = io.StringIO()
    return Console(file=buffer, width=120, color_system=None), buffer


@pytest.mark.asyncio
async def test_prompter_returns_value():
    """request_value returns what the user typed."""
    session = MagicMock()
    session.prompt_async = AsyncMock(return_value="main")
    prompter = ConsolePrompter(session)

    value = await prompter.request_value("Branch (default: main)", "branch", "main")

    assert value == "main"
    session.prompt_async.assert_awaited_once_with(
        "Branch (default: main): ", default="main", placeholder="branch"
    )


@pytest.mark.asyncio
async def test_prompter_empty_value():
    """An empty answer is not a cancellation."""
    session = MagicMock()
    session.prompt_async = AsyncMock(return_value="")

    assert await ConsolePrompter(session).request_value("x", "x", "") == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [KeyboardInterrupt, EOFError])
async def test_prompter_cancel(error):
    """Ctrl+C and Ctrl+D cancel the prompt."""
    session = MagicMock()
    session.prompt_async = AsyncMock(side_effect=error)

    assert await ConsolePrompter(session).request_value("x", "x", "") is None


def test_notifier_prints():
    """Notices are written to the console."""
    console, buffer = make_console()
    notifier = ConsoleNotifier(console)

    notifier.info("Command execution cancelled")
    notifier.error("Error executing command: [boom]")

    output = buffer.getvalue()
    assert "Command execution cancelled" in output
    assert "Error executing command: [boom]" in output


def test_render_commands_groups_tables():
    """render_commands prints one table per group."""
    console, buffer = make_console()
    commands = [
        CommandDefinition(
            "Checkout",
            "git checkout {branch}",
            group="Git",
            parameters=[CommandParameter(name="branch")],
        ),
        CommandDefinition("Up", "docker compose up", group="Docker", auto_execute=False),
    ]

    render_commands(console, commands)

    output = buffer.getvalue()
    assert "Git" in output and "Docker" in output
    assert "git checkout {branch}" in output
    assert "Manual" in output
    assert "Total commands: 2" in output


def test_render_commands_empty():
    """An empty catalog prints a hint."""
    console, buffer = make_console()
    render_commands(console, [])
    assert "No terminal commands defined." in buffer.getvalue()


def test_render_groups():
    """render_groups prints labels and paths."""
    console, buffer = make_console()

    render_groups(console, format_groups(build_group_hierarchy(["Dev/Backend"])))

    output = buffer.getvalue()
    assert "Dev (Dev)" in output
    assert "↳ Backend (Dev/Backend)" in output
