"""Application wiring."""
import logging
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from termassist.commands.catalog import CommandCatalog, resolve_catalog_path
from termassist.config.settings import Config
from termassist.execution.orchestrator import (
    ExecutionOrchestrator,
    Notifier,
    PromptHost,
)
from termassist.terminal.host import SessionHost, TmuxSessionHost
from termassist.terminal.manager import TerminalSessionManager
from termassist.ui.console import ConsoleNotifier, ConsolePrompter

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Long-lived objects shared by every command run."""

    config: Config
    catalog: CommandCatalog
    manager: TerminalSessionManager
    orchestrator: ExecutionOrchestrator
    notifier: Notifier
    console: Console


def create_application(
    config: Config,
    host: SessionHost | None = None,
    prompter: PromptHost | None = None,
    console: Console | None = None,
    cwd: Path | None = None,
) -> Application:
    """Create and wire the catalog, session manager and orchestrator.

    Args:
        config: Loaded configuration.
        host: Session host. Defaults to tmux.
        prompter: Prompt host. Defaults to a prompt_toolkit console prompt.
        console: Rich console for listings and notices.
        cwd: Workspace directory for workspace catalog storage.
    """
    console = console or Console()
    notifier = ConsoleNotifier(Console(stderr=True))

    catalog_path = resolve_catalog_path(config.catalog, config.home_path, cwd)
    logger.info(f"Using command catalog {catalog_path}")

    manager = TerminalSessionManager(
        host or TmuxSessionHost(),
        name=config.terminal.name,
        delays=config.terminal.delays,
    )
    orchestrator = ExecutionOrchestrator(
        manager,
        prompter or ConsolePrompter(),
        notifier,
        config=config.terminal,
    )

    return Application(
        config=config,
        catalog=CommandCatalog(catalog_path),
        manager=manager,
        orchestrator=orchestrator,
        notifier=notifier,
        console=console,
    )
