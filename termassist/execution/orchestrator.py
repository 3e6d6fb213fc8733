"""Run a command definition in a terminal.

One execution walks through these states:

    SELECT_TERMINAL -> WARMUP -> COLLECT_PARAMETERS -> REWRITE_COMMAND
        -> PREFLIGHT -> DISPATCH -> DONE

Declining a parameter prompt ends the run in CANCELLED; any failure ends it
in FAILED and is reported once through the notifier.
"""
import asyncio
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from termassist.commands.models import CommandDefinition, CommandParameter
from termassist.commands.templates import is_flag_parameter, substitute_parameters
from termassist.config.settings import TerminalConfig, TerminalMode
from termassist.exceptions import TerminalUnavailableError
from termassist.terminal.host import Session
from termassist.terminal.manager import TerminalSessionManager

logger = logging.getLogger(__name__)

# Keys that discard whatever is typed at the prompt
WINDOWS_ESCAPE_SEQUENCE = ["\x1b", "\x1b[2K", "\r"]  # ESC, erase line, CR
POSIX_ESCAPE_SEQUENCE = ["\x15"]  # Ctrl+U


class PromptHost(Protocol):
    """Asks the user for parameter values."""

    async def request_value(
        self, prompt: str, placeholder: str, default: str
    ) -> str | None:
        """Return the entered value, or None if the user cancelled."""
        ...


class Notifier(Protocol):
    """Shows short messages to the user."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ExecutionState(Enum):
    """Steps of a single command run."""

    SELECT_TERMINAL = "select_terminal"
    WARMUP = "warmup"
    COLLECT_PARAMETERS = "collect_parameters"
    REWRITE_COMMAND = "rewrite_command"
    PREFLIGHT = "preflight"
    DISPATCH = "dispatch"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class ExecutionResult:
    """Outcome of a command run."""

    state: ExecutionState
    command: str | None = None  # text sent to the terminal
    session: Session | None = None
    error: str | None = None
    failed_in: ExecutionState | None = None


def escape_sequence(platform: str = sys.platform) -> list[str]:
    """Get the keystrokes that clear pending input on platform."""
    if platform == "win32":
        return list(WINDOWS_ESCAPE_SEQUENCE)
    return list(POSIX_ESCAPE_SEQUENCE)


def clear_command(platform: str = sys.platform) -> str:
    """Get the shell command that clears the screen on platform."""
    return "cls" if platform == "win32" else "clear"


def build_prompt_text(param: CommandParameter, template: str) -> str:
    """Build the prompt shown when asking for a parameter value.

    Example: "Branch to check out (default: main) (optional)"
    """
    text = param.description or f"Enter value for {param.name}"
    if param.default_value:
        text = f"{text} (default: {param.default_value})"
    if param.optional and is_flag_parameter(param.name, template):
        text = f"{text} (optional)"
    return text


class ExecutionOrchestrator:
    """Coordinates terminal selection, prompts and dispatch for one run."""

    def __init__(
        self,
        manager: TerminalSessionManager,
        prompter: PromptHost,
        notifier: Notifier,
        config: TerminalConfig | None = None,
        platform: str = sys.platform,
    ):
        self.manager = manager
        self.prompter = prompter
        self.notifier = notifier
        self.config = config or TerminalConfig()
        self.platform = platform

    async def execute_command(
        self,
        definition: CommandDefinition,
        mode: TerminalMode | None = None,
        force_new: bool = False,
    ) -> ExecutionResult:
        """Run a command definition.

        Args:
            definition: Command to run. Not modified.
            mode: Selection policy for this run. Defaults to the configured
                mode.
            force_new: Run in a brand new terminal regardless of mode.

        Returns:
            ExecutionResult in state DONE, CANCELLED or FAILED.
        """
        if force_new:
            mode = TerminalMode.ALWAYS_NEW
        elif mode is None:
            mode = self.config.mode

        delays = self.config.delays
        state = ExecutionState.SELECT_TERMINAL
        session = None

        try:
            selection = await self.manager.acquire_terminal(mode)
            session = selection.session
            if not selection.created:
                await session.show()
            logger.debug(
                f"Using terminal {session.name} "
                f"(new={selection.is_new}, created={selection.created})"
            )

            state = ExecutionState.WARMUP
            if selection.created:
                await _pause(delays.new_terminal_ms)
            else:
                await _pause(delays.reused_terminal_ms)

            state = ExecutionState.COLLECT_PARAMETERS
            values = await self.collect_parameters(definition)
            if values is None:
                logger.info(f"Execution of '{definition.label}' cancelled")
                self.notifier.info("Command execution cancelled")
                return ExecutionResult(ExecutionState.CANCELLED, session=session)

            state = ExecutionState.REWRITE_COMMAND
            final_command = substitute_parameters(
                definition.command, definition.parameters, values
            )

            state = ExecutionState.PREFLIGHT
            await self._preflight(session, definition, created=selection.created)

            state = ExecutionState.DISPATCH
            await session.send_text(final_command, submit=True)

        except TerminalUnavailableError as e:
            logger.error(f"No terminal for '{definition.label}': {e}")
            self.notifier.error(f"Terminal unavailable: {e}")
            return ExecutionResult(
                ExecutionState.FAILED, error=str(e), failed_in=state
            )
        except Exception as e:
            logger.exception(f"Command '{definition.label}' failed during {state.value}")
            self.notifier.error(f"Error executing command: {e}")
            return ExecutionResult(
                ExecutionState.FAILED, session=session, error=str(e), failed_in=state
            )

        logger.info(f"Sent '{definition.label}' to {session.name}")
        return ExecutionResult(
            ExecutionState.DONE, command=final_command, session=session
        )

    async def collect_parameters(
        self, definition: CommandDefinition
    ) -> dict[str, str] | None:
        """Gather a value for every declared parameter, in order.

        Auto-executed commands use non-empty defaults without asking.

        Returns:
            Parameter values by name, or None if the user cancelled.
        """
        values: dict[str, str] = {}
        for param in definition.parameters:
            if definition.auto_execute and param.default_value:
                values[param.name] = param.default_value
                continue

            value = await self.prompter.request_value(
                build_prompt_text(param, definition.command),
                param.name,
                param.default_value or "",
            )
            if value is None:
                return None
            values[param.name] = value
        return values

    async def _preflight(
        self, session: Session, definition: CommandDefinition, created: bool
    ) -> None:
        """Clear pending input and optionally the screen before dispatch."""
        delays = self.config.delays

        if not created and definition.sends_escape:
            for keys in escape_sequence(self.platform):
                await session.send_text(keys, submit=False)
            await _pause(delays.escape_ms)

        if definition.clear_terminal:
            await session.send_text(clear_command(self.platform), submit=True)
            await _pause(delays.clear_ms)


async def _pause(milliseconds: float) -> None:
    if milliseconds > 0:
        await asyncio.sleep(milliseconds / 1000)
