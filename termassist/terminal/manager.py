"""Terminal session selection.

Decides which terminal a command runs in: the active one, one of ours, any
other safe terminal, or a fresh "dedicated" terminal that is cached and
reused while it stays alive. Terminals owned by build/watch/test tasks are
never picked.
"""
import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, Sequence

from termassist.config.settings import DelayConfig, TerminalMode
from termassist.exceptions import TerminalHostError, TerminalUnavailableError

from .classifier import is_task_terminal
from .host import Session, SessionHost

logger = logging.getLogger(__name__)


@dataclass
class TerminalSelection:
    """Result of acquiring a terminal."""

    session: Session
    is_new: bool  # differs from the active terminal, or was just created
    created: bool = False  # created during this acquisition


class TerminalSessionManager:
    """Tracks the dedicated terminal and applies the selection policy.

    One instance is held for the lifetime of the application. Acquisition
    is serialized per instance; overlapping executions get a consistent
    view of the dedicated terminal.
    """

    def __init__(
        self,
        host: SessionHost,
        name: str = "Terminal Assistant",
        is_task: Callable[[str], bool] | None = None,
        delays: DelayConfig | None = None,
    ):
        """Initialize manager.

        Args:
            host: Session host that owns the terminals.
            name: Display name prefix for terminals created here.
            is_task: Predicate over terminal names. Defaults to
                is_task_terminal with name as the own-terminal prefix.
            delays: Pauses used when force-closing terminals.
        """
        self.host = host
        self.name = name
        self._is_task = is_task or partial(is_task_terminal, own_prefix=name)
        self.delays = delays or DelayConfig()
        self.dedicated_terminal: Session | None = None
        self.last_created_terminal: Session | None = None
        self._counter = 0
        self._lock = asyncio.Lock()

    @property
    def counter(self) -> int:
        """Number of terminals created so far."""
        return self._counter

    def reset_counter(self) -> None:
        """Restart terminal numbering at #1."""
        self._counter = 0

    def is_task_terminal(self, session: Session | None) -> bool:
        """Check if a session belongs to a task."""
        return session is not None and self._is_task(session.name)

    def find_first_usable_terminal(
        self, sessions: Sequence[Session], active: Session | None
    ) -> Session | None:
        """Look for a terminal that is safe to reuse.

        Priority: the active terminal, then one of ours, then any other
        non-task terminal.
        """
        if active is not None and not self.is_task_terminal(active):
            return active

        own_name = self.name.lower()
        own = next(
            (
                s
                for s in sessions
                if own_name in s.name.lower() and not self.is_task_terminal(s)
            ),
            None,
        )
        if own is not None:
            return own

        return next((s for s in sessions if not self.is_task_terminal(s)), None)

    async def acquire_terminal(
        self, mode: TerminalMode = TerminalMode.REUSE_EXISTING
    ) -> TerminalSelection:
        """Get a terminal according to the selection policy.

        Raises:
            TerminalUnavailableError: If the host cannot list or create
                terminals.
        """
        async with self._lock:
            try:
                sessions = list(await self.host.list_sessions())
                active = await self.host.active_session()
            except TerminalHostError as e:
                raise TerminalUnavailableError(f"Cannot list terminals: {e}") from e

            self._discard_stale(sessions)

            if mode is TerminalMode.ALWAYS_NEW:
                session = await self._create_dedicated()
                return TerminalSelection(session, is_new=True, created=True)

            usable = self.find_first_usable_terminal(sessions, active)
            if usable is not None:
                return TerminalSelection(
                    usable, is_new=active is None or usable != active
                )

            if mode is TerminalMode.SMART_REUSE:
                # The active terminal may have changed hands since it was
                # listed; only take it if it is still live and safe.
                if (
                    active is not None
                    and active in sessions
                    and not self.is_task_terminal(active)
                ):
                    return TerminalSelection(active, is_new=False)
            elif active is not None and not self.is_task_terminal(active):
                return TerminalSelection(active, is_new=False)

            if self.dedicated_terminal is not None:
                logger.debug(f"Reusing dedicated terminal {self.dedicated_terminal.name}")
                return TerminalSelection(
                    self.dedicated_terminal,
                    is_new=self.dedicated_terminal != active,
                )

            session = await self._create_dedicated()
            return TerminalSelection(session, is_new=True, created=True)

    async def create_fresh_terminal(self) -> Session:
        """Create and show a new numbered terminal."""
        async with self._lock:
            return await self._create_terminal()

    def forget(self, session: Session) -> None:
        """Drop cached references to a session."""
        if self.dedicated_terminal == session:
            self.dedicated_terminal = None
        if self.last_created_terminal == session:
            self.last_created_terminal = None

    async def force_close_task_terminal(self, session: Session) -> bool:
        """Dismiss a task terminal's prompt and dispose of it.

        Returns:
            True if the terminal was disposed.
        """
        pause = self.delays.force_close_ms / 1000
        try:
            await session.send_text(" ", submit=False)
            await asyncio.sleep(pause / 4)
            await session.send_text("\r", submit=False)
            await asyncio.sleep(pause / 4)
            await session.send_text("\x1b", submit=False)
            await asyncio.sleep(pause / 2)
            await session.dispose()
        except TerminalHostError as e:
            logger.warning(f"Failed to force close terminal {session.name}: {e}")
            return False

        self.forget(session)
        logger.info(f"Closed task terminal {session.name}")
        return True

    async def _create_dedicated(self) -> Session:
        session = await self._create_terminal()
        self.dedicated_terminal = session
        return session

    async def _create_terminal(self) -> Session:
        self._counter += 1
        name = f"{self.name} #{self._counter}"
        try:
            session = await self.host.create_session(name)
            await session.show(preserve_focus=True)
        except TerminalHostError as e:
            raise TerminalUnavailableError(f"Cannot create terminal '{name}': {e}") from e

        self.last_created_terminal = session
        logger.info(f"Created terminal {name}")
        return session

    def _discard_stale(self, sessions: Sequence[Session]) -> None:
        if self.dedicated_terminal is not None and self.dedicated_terminal not in sessions:
            logger.debug(f"Dedicated terminal {self.dedicated_terminal.name} is gone")
            self.dedicated_terminal = None
