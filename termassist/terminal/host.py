"""Terminal session hosts.

The session manager and orchestrator only rely on the Session and
SessionHost protocols. TmuxSessionHost binds them to tmux windows.
"""
import asyncio
import logging
from typing import Protocol, Sequence, runtime_checkable

from termassist.exceptions import TerminalHostError

logger = logging.getLogger(__name__)

TMUX_TIMEOUT_SECONDS = 5.0

# window_id and window_name, tab separated
_WINDOW_FORMAT = "#{window_id}\t#{window_name}"


@runtime_checkable
class Session(Protocol):
    """An interactive shell owned by the host."""

    @property
    def name(self) -> str: ...

    async def show(self, preserve_focus: bool = False) -> None: ...

    async def send_text(self, text: str, submit: bool = True) -> None: ...

    async def dispose(self) -> None: ...


class SessionHost(Protocol):
    """Creates and enumerates sessions."""

    async def create_session(self, name: str) -> Session: ...

    async def list_sessions(self) -> Sequence[Session]: ...

    async def active_session(self) -> Session | None: ...


class TmuxSession:
    """A tmux window used as a terminal session.

    Sessions compare equal by window id, so handles from separate
    list-windows calls refer to the same terminal.
    """

    def __init__(self, host: "TmuxSessionHost", window_id: str, name: str):
        self._host = host
        self.window_id = window_id
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def show(self, preserve_focus: bool = False) -> None:
        """Bring the window to the foreground.

        With preserve_focus the window is left where it is; windows created
        detached stay behind the invoking client.
        """
        if preserve_focus:
            return
        await self._host.run("select-window", "-t", self.window_id)

    async def send_text(self, text: str, submit: bool = True) -> None:
        """Type text into the window, pressing Enter when submit is set."""
        if text:
            await self._host.run("send-keys", "-t", self.window_id, "-l", text)
        if submit:
            await self._host.run("send-keys", "-t", self.window_id, "Enter")

    async def dispose(self) -> None:
        await self._host.run("kill-window", "-t", self.window_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TmuxSession):
            return NotImplemented
        return self.window_id == other.window_id

    def __hash__(self) -> int:
        return hash(self.window_id)

    def __repr__(self) -> str:
        return f"TmuxSession({self.window_id!r}, {self._name!r})"


class TmuxSessionHost:
    """Session host backed by the tmux CLI."""

    def __init__(
        self,
        tmux_path: str = "tmux",
        session_name: str = "termassist",
        timeout: float = TMUX_TIMEOUT_SECONDS,
    ):
        """Initialize host.

        Args:
            tmux_path: tmux executable.
            session_name: tmux session created when no server is running.
            timeout: Seconds to wait for each tmux call.
        """
        self.tmux_path = tmux_path
        self.session_name = session_name
        self.timeout = timeout

    async def run(self, *args: str) -> str:
        """Run a tmux command and return its stdout.

        Raises:
            TerminalHostError: If tmux is missing, times out or fails.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                self.tmux_path,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TerminalHostError(f"Cannot run {self.tmux_path}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise TerminalHostError(f"tmux {args[0]} timed out") from e

        if proc.returncode != 0:
            message = stderr.decode(errors="replace").strip()
            raise TerminalHostError(f"tmux {args[0]} failed: {message}")

        return stdout.decode(errors="replace")

    async def list_sessions(self) -> list[TmuxSession]:
        """List all windows across tmux sessions.

        No running server means no sessions.
        """
        try:
            output = await self.run("list-windows", "-a", "-F", _WINDOW_FORMAT)
        except TerminalHostError as e:
            if "no server running" in str(e) or "error connecting" in str(e):
                return []
            raise
        return [s for s in map(self._parse_window, output.splitlines()) if s]

    async def active_session(self) -> TmuxSession | None:
        """Get the window the invoking client is looking at, if any."""
        try:
            output = await self.run("display-message", "-p", _WINDOW_FORMAT)
        except TerminalHostError as e:
            logger.debug(f"No active tmux window: {e}")
            return None
        return self._parse_window(output.strip())

    async def create_session(self, name: str) -> TmuxSession:
        """Create a detached window named name.

        Starts a new tmux session when no server is running.
        """
        try:
            output = await self.run(
                "new-window", "-d", "-P", "-F", _WINDOW_FORMAT, "-n", name
            )
        except TerminalHostError as e:
            logger.debug(f"new-window failed ({e}), starting tmux session")
            output = await self.run(
                "new-session",
                "-d",
                "-P",
                "-F",
                _WINDOW_FORMAT,
                "-s",
                self.session_name,
                "-n",
                name,
            )

        session = self._parse_window(output.strip())
        if session is None:
            raise TerminalHostError(f"Unexpected tmux output: {output!r}")
        logger.info(f"Created tmux window {session.window_id} ({name})")
        return session

    def _parse_window(self, line: str) -> TmuxSession | None:
        window_id, sep, name = line.partition("\t")
        if not sep or not window_id:
            return None
        return TmuxSession(self, window_id, name)
