"""Shared fixtures: an in-memory session host."""
import pytest

from termassist.config.settings import DelayConfig, TerminalConfig
from termassist.exceptions import TerminalHostError


class FakeSession:
    """Session that records what it was sent."""

    def __init__(self, name: str):
        self.name = name
        self.sent: list[tuple[str, bool]] = []
        self.shown: list[bool] = []
        self.disposed = False
        self.fail_send = False

    async def show(self, preserve_focus: bool = False) -> None:
        self.shown.append(preserve_focus)

    async def send_text(self, text: str, submit: bool = True) -> None:
        if self.fail_send:
            raise TerminalHostError("send failed")
        self.sent.append((text, submit))

    async def dispose(self) -> None:
        self.disposed = True

    def __repr__(self) -> str:
        return f"FakeSession({self.name!r})"


class FakeHost:
    """Session host keeping sessions in a list."""

    def __init__(self, names: list[str] | None = None, active: int | None = None):
        self.sessions = [FakeSession(n) for n in names or []]
        self.active = self.sessions[active] if active is not None else None
        self.created: list[FakeSession] = []
        self.fail_list = False
        self.fail_create = False

    async def create_session(self, name: str) -> FakeSession:
        if self.fail_create:
            raise TerminalHostError("create failed")
        session = FakeSession(name)
        self.sessions.append(session)
        self.created.append(session)
        return session

    async def list_sessions(self) -> list[FakeSession]:
        if self.fail_list:
            raise TerminalHostError("list failed")
        return list(self.sessions)

    async def active_session(self) -> FakeSession | None:
        return self.active

    def close(self, session: FakeSession) -> None:
        """Simulate the user closing a terminal."""
        self.sessions.remove(session)
        if self.active is session:
            self.active = None


@pytest.fixture
def make_host():
    """Factory for fake hosts: make_host(["bash"], active=0)."""
    return FakeHost


@pytest.fixture
def no_delays():
    """Delay settings that never sleep."""
    return DelayConfig(
        new_terminal_ms=0,
        reused_terminal_ms=0,
        escape_ms=0,
        clear_ms=0,
        force_close_ms=0,
    )


@pytest.fixture
def terminal_config(no_delays):
    """Terminal settings with delays disabled."""
    return TerminalConfig(delays=no_delays)
