"""Test tmux session host."""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from termassist.exceptions import TerminalHostError
from termassist.terminal.host import Session, TmuxSession, TmuxSessionHost


def make_proc(stdout: str = "", stderr: str = "", returncode: int = 0):
    """Create a mock subprocess."""
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout.encode(), stderr.encode()))
    proc.wait = AsyncMock(return_value=returncode)
    proc.returncode = returncode
    return proc


@pytest.fixture
def host():
    return TmuxSessionHost(tmux_path="tmux", session_name="test")


@pytest.mark.asyncio
async def test_run_returns_stdout(host):
    """run passes arguments to tmux and returns stdout."""
    with patch(
        "termassist.terminal.host.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        return_value=make_proc("ok\n"),
    ) as mock_exec:
        assert await host.run("list-windows") == "ok\n"

    assert mock_exec.call_args.args == ("tmux", "list-windows")


@pytest.mark.asyncio
async def test_run_nonzero_exit(host):
    """A failing tmux call raises TerminalHostError with stderr."""
    with patch(
        "termassist.terminal.host.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        return_value=make_proc(stderr="can't find window", returncode=1),
    ):
        with pytest.raises(TerminalHostError, match="can't find window"):
            await host.run("select-window", "-t", "@9")


@pytest.mark.asyncio
async def test_run_missing_binary(host):
    """A missing tmux binary raises TerminalHostError."""
    with patch(
        "termassist.terminal.host.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        side_effect=FileNotFoundError("tmux"),
    ):
        with pytest.raises(TerminalHostError, match="Cannot run tmux"):
            await host.run("list-windows")


@pytest.mark.asyncio
async def test_run_timeout(host):
    """A hung tmux call is killed, reaped and reported."""
    proc = make_proc()
    proc.communicate = AsyncMock(side_effect=asyncio.TimeoutError)

    with patch(
        "termassist.terminal.host.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        return_value=proc,
    ):
        with pytest.raises(TerminalHostError, match="timed out"):
            await host.run("list-windows")

    proc.kill.assert_called_once()
    proc.wait.assert_awaited_once()


@pytest.mark.asyncio
async def test_list_sessions(host):
    """list_sessions parses window ids and names."""
    host.run = AsyncMock(return_value="@1\tbash\n@2\tnpm: build\n\n")

    sessions = await host.list_sessions()

    assert [(s.window_id, s.name) for s in sessions] == [
        ("@1", "bash"),
        ("@2", "npm: build"),
    ]


@pytest.mark.asyncio
async def test_list_sessions_no_server(host):
    """No tmux server means no sessions."""
    host.run = AsyncMock(
        side_effect=TerminalHostError("tmux list-windows failed: no server running on /tmp/x")
    )
    assert await host.list_sessions() == []


@pytest.mark.asyncio
async def test_list_sessions_other_error(host):
    """Other tmux errors propagate."""
    host.run = AsyncMock(side_effect=TerminalHostError("tmux list-windows failed: boom"))
    with pytest.raises(TerminalHostError):
        await host.list_sessions()


@pytest.mark.asyncio
async def test_active_session(host):
    """active_session reads the current window."""
    host.run = AsyncMock(return_value="@3\tzsh\n")

    session = await host.active_session()

    assert session.window_id == "@3"
    assert session.name == "zsh"


@pytest.mark.asyncio
async def test_active_session_outside_tmux(host):
    """active_session is None when tmux has no client."""
    host.run = AsyncMock(side_effect=TerminalHostError("no current client"))
    assert await host.active_session() is None


@pytest.mark.asyncio
async def test_create_session(host):
    """create_session opens a detached named window."""
    host.run = AsyncMock(return_value="@7\tTerminal Assistant #1\n")

    session = await host.create_session("Terminal Assistant #1")

    assert session.window_id == "@7"
    args = host.run.call_args.args
    assert args[:2] == ("new-window", "-d")
    assert args[-2:] == ("-n", "Terminal Assistant #1")


@pytest.mark.asyncio
async def test_create_session_starts_server(host):
    """create_session starts a tmux session when new-window fails."""
    host.run = AsyncMock(
        side_effect=[TerminalHostError("no server running"), "@0\tT #1\n"]
    )

    session = await host.create_session("T #1")

    assert session.window_id == "@0"
    args = host.run.call_args.args
    assert args[0] == "new-session"
    assert "test" in args


@pytest.mark.asyncio
async def test_create_session_bad_output(host):
    """Unparseable tmux output raises TerminalHostError."""
    host.run = AsyncMock(return_value="garbage")
    with pytest.raises(TerminalHostError, match="Unexpected"):
        await host.create_session("x")


@pytest.mark.asyncio
async def test_session_send_text_submits(host):
    """send_text types literally and presses Enter when submitting."""
    host.run = AsyncMock(return_value="")
    session = TmuxSession(host, "@1", "bash")

    await session.send_text("ls -la")
    await session.send_text("\x15", submit=False)

    assert [c.args for c in host.run.call_args_list] == [
        ("send-keys", "-t", "@1", "-l", "ls -la"),
        ("send-keys", "-t", "@1", "Enter"),
        ("send-keys", "-t", "@1", "-l", "\x15"),
    ]


@pytest.mark.asyncio
async def test_session_show_and_dispose(host):
    """show selects the window unless focus is preserved; dispose kills it."""
    host.run = AsyncMock(return_value="")
    session = TmuxSession(host, "@1", "bash")

    await session.show(preserve_focus=True)
    host.run.assert_not_called()

    await session.show()
    await session.dispose()

    assert [c.args for c in host.run.call_args_list] == [
        ("select-window", "-t", "@1"),
        ("kill-window", "-t", "@1"),
    ]


def test_session_equality(host):
    """Sessions are equal by window id."""
    assert TmuxSession(host, "@1", "a") == TmuxSession(host, "@1", "renamed")
    assert TmuxSession(host, "@1", "a") != TmuxSession(host, "@2", "a")
    assert isinstance(TmuxSession(host, "@1", "a"), Session)
