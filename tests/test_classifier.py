"""Test task terminal classification."""
import pytest

from termassist.terminal.classifier import TASK_KEYWORDS, is_task_terminal


def test_task_keywords_exist():
    """TASK_KEYWORDS contains expected keywords."""
    assert "watch" in TASK_KEYWORDS
    assert "jest" in TASK_KEYWORDS
    assert "run " in TASK_KEYWORDS


@pytest.mark.parametrize(
    "name",
    [
        "npm: build",
        "jest --watch",
        "dotnet: watch run",
        "yarn: start",
        "pnpm: dev",
        "task - lint",
        "tasks: compile",
        "my-app@1.2.3 start",
        "Webpack Dev Server",
        "Python Debug Console",
        "go run main.go",
    ],
)
def test_is_task_terminal_matches(name):
    """is_task_terminal detects task-owned terminals."""
    assert is_task_terminal(name) is True


@pytest.mark.parametrize("name", ["bash", "zsh", "pwsh", "Terminal Assistant #3"])
def test_is_task_terminal_safe(name):
    """is_task_terminal allows ordinary shells and our own terminals."""
    assert is_task_terminal(name) is False


def test_is_task_terminal_empty():
    """Missing names are never task terminals."""
    assert is_task_terminal("") is False
    assert is_task_terminal(None) is False


def test_is_task_terminal_case_insensitive():
    """is_task_terminal ignores case."""
    assert is_task_terminal("NPM: BUILD") is True
    assert is_task_terminal("JEST") is True


def test_own_terminal_suppresses_task_run_compile():
    """Our own terminals may contain task, run and compile."""
    assert is_task_terminal("Terminal Assistant - task") is False
    assert is_task_terminal("Terminal Assistant compile") is False


def test_own_terminal_keeps_run_with_space():
    """The "run " keyword is not suppressed for our own terminals."""
    assert is_task_terminal("Terminal Assistant run x") is True


def test_own_terminal_other_keywords_still_apply():
    """Only task, run and compile are suppressed."""
    assert is_task_terminal("Terminal Assistant watch") is True


def test_own_terminal_prefix_patterns_not_suppressed():
    """Prefix patterns apply even to names containing our prefix."""
    assert is_task_terminal("task: terminal assistant") is True
    assert is_task_terminal("dotnet task terminal assistant") is True


def test_custom_own_prefix():
    """The own-terminal prefix is configurable."""
    assert is_task_terminal("Runner compile", own_prefix="Runner") is False
    assert is_task_terminal("Terminal Assistant compile", own_prefix="Runner") is True
