"""Detect terminals owned by build, watch and test tasks."""
import re

# Name of the terminals this tool creates (lowercase)
OWN_TERMINAL_PREFIX = "terminal assistant"

# Names that always mean a task terminal, checked before keywords
TASK_NAME_PATTERNS: list[re.Pattern] = [
    re.compile(r"^dotnet:"),
    re.compile(r"^task -|^task:|^tasks:"),
    re.compile(r"^npm:|^yarn:|^pnpm:"),
    # package script runners: "my-pkg@1.2.3"
    re.compile(r"^[a-z0-9_\-.]+@\d+\.\d+\.\d+"),
]

# Substrings that suggest a task terminal (must be lowercase)
TASK_KEYWORDS: list[str] = [
    "task",
    "watch",
    "npm",
    "yarn",
    "pnpm",
    "gulp",
    "grunt",
    "webpack",
    "build",
    "debug",
    "run ",
    "running",
    "jest",
    "mocha",
    "test",
    "serve",
    "dotnet",
    "compile",
]

# Keywords ignored when the name carries our own prefix. Compared by
# identity with TASK_KEYWORDS entries, so "run " is not covered by "run".
SELF_SUPPRESSED_KEYWORDS: frozenset[str] = frozenset({"task", "run", "compile"})


def is_task_terminal(name: str | None, own_prefix: str = OWN_TERMINAL_PREFIX) -> bool:
    """Check if a terminal name looks like a task terminal.

    Args:
        name: Terminal display name. Case-insensitive.
        own_prefix: Name prefix of terminals this tool creates.

    Returns:
        True if sending arbitrary commands to the terminal is unsafe.
    """
    if not name:
        return False

    lowered = name.lower()

    if "task" in lowered and "dotnet" in lowered:
        return True
    if any(pattern.search(lowered) for pattern in TASK_NAME_PATTERNS):
        return True

    is_own = own_prefix.lower() in lowered
    for keyword in TASK_KEYWORDS:
        if is_own and keyword in SELF_SUPPRESSED_KEYWORDS:
            continue
        if keyword in lowered:
            return True
    return False
