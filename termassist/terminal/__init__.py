"""Terminal sessions: classification, hosts and selection policy."""
from .classifier import TASK_KEYWORDS, is_task_terminal
from .host import Session, SessionHost, TmuxSession, TmuxSessionHost
from .manager import TerminalSelection, TerminalSessionManager

__all__ = [
    "TASK_KEYWORDS",
    "is_task_terminal",
    "Session",
    "SessionHost",
    "TmuxSession",
    "TmuxSessionHost",
    "TerminalSelection",
    "TerminalSessionManager",
]
