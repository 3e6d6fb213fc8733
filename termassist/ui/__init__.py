"""Console user interface."""
from .console import ConsoleNotifier, ConsolePrompter, render_commands, render_groups

__all__ = ["ConsoleNotifier", "ConsolePrompter", "render_commands", "render_groups"]
