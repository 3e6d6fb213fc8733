"""Command execution."""
from .orchestrator import (
    ExecutionOrchestrator,
    ExecutionResult,
    ExecutionState,
    Notifier,
    PromptHost,
    build_prompt_text,
    clear_command,
    escape_sequence,
)

__all__ = [
    "ExecutionOrchestrator",
    "ExecutionResult",
    "ExecutionState",
    "Notifier",
    "PromptHost",
    "build_prompt_text",
    "clear_command",
    "escape_sequence",
]
