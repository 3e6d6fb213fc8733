"""Custom exceptions for termassist."""


class TerminalAssistantError(Exception):
    """Base exception for termassist."""

    pass


class TerminalUnavailableError(TerminalAssistantError):
    """No usable terminal session could be obtained."""

    pass


class TerminalHostError(TerminalAssistantError):
    """Session host call failed."""

    pass


class CatalogError(TerminalAssistantError):
    """Command catalog could not be read or written."""

    pass
