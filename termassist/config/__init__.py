"""Configuration module."""
from .settings import (
    CatalogConfig,
    Config,
    DelayConfig,
    TerminalConfig,
    TerminalMode,
    default_config_path,
    load_config,
    parse_terminal_mode,
    save_config,
)

__all__ = [
    "CatalogConfig",
    "Config",
    "DelayConfig",
    "TerminalConfig",
    "TerminalMode",
    "default_config_path",
    "load_config",
    "parse_terminal_mode",
    "save_config",
]
