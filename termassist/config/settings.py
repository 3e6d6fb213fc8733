"""Configuration settings."""
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TERMASSIST_CONFIG"


class TerminalMode(Enum):
    """Session selection policy."""

    REUSE_EXISTING = "reuseExisting"
    ALWAYS_NEW = "alwaysNew"
    SMART_REUSE = "smartReuse"


@dataclass
class DelayConfig:
    """Pauses between terminal operations, in milliseconds."""

    new_terminal_ms: int = 500  # shell init after creation
    reused_terminal_ms: int = 100
    escape_ms: int = 150
    clear_ms: int = 250
    force_close_ms: int = 200


@dataclass
class TerminalConfig:
    """Terminal session settings."""

    mode: TerminalMode = TerminalMode.REUSE_EXISTING
    name: str = "Terminal Assistant"  # prefix for terminals we create
    delays: DelayConfig = field(default_factory=DelayConfig)


@dataclass
class CatalogConfig:
    """Command catalog storage settings."""

    storage: str = "global"  # "global" or "workspace"
    path: str | None = None  # explicit file, overrides storage
    filename: str = "terminal-commands.json"


@dataclass
class Config:
    """Main configuration."""

    terminal: TerminalConfig = field(default_factory=TerminalConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    home_dir: str = "~/.termassist"

    @property
    def home_path(self) -> Path:
        """Directory holding global state."""
        return Path(self.home_dir).expanduser()


def default_config_path() -> Path:
    """Get config path from environment or the default location."""
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".termassist" / "config.yaml"


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from YAML file."""
    if path is None:
        path = default_config_path()
    else:
        path = Path(path)

    if not path.exists():
        return Config()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return _parse_config(data)


def parse_terminal_mode(value: Any) -> TerminalMode:
    """Parse a terminal mode string, falling back to reuseExisting."""
    try:
        return TerminalMode(value)
    except ValueError:
        logger.warning(f"Unknown terminal mode '{value}', using reuseExisting")
        return TerminalMode.REUSE_EXISTING


def _parse_config(data: dict[str, Any]) -> Config:
    """Parse config dictionary into Config object."""
    config = Config(home_dir=data.get("home_dir", "~/.termassist"))

    if "terminal" in data:
        terminal_data = data["terminal"] or {}
        delays_data = terminal_data.get("delays") or {}
        config.terminal = TerminalConfig(
            mode=parse_terminal_mode(terminal_data.get("mode", "reuseExisting")),
            name=terminal_data.get("name", "Terminal Assistant"),
            delays=DelayConfig(
                new_terminal_ms=delays_data.get("new_terminal_ms", 500),
                reused_terminal_ms=delays_data.get("reused_terminal_ms", 100),
                escape_ms=delays_data.get("escape_ms", 150),
                clear_ms=delays_data.get("clear_ms", 250),
                force_close_ms=delays_data.get("force_close_ms", 200),
            ),
        )

    if "catalog" in data:
        catalog_data = data["catalog"] or {}
        config.catalog = CatalogConfig(
            storage=catalog_data.get("storage", "global"),
            path=catalog_data.get("path"),
            filename=catalog_data.get("filename", "terminal-commands.json"),
        )
        if config.catalog.storage not in ("global", "workspace"):
            logger.warning(
                f"Unknown catalog storage '{config.catalog.storage}', using global"
            )
            config.catalog.storage = "global"

    return config


def _dump_config(config: Config) -> dict[str, Any]:
    """Convert Config back to the YAML layout."""
    delays = config.terminal.delays
    catalog: dict[str, Any] = {
        "storage": config.catalog.storage,
        "filename": config.catalog.filename,
    }
    if config.catalog.path:
        catalog["path"] = config.catalog.path

    return {
        "home_dir": config.home_dir,
        "terminal": {
            "mode": config.terminal.mode.value,
            "name": config.terminal.name,
            "delays": {
                "new_terminal_ms": delays.new_terminal_ms,
                "reused_terminal_ms": delays.reused_terminal_ms,
                "escape_ms": delays.escape_ms,
                "clear_ms": delays.clear_ms,
                "force_close_ms": delays.force_close_ms,
            },
        },
        "catalog": catalog,
    }


def save_config(config: Config, path: Path | str | None = None) -> Path:
    """Write configuration to YAML file.

    Args:
        config: Configuration to persist.
        path: Target file. Defaults to the same location load_config reads.

    Returns:
        Path that was written.
    """
    path = default_config_path() if path is None else Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(_dump_config(config), f, sort_keys=False)

    logger.info(f"Saved configuration to {path}")
    return path
