"""JSON-backed catalog of command definitions."""
import json
import logging
from dataclasses import replace
from pathlib import Path

from termassist.config.settings import CatalogConfig
from termassist.exceptions import CatalogError

from .models import CommandDefinition
from .templates import sync_parameters

logger = logging.getLogger(__name__)


def resolve_catalog_path(
    config: CatalogConfig, home: Path, cwd: Path | None = None
) -> Path:
    """Pick the catalog file for the configured storage.

    Resolution order:
    1. Explicit ``path`` from config
    2. Global storage: ``<home>/<filename>``, created as an empty list
    3. Workspace storage: ``<cwd>/<filename>`` (may not exist yet)

    Args:
        config: Catalog settings.
        home: Directory for global state (e.g. ~/.termassist).
        cwd: Workspace directory. Defaults to the current directory.
    """
    if config.path:
        return Path(config.path).expanduser()

    if config.storage == "workspace":
        return (cwd or Path.cwd()) / config.filename

    path = home / config.filename
    if not path.exists():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("[]\n", encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Failed to create global {config.filename}: {e}") from e
        logger.info(f"Created global catalog at {path}")
    return path


class CommandCatalog:
    """Stores command definitions in a JSON file, keyed by label."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> list[CommandDefinition]:
        """Load all commands. A missing file is an empty catalog."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Failed to load terminal commands: {e}") from e

        if not isinstance(data, list):
            raise CatalogError(f"{self.path} must contain a JSON array")

        commands = []
        for index, entry in enumerate(data):
            try:
                commands.append(CommandDefinition.from_dict(entry))
            except (KeyError, TypeError, AttributeError) as e:
                raise CatalogError(
                    f"Invalid command at index {index} in {self.path}: {e}"
                ) from e
        return commands

    def save(self, commands: list[CommandDefinition]) -> None:
        """Replace the catalog contents."""
        payload = json.dumps([c.to_dict() for c in commands], indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload + "\n", encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Failed to save terminal commands: {e}") from e

    def get(self, label: str) -> CommandDefinition | None:
        """Get command by label."""
        return next((c for c in self.load() if c.label == label), None)

    def add(self, command: CommandDefinition) -> CommandDefinition:
        """Add a new command, normalizing its parameter list.

        Raises:
            CatalogError: If the label is already taken.
        """
        commands = self.load()
        if any(c.label == command.label for c in commands):
            raise CatalogError(f'Command "{command.label}" already exists')

        normalized = _normalize(command)
        commands.append(normalized)
        self.save(commands)
        logger.info(f'Added command "{command.label}"')
        return normalized

    def update(self, label: str, command: CommandDefinition) -> CommandDefinition:
        """Replace the command stored under label.

        The replacement may carry a new label, as long as it is not taken
        by another command.
        """
        commands = self.load()
        index = next((i for i, c in enumerate(commands) if c.label == label), None)
        if index is None:
            raise CatalogError(f'Command "{label}" not found')
        if command.label != label and any(c.label == command.label for c in commands):
            raise CatalogError(f'Command "{command.label}" already exists')

        normalized = _normalize(command)
        commands[index] = normalized
        self.save(commands)
        logger.info(f'Updated command "{label}"')
        return normalized

    def remove(self, label: str) -> bool:
        """Remove a command. Returns False if it did not exist."""
        commands = self.load()
        remaining = [c for c in commands if c.label != label]
        if len(remaining) == len(commands):
            return False
        self.save(remaining)
        logger.info(f'Removed command "{label}"')
        return True

    def groups(self) -> list[str]:
        """Get distinct group paths in first-seen order."""
        return list(dict.fromkeys(c.group for c in self.load()))

    def find_keybinding_conflict(
        self, keybinding: str, exclude_label: str | None = None
    ) -> CommandDefinition | None:
        """Get another command already using keybinding, if any."""
        wanted = keybinding.strip().lower()
        if not wanted:
            return None
        return next(
            (
                c
                for c in self.load()
                if c.keybinding
                and c.keybinding.strip().lower() == wanted
                and c.label != exclude_label
            ),
            None,
        )


def migrate_commands(source: CommandCatalog, target: CommandCatalog) -> int:
    """Copy every command from source into target, replacing its contents.

    Returns:
        Number of commands migrated.
    """
    commands = source.load()
    target.save(commands)
    logger.info(f"Migrated {len(commands)} commands from {source.path} to {target.path}")
    return len(commands)


def _normalize(command: CommandDefinition) -> CommandDefinition:
    return replace(
        command,
        group=command.group.strip("/") or "General",
        parameters=sync_parameters(command.command, command.parameters),
    )
