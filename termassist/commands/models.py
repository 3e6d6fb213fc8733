"""Data models for cataloged terminal commands."""
from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandParameter:
    """A named {placeholder} in a command template."""

    name: str
    description: str | None = None
    default_value: str | None = None
    optional: bool = False  # only honored when the placeholder is flag-bound

    def to_dict(self) -> dict[str, Any]:
        """Convert to the catalog's JSON layout."""
        data: dict[str, Any] = {"name": self.name}
        if self.description:
            data["description"] = self.description
        if self.default_value:
            data["defaultValue"] = self.default_value
        data["optional"] = self.optional
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommandParameter":
        """Create from catalog JSON."""
        return cls(
            name=data["name"],
            description=data.get("description"),
            default_value=data.get("defaultValue"),
            optional=bool(data.get("optional", False)),
        )


@dataclass
class CommandDefinition:
    """A reusable shell command template.

    The label is the identity key within a catalog. The group is a
    slash-delimited path such as "Development/Backend/Database".
    """

    label: str
    command: str
    description: str | None = None
    auto_execute: bool = True
    clear_terminal: bool | None = None
    escape_key_before: bool | None = None  # None means send escape
    group: str = "General"
    parameters: list[CommandParameter] = field(default_factory=list)
    keybinding: str | None = None

    @property
    def sends_escape(self) -> bool:
        """Whether pending input is cleared before dispatch."""
        return self.escape_key_before is not False

    def to_dict(self) -> dict[str, Any]:
        """Convert to the catalog's JSON layout, omitting unset keys."""
        data: dict[str, Any] = {
            "label": self.label,
            "command": self.command,
        }
        if self.description:
            data["description"] = self.description
        data["autoExecute"] = self.auto_execute
        if self.clear_terminal is not None:
            data["clearTerminal"] = self.clear_terminal
        if self.escape_key_before is not None:
            data["escapeKeyBefore"] = self.escape_key_before
        data["group"] = self.group
        if self.parameters:
            data["parameters"] = [p.to_dict() for p in self.parameters]
        if self.keybinding:
            data["keybinding"] = self.keybinding
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommandDefinition":
        """Create from catalog JSON.

        Older catalogs may lack autoExecute, group or parameters; those
        default to True, "General" and no parameters.
        """
        return cls(
            label=data["label"],
            command=data["command"],
            description=data.get("description"),
            auto_execute=bool(data.get("autoExecute", True)),
            clear_terminal=data.get("clearTerminal"),
            escape_key_before=data.get("escapeKeyBefore"),
            group=data.get("group") or "General",
            parameters=[
                CommandParameter.from_dict(p) for p in data.get("parameters") or []
            ],
            keybinding=data.get("keybinding"),
        )
