"""Hierarchical command groups built from slash-delimited paths."""
from dataclasses import dataclass, field
from typing import Iterable

from .models import CommandDefinition


@dataclass
class GroupNode:
    """One level of the group tree."""

    name: str
    path: str  # full path like "Development/Backend"
    subgroups: dict[str, "GroupNode"] = field(default_factory=dict)


@dataclass
class GroupOption:
    """A group entry formatted for a picker."""

    label: str
    description: str
    path: str


def build_group_hierarchy(paths: Iterable[str]) -> GroupNode:
    """Build a tree from group paths.

    Args:
        paths: Paths such as ["Git", "Docker/Compose", "Docker/Images"].

    Returns:
        Root node (empty name and path) whose subgroups are the top-level
        groups, in first-seen order.
    """
    root = GroupNode(name="", path="")

    for path in paths:
        current = root
        current_path = ""
        for segment in path.split("/"):
            current_path = f"{current_path}/{segment}" if current_path else segment
            if segment not in current.subgroups:
                current.subgroups[segment] = GroupNode(name=segment, path=current_path)
            current = current.subgroups[segment]

    return root


def format_groups(node: GroupNode, level: int = 0) -> list[GroupOption]:
    """Flatten a group tree into indented picker entries, depth first."""
    options = []
    indent = "  " * level

    for subgroup in node.subgroups.values():
        marker = "↳ " if level > 0 else ""
        options.append(
            GroupOption(
                label=f"{indent}{marker}{subgroup.name}",
                description=f"({subgroup.path})",
                path=subgroup.path,
            )
        )
        options.extend(format_groups(subgroup, level + 1))

    return options


def filter_by_group(
    commands: Iterable[CommandDefinition], path: str
) -> list[CommandDefinition]:
    """Get commands in a group or any of its subgroups.

    An empty path selects every command.
    """
    if not path:
        return list(commands)
    prefix = path + "/"
    return [c for c in commands if c.group == path or c.group.startswith(prefix)]
