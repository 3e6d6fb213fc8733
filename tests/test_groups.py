"""Test command group hierarchy."""
from termassist.commands.groups import (
    build_group_hierarchy,
    filter_by_group,
    format_groups,
)
from termassist.commands.models import CommandDefinition


def test_build_group_hierarchy():
    """Paths are split into nested nodes."""
    root = build_group_hierarchy(["Git", "Docker/Compose", "Docker/Images"])

    assert list(root.subgroups) == ["Git", "Docker"]
    docker = root.subgroups["Docker"]
    assert docker.path == "Docker"
    assert list(docker.subgroups) == ["Compose", "Images"]
    assert docker.subgroups["Images"].path == "Docker/Images"


def test_build_group_hierarchy_implicit_parents():
    """Intermediate groups exist without their own commands."""
    root = build_group_hierarchy(["Dev/Backend/Database"])

    backend = root.subgroups["Dev"].subgroups["Backend"]
    assert backend.path == "Dev/Backend"
    assert backend.subgroups["Database"].path == "Dev/Backend/Database"


def test_format_groups_indents():
    """format_groups indents nested groups with a marker."""
    options = format_groups(build_group_hierarchy(["Dev/Backend", "Git"]))

    assert [o.label for o in options] == ["Dev", "  ↳ Backend", "Git"]
    assert [o.description for o in options] == ["(Dev)", "(Dev/Backend)", "(Git)"]
    assert options[1].path == "Dev/Backend"


def test_format_groups_empty():
    """No paths means no options."""
    assert format_groups(build_group_hierarchy([])) == []


def test_filter_by_group_includes_subgroups():
    """A group selects its own commands and its subgroups."""
    commands = [
        CommandDefinition(label="a", command="a", group="Dev"),
        CommandDefinition(label="b", command="b", group="Dev/Backend"),
        CommandDefinition(label="c", command="c", group="Developer"),
        CommandDefinition(label="d", command="d", group="Git"),
    ]

    assert [c.label for c in filter_by_group(commands, "Dev")] == ["a", "b"]
    assert [c.label for c in filter_by_group(commands, "Dev/Backend")] == ["b"]
    assert len(filter_by_group(commands, "")) == 4
