"""Command catalog and template engine."""
from .models import CommandDefinition, CommandParameter
from .templates import (
    FLAG_PATTERNS,
    FlagPattern,
    collapse_whitespace,
    extract_flag_for_parameter,
    extract_parameter_names,
    is_flag_parameter,
    remove_flag_parameter,
    substitute_parameters,
    sync_parameters,
)
from .catalog import CommandCatalog, migrate_commands, resolve_catalog_path
from .groups import build_group_hierarchy, filter_by_group, format_groups

__all__ = [
    "CommandDefinition",
    "CommandParameter",
    "FLAG_PATTERNS",
    "FlagPattern",
    "collapse_whitespace",
    "extract_flag_for_parameter",
    "extract_parameter_names",
    "is_flag_parameter",
    "remove_flag_parameter",
    "substitute_parameters",
    "sync_parameters",
    "CommandCatalog",
    "migrate_commands",
    "resolve_catalog_path",
    "build_group_hierarchy",
    "filter_by_group",
    "format_groups",
]
