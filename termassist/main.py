"""Terminal Assistant entry point."""
import argparse
import asyncio
import logging
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from termassist.application import Application, create_application
from termassist.commands.catalog import (
    CommandCatalog,
    migrate_commands,
    resolve_catalog_path,
)
from termassist.commands.groups import (
    build_group_hierarchy,
    filter_by_group,
    format_groups,
)
from termassist.commands.models import CommandDefinition, CommandParameter
from termassist.commands.templates import sync_parameters
from termassist.config.settings import (
    Config,
    TerminalMode,
    default_config_path,
    load_config,
    save_config,
)
from termassist.exceptions import CatalogError, TerminalAssistantError
from termassist.execution.orchestrator import ExecutionState
from termassist.ui.console import render_commands, render_groups

logger = logging.getLogger(__name__)

MODE_CHOICES = [m.value for m in TerminalMode]
STORAGE_CHOICES = ["global", "workspace"]


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="termassist",
        description="Run saved command templates in terminal sessions.",
    )
    parser.add_argument(
        "-c", "--config", type=Path, help="Configuration file to use"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="action", required=True)

    run = sub.add_parser("run", help="Run a saved command")
    run.add_argument("label", help="Label of the command to run")
    run.add_argument(
        "--new", action="store_true", help="Run in a brand new terminal"
    )
    run.add_argument("--mode", choices=MODE_CHOICES, help="Override terminal mode")

    list_cmd = sub.add_parser("list", help="List saved commands")
    list_cmd.add_argument(
        "--group", default="", help="Only show this group and its subgroups"
    )

    sub.add_parser("groups", help="Show the command group tree")
    sub.add_parser("new-terminal", help="Open a new numbered terminal")

    mode = sub.add_parser("mode", help="Show or set the terminal mode")
    mode.add_argument("mode", nargs="?", choices=MODE_CHOICES)

    migrate = sub.add_parser(
        "migrate", help="Copy commands between storage locations and switch to the target"
    )
    migrate.add_argument("source", choices=STORAGE_CHOICES)
    migrate.add_argument("target", choices=STORAGE_CHOICES)

    add = sub.add_parser("add", help="Save a new command")
    add.add_argument("label", help="Unique label")
    add.add_argument("command", help="Command template with {placeholders}")
    add.add_argument("--group", default="General", help="Slash-delimited group path")
    add.add_argument("--keybinding", help="Key sequence that runs the command")
    _add_definition_options(add)

    edit = sub.add_parser("edit", help="Change a saved command")
    edit.add_argument("label", help="Label of the command to change")
    edit.add_argument("--label", dest="new_label", help="New label")
    edit.add_argument("--command", help="New command template")
    edit.add_argument("--group", help="New group path")
    _add_definition_options(edit)

    remove = sub.add_parser("remove", help="Delete a saved command")
    remove.add_argument("label")

    bind = sub.add_parser("bind", help="Assign a keybinding to a command")
    bind.add_argument("label")
    bind.add_argument("keybinding", help="Key sequence, or an empty string to clear")

    return parser


def parse_default(value: str) -> tuple[str, str]:
    """Parse a NAME=VALUE default."""
    name, sep, default = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{value}'")
    return name, default


def _add_definition_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--description")
    parser.add_argument(
        "--manual",
        dest="auto_execute",
        action="store_false",
        default=None,
        help="Always prompt for parameters",
    )
    parser.add_argument(
        "--auto",
        dest="auto_execute",
        action="store_true",
        default=None,
        help="Use parameter defaults without prompting",
    )
    parser.add_argument(
        "--clear",
        dest="clear_terminal",
        action="store_true",
        default=None,
        help="Clear the screen before running",
    )
    parser.add_argument(
        "--no-escape",
        dest="escape_key_before",
        action="store_false",
        default=None,
        help="Do not clear pending input before running",
    )
    parser.add_argument(
        "--default",
        dest="defaults",
        type=parse_default,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Default value for a parameter",
    )
    parser.add_argument(
        "--optional",
        action="append",
        default=[],
        metavar="NAME",
        help="Mark a flag-bound parameter as optional",
    )


def setup_logging(verbose: bool) -> None:
    """Configure root logging."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


async def run_command(
    app: Application, label: str, mode: str | None = None, force_new: bool = False
) -> int:
    """Execute a saved command by label. Returns the process exit code."""
    definition = app.catalog.get(label)
    if definition is None:
        app.notifier.error(f'Command "{label}" not found')
        return 1

    result = await app.orchestrator.execute_command(
        definition,
        mode=TerminalMode(mode) if mode else None,
        force_new=force_new,
    )
    return 1 if result.state is ExecutionState.FAILED else 0


async def open_terminal(app: Application) -> int:
    """Open a fresh numbered terminal."""
    session = await app.manager.create_fresh_terminal()
    await session.show()
    app.console.print(f"Opened {session.name}")
    return 0


def list_commands(app: Application, group: str = "") -> int:
    commands = filter_by_group(app.catalog.load(), group.strip("/"))
    render_commands(app.console, commands)
    return 0


def show_groups(app: Application) -> int:
    paths = app.catalog.groups()
    if not paths:
        app.console.print("No groups defined.")
        return 0
    render_groups(app.console, format_groups(build_group_hierarchy(paths)))
    return 0


def set_mode(app: Application, config_path: Path, mode: str | None) -> int:
    """Print the terminal mode, or persist a new one."""
    if mode is None:
        app.console.print(f"Terminal mode: {app.config.terminal.mode.value}")
        return 0

    app.config.terminal.mode = TerminalMode(mode)
    save_config(app.config, config_path)
    app.console.print(f"Terminal mode set to {mode}")
    return 0


def migrate_storage(
    config: Config, config_path: Path, source: str, target: str, cwd: Path | None = None
) -> int:
    """Copy the catalog from one storage location to another.

    The configuration is switched to the target storage afterwards.
    """
    if source == target:
        logger.warning(f"Source and target storage are both {source}")
        return 0

    def catalog_for(storage: str) -> CommandCatalog:
        settings = replace(config.catalog, storage=storage, path=None)
        return CommandCatalog(resolve_catalog_path(settings, config.home_path, cwd))

    count = migrate_commands(catalog_for(source), catalog_for(target))

    config.catalog.storage = target
    save_config(config, config_path)
    print(f"Migrated {count} commands from {source} to {target} storage")
    return 0


def build_parameters(
    command: str,
    existing: list[CommandParameter],
    defaults: list[tuple[str, str]],
    optional: list[str],
) -> list[CommandParameter]:
    """Sync parameters with the template and apply command line options.

    Raises:
        CatalogError: If an option names a parameter the template lacks.
    """
    params = sync_parameters(command, existing)
    names = {p.name for p in params}
    unknown = [n for n, _ in defaults if n not in names]
    unknown += [n for n in optional if n not in names]
    if unknown:
        raise CatalogError(f"Unknown parameters: {', '.join(unknown)}")

    default_values = dict(defaults)
    return [
        replace(
            p,
            default_value=default_values.get(p.name, p.default_value),
            optional=p.optional or p.name in optional,
        )
        for p in params
    ]


def _check_keybinding(app: Application, keybinding: str, label: str) -> None:
    other = app.catalog.find_keybinding_conflict(keybinding, exclude_label=label)
    if other is not None:
        raise CatalogError(
            f'Keybinding "{keybinding}" is already used by "{other.label}"'
        )


def add_command(app: Application, args: argparse.Namespace) -> int:
    """Save a new command from the add subcommand."""
    if args.keybinding:
        _check_keybinding(app, args.keybinding, args.label)

    definition = CommandDefinition(
        label=args.label,
        command=args.command,
        description=args.description,
        auto_execute=args.auto_execute is not False,
        clear_terminal=args.clear_terminal,
        escape_key_before=args.escape_key_before,
        group=args.group,
        parameters=build_parameters(args.command, [], args.defaults, args.optional),
        keybinding=args.keybinding or None,
    )
    saved = app.catalog.add(definition)
    app.console.print(f'Added "{saved.label}" to {saved.group}')
    return 0


def edit_command(app: Application, args: argparse.Namespace) -> int:
    """Apply the edit subcommand's changes to a saved command.

    Options that were not given keep their current values.
    """
    current = app.catalog.get(args.label)
    if current is None:
        raise CatalogError(f'Command "{args.label}" not found')

    command = args.command or current.command
    updated = replace(
        current,
        label=args.new_label or current.label,
        command=command,
        description=_pick(args.description, current.description),
        group=args.group or current.group,
        auto_execute=_pick(args.auto_execute, current.auto_execute),
        clear_terminal=_pick(args.clear_terminal, current.clear_terminal),
        escape_key_before=_pick(args.escape_key_before, current.escape_key_before),
        parameters=build_parameters(
            command, current.parameters, args.defaults, args.optional
        ),
    )
    app.catalog.update(args.label, updated)
    app.console.print(f'Updated "{updated.label}"')
    return 0


def remove_command(app: Application, label: str) -> int:
    if not app.catalog.remove(label):
        app.notifier.error(f'Command "{label}" not found')
        return 1
    app.console.print(f'Removed "{label}"')
    return 0


def bind_keybinding(app: Application, label: str, keybinding: str) -> int:
    """Assign a keybinding to a command. An empty keybinding clears it."""
    current = app.catalog.get(label)
    if current is None:
        raise CatalogError(f'Command "{label}" not found')

    keybinding = keybinding.strip()
    if keybinding:
        _check_keybinding(app, keybinding, label)

    app.catalog.update(label, replace(current, keybinding=keybinding or None))
    if keybinding:
        app.console.print(f'Bound "{label}" to {keybinding}')
    else:
        app.console.print(f'Cleared keybinding of "{label}"')
    return 0


def _pick(value, current):
    return current if value is None else value


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()

    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    config_path = args.config or default_config_path()
    config = load_config(config_path)

    try:
        if args.action == "migrate":
            return migrate_storage(config, config_path, args.source, args.target)

        app = create_application(config)

        if args.action == "run":
            return asyncio.run(run_command(app, args.label, args.mode, args.new))
        if args.action == "list":
            return list_commands(app, args.group)
        if args.action == "groups":
            return show_groups(app)
        if args.action == "new-terminal":
            return asyncio.run(open_terminal(app))
        if args.action == "mode":
            return set_mode(app, config_path, args.mode)
        if args.action == "add":
            return add_command(app, args)
        if args.action == "edit":
            return edit_command(app, args)
        if args.action == "remove":
            return remove_command(app, args.label)
        if args.action == "bind":
            return bind_keybinding(app, args.label, args.keybinding)
    except TerminalAssistantError as e:
        logger.error(f"{args.action} failed: {e}")
        print(f"Error: {e}")
        return 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
