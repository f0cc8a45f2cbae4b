"""
GRAFTCONF MAIN - Command-Line Tool

Commands:
    describe - Show the bindable properties of one or more classes
    json     - Configure fresh instances from a JSON file and print the result
    args     - Configure fresh instances from command-line flags and print the result

Classes are named as "module:QualName" and must be constructible without
arguments (nested configuration objects created in __init__).

Usage:
    # What can be bound on these classes?
    graftconf describe app.settings:ServerSettings

    # Dry-run a config file
    graftconf json config/app.json app.settings:ServerSettings app.settings:Database

    # Dry-run a command line (everything after -- goes to the bound classes)
    graftconf args app.settings:ServerSettings -- --port 8080 --verbose

    # Also list every property write
    graftconf --audit json config/app.json app.settings:ServerSettings
"""
import argparse
import importlib
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

import msgspec
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from graftconf.binders.command_line import CommandLineParser
from graftconf.binders.config_file import JsonConfigFileParser
from graftconf.core.exceptions import AccessorError, ConfigurationError, qualified_name
from graftconf.core.properties import describe
from graftconf.core.walker import structural_children
from graftconf.infrastructure.logger import BindingLogger


# =============================================================================
# HELPERS
# =============================================================================

def load_class(target: str) -> type:
    """Import a class named as 'module:QualName'."""
    module_name, sep, qualname = target.partition(":")
    if not sep or not module_name or not qualname:
        raise ValueError(f"Expected module:Class, got {target!r}")

    obj: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        obj = getattr(obj, part)
    if not isinstance(obj, type):
        raise ValueError(f"{target} is not a class")
    return obj


def snapshot(obj: Any) -> Dict[str, Any]:
    """Current values of all readable properties, nested objects as dicts."""
    descriptor = describe(type(obj))
    children = {prop.name: child for prop, child in structural_children(obj, descriptor)}

    result: Dict[str, Any] = {}
    for prop in descriptor.readable():
        if prop.name in children:
            result[prop.name] = snapshot(children[prop.name])
        else:
            result[prop.name] = prop.read(obj)
    return result


def _print_snapshot(console: Console, objects: Sequence[Any]) -> None:
    data = {qualified_name(type(obj)): snapshot(obj) for obj in objects}
    console.print_json(msgspec.json.encode(data, enc_hook=str).decode("utf-8"))


def _print_audit(console: Console, audit: BindingLogger) -> None:
    table = Table(title="Property writes")
    table.add_column("#", justify="right")
    table.add_column("Source")
    table.add_column("Property")
    table.add_column("From")
    table.add_column("Value")
    for event in audit.get_events():
        table.add_row(
            str(event.sequence),
            event.source.value,
            f"{event.owner}.{event.property_name}",
            event.binding_name,
            escape(event.value_repr),
        )
    console.print(table)


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_describe(args, console: Console, err_console: Console) -> int:
    """Handle describe command - list discovered properties."""
    for cls in args.classes:
        descriptor = describe(cls)
        table = Table(title=qualified_name(cls))
        table.add_column("Property")
        table.add_column("JSON name")
        table.add_column("Type")
        table.add_column("Option")
        table.add_column("Access")
        table.add_column("Nested")
        for prop in descriptor:
            access = ("r" if prop.readable else "-") + ("w" if prop.writable else "-")
            table.add_row(
                prop.name,
                prop.binding_name + (" (required)" if prop.required else ""),
                prop.declared_type.__name__ if prop.declared_type else "?",
                ", ".join(prop.option.flags) if prop.option else "",
                access,
                "no" if prop.is_leaf else "yes",
            )
        console.print(table)
    return 0


def cmd_json(args, console: Console, err_console: Console) -> int:
    """Handle json command - configure instances from a JSON file."""
    objects = [cls() for cls in args.classes]
    audit = BindingLogger()
    try:
        parser = JsonConfigFileParser(args.config, binding_logger=audit)
        parser.configure(*objects)
    except ConfigurationError as e:
        err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        return 1

    _print_snapshot(console, objects)
    if args.audit:
        _print_audit(console, audit)
    return 0


def cmd_args(args, console: Console, err_console: Console) -> int:
    """Handle args command - configure instances from command-line flags."""
    objects = [cls() for cls in args.classes]
    audit = BindingLogger()
    try:
        binder = CommandLineParser(*objects, prog="graftconf args", binding_logger=audit)
    except ConfigurationError as e:
        err_console.print(f"[bold red]Cannot bind options:[/bold red] {escape(str(e))}")
        return 1

    try:
        binder.parse(*args.bound_args)
    except ConfigurationError as e:
        err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        binder.usage("graftconf args", sys.stderr)
        return 1

    _print_snapshot(console, objects)
    if args.audit:
        _print_audit(console, audit)
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graftconf",
        description="graftconf - bind JSON and command-line configuration onto live objects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--audit", action="store_true", help="List every property write")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    describe_parser = subparsers.add_parser("describe", help="Show bindable properties")
    describe_parser.add_argument("classes", nargs="+", metavar="module:Class", help="Classes to describe")
    describe_parser.set_defaults(func=cmd_describe)

    json_parser = subparsers.add_parser("json", help="Configure instances from a JSON file")
    json_parser.add_argument("config", help="Path to the JSON configuration file")
    json_parser.add_argument("classes", nargs="+", metavar="module:Class", help="Classes to instantiate")
    json_parser.set_defaults(func=cmd_json)

    args_parser = subparsers.add_parser("args", help="Configure instances from flags given after --")
    args_parser.add_argument("classes", nargs="+", metavar="module:Class", help="Classes to instantiate")
    args_parser.set_defaults(func=cmd_args)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with subcommands."""
    argv = list(sys.argv[1:] if argv is None else argv)

    # Everything after -- belongs to the bound classes, not to this tool
    bound_args: List[str] = []
    if "--" in argv:
        split = argv.index("--")
        argv, bound_args = argv[:split], argv[split + 1:]

    parser = build_parser()
    args = parser.parse_args(argv)
    args.bound_args = bound_args

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    console = Console()
    err_console = Console(stderr=True)

    try:
        args.classes = [load_class(target) for target in args.classes]
    except (ImportError, AttributeError, ValueError) as e:
        err_console.print(f"[bold red]Cannot load class:[/bold red] {escape(str(e))}")
        return 2

    try:
        return args.func(args, console, err_console)
    except AccessorError as e:
        err_console.print(f"[bold red]Accessor error:[/bold red] {escape(str(e))}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
