"""
GRAFTCONF COMMAND LINE BINDER - Flags Straight into Property Setters

Walks a set of configurable objects, registers every setter decorated with
@option as an argparse option, and lets argparse drive the setters while it
parses. argparse owns tokenising, type conversion and the usage listing.

Behaviour worth knowing:
- Values are applied the moment their flag is parsed. A failure later in the
  argument list does not undo earlier writes.
- A flag registered twice is an error when binding, not when parsing.
- Every parse fault surfaces as ConfigurationError with argparse's message.

Usage:
    parser = CommandLineParser(settings)
    try:
        parser.parse(*sys.argv[1:])
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        parser.usage("myapp", sys.stderr)
        sys.exit(1)
"""
import argparse
import collections.abc
import logging
import pathlib
from enum import Enum
from typing import Any, Callable, List, Optional, Set, TextIO, Tuple

from graftconf.core.annotations import OptionSpec
from graftconf.core.exceptions import (
    ConfigurationError,
    MissingRequiredValueError,
    qualified_name,
)
from graftconf.core.properties import ClassDescriptor, PropertyDescriptor
from graftconf.core.walker import walk
from graftconf.infrastructure.logger import BindingLogger, BindingSource

logger = logging.getLogger(__name__)


# =============================================================================
# ARGPARSE PLUMBING
# =============================================================================

class _EngineError(Exception):
    """argparse reported a problem with the arguments."""
    pass


class _BinderArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing and exiting."""

    def error(self, message):
        raise _EngineError(message)


class _SetterAction(argparse.Action):
    """Calls a property setter as soon as its flag is parsed."""

    def __init__(self, option_strings, dest, binder=None, target=None, prop=None, **kwargs):
        super().__init__(option_strings, dest, **kwargs)
        self.binder = binder
        self.target = target
        self.prop = prop

    def __call__(self, parser, namespace, values, option_string=None):
        if self.nargs == 0:
            values = True
        self.binder._apply(self.target, self.prop, option_string or self.option_strings[0], values)


def _enum_converter(enum_cls: type) -> Callable[[str], Enum]:
    def convert(text: str) -> Enum:
        try:
            return enum_cls[text]
        except KeyError:
            pass
        for member in enum_cls:
            if str(member.value) == text:
                return member
        raise ValueError(text)

    convert.__name__ = enum_cls.__name__
    return convert


def _type_converter(tp: type) -> Callable[[str], Any]:
    """Wrap a constructor so argparse reports any conversion failure as a bad value."""
    def convert(text: str) -> Any:
        try:
            return tp(text)
        except (TypeError, ValueError):
            raise
        except Exception as e:
            raise ValueError(text) from e

    convert.__name__ = tp.__name__
    return convert


_DEFAULT_METAVARS = {
    int: "N",
    float: "N",
    pathlib.PurePath: "FILE",
}


def _argument_kwargs(prop: PropertyDescriptor, spec: OptionSpec) -> dict:
    """argparse keyword arguments for a property, derived from its declared type."""
    declared = prop.declared_type
    kwargs = {"help": spec.usage.replace("%", "%%") if spec.usage else None}

    if declared is bool:
        kwargs["nargs"] = 0
        return kwargs

    if declared is None or declared is str:
        converter = None
    elif issubclass(declared, Enum):
        converter = _enum_converter(declared)
        kwargs["metavar"] = spec.metavar or "[" + " | ".join(m.name for m in declared) + "]"
    elif issubclass(declared, (collections.abc.Collection, type)):
        raise ConfigurationError(
            f"Option {spec.name} on {qualified_name(prop.owner)} has unsupported type {declared.__name__}"
        )
    else:
        converter = _type_converter(declared)

    kwargs["nargs"] = None
    kwargs["type"] = converter
    if "metavar" not in kwargs:
        default = next(
            (mv for tp, mv in _DEFAULT_METAVARS.items() if declared is not None and issubclass(declared, tp)),
            "VAL",
        )
        kwargs["metavar"] = spec.metavar or default
    return kwargs


# =============================================================================
# COMMAND LINE PARSER
# =============================================================================

class CommandLineParser:
    """
    Command-line binder for a graph of configurable objects.

    Setters on the classes to be configured are marked with @option. The
    object graph is navigated through property getters to find them.
    """

    def __init__(
        self,
        *objects: Any,
        prog: Optional[str] = None,
        binding_logger: Optional[BindingLogger] = None,
    ):
        """
        Args:
            objects: Configurable objects; sub-objects are found through getters
            prog: Program name used by argparse
            binding_logger: Receives an event for every property write

        Raises:
            ConfigurationError: If two properties claim the same flag or a getter fails
        """
        self._parser = _BinderArgumentParser(
            prog=prog,
            usage=argparse.SUPPRESS,
            add_help=False,
            allow_abbrev=False,
        )
        self.binding_logger = binding_logger
        self._options: List[Tuple[Any, PropertyDescriptor, OptionSpec]] = []
        self._seen: Set[str] = set()
        self.bind(*objects)

    @property
    def parser(self) -> argparse.ArgumentParser:
        """The underlying argparse engine."""
        return self._parser

    @property
    def options(self) -> List[OptionSpec]:
        """Registered options, in registration order."""
        return [spec for _, _, spec in self._options]

    # =========================================================================
    # BINDING
    # =========================================================================

    def bind(self, *objects: Any) -> None:
        """Register the options found in each object's subtree."""
        for obj in objects:
            walk(obj, self._register_node)

    def _register_node(self, obj: Any, descriptor: ClassDescriptor, path: str) -> None:
        for prop in descriptor.options():
            self._register(obj, prop, path)

    def _register(self, obj: Any, prop: PropertyDescriptor, path: str) -> None:
        spec = prop.option
        kwargs = _argument_kwargs(prop, spec)
        try:
            self._parser.add_argument(
                *spec.flags,
                action=_SetterAction,
                dest=f"{path}.{prop.name}",
                default=argparse.SUPPRESS,
                binder=self,
                target=obj,
                prop=prop,
                **kwargs,
            )
        except (argparse.ArgumentError, ValueError) as e:
            raise ConfigurationError(f"Cannot register option {spec.name} for {path}.{prop.name}: {e}") from e

        self._options.append((obj, prop, spec))
        logger.debug("Registered option %s -> %s.%s", spec.name, path, prop.name)

    # =========================================================================
    # PARSING
    # =========================================================================

    def parse(self, *args: str) -> None:
        """
        Parse the given command line, writing values into the bound objects.

        Accepts the arguments spread out or as a single list.

        Raises:
            ConfigurationError: If argparse rejects the arguments or a setter fails
            MissingRequiredValueError: If a required option was not given
        """
        if len(args) == 1 and isinstance(args[0], (list, tuple)):
            args = tuple(args[0])

        self._seen = set()
        try:
            self._parser.parse_args(list(args), argparse.Namespace())
        except _EngineError as e:
            logger.error("Command line error: %s", e)
            raise ConfigurationError(str(e)) from e

        for _, prop, spec in self._options:
            if spec.required and spec.name not in self._seen:
                raise MissingRequiredValueError(spec.name)

    def _apply(self, obj: Any, prop: PropertyDescriptor, flag: str, value: Any) -> None:
        prop.write(obj, value)
        self._seen.add(prop.option.name)
        if self.binding_logger is not None:
            self.binding_logger.log_write(
                BindingSource.COMMAND_LINE, qualified_name(type(obj)), prop.name, flag, value,
            )

    # =========================================================================
    # USAGE
    # =========================================================================

    def usage(self, command: str, stream: TextIO) -> None:
        """Write a one-line summary and the per-option listing to stream."""
        stream.write(f"Usage: {command} arguments...\n")
        stream.write(self._parser.format_help())


__all__ = [
    "CommandLineParser",
]
