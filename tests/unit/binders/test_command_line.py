"""
Unit tests for graftconf/binders/command_line.py - CommandLineParser

Tests:
- Flags reach setters at any nesting depth
- argparse failures surface as ConfigurationError
- Values apply immediately, even when a later flag fails
- Required options, duplicate flags, typed options
- Usage output and audit events
"""
import argparse
import io
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pytest

from graftconf.binders.command_line import CommandLineParser
from graftconf.core.annotations import option
from graftconf.core.exceptions import ConfigurationError, MissingRequiredValueError
from graftconf.infrastructure.logger import BindingSource
from sample_models import Color, Credentials, NextLevel, Other, TopLevel, Tuning


def make_chain(depth):
    """A chain of `depth` nested objects, each owning a --levelN option."""
    child = None
    for level in range(depth - 1, -1, -1):
        child = _make_level(level)(child)
    return child


def _make_level(level):
    flag = f"--level{level}"

    class Level:
        def __init__(self, child):
            self._value = None
            self._child = child

        @property
        def value(self) -> Optional[int]:
            return self._value

        @value.setter
        @option(flag, usage=f"level {level}")
        def value(self, value: int) -> None:
            self._value = value

        # Local class, so the annotation is left unresolved and the
        # runtime value decides whether to descend
        @property
        def child(self) -> "Optional[Level]":
            return self._child

    return Level


class ListOption:
    @property
    def names(self) -> list:
        return []

    @names.setter
    @option("--names")
    def names(self, value: list) -> None:
        pass


class ExplodingSetter:
    @property
    def size(self) -> int:
        return 0

    @size.setter
    @option("--size")
    def size(self, value: int) -> None:
        raise ValueError("size must be positive")


# =============================================================================
# BASIC BINDING
# =============================================================================

class TestParse:
    """Parsing flags into the bound object graph."""

    def test_nested_options(self, top_level):
        parser = CommandLineParser(top_level)

        parser.parse("--foo", "foo", "--foobar", "23", "--barfoo", "barfoo")

        assert top_level.foo == "foo"
        assert top_level.bar.foobar == 23
        assert top_level.bar.barfoo == "barfoo"

    def test_arguments_as_list(self, top_level):
        parser = CommandLineParser(top_level)

        parser.parse(["--foobar", "5"])

        assert top_level.bar.foobar == 5

    def test_no_arguments_leaves_objects_untouched(self, top_level):
        CommandLineParser(top_level).parse()

        assert top_level.foo is None
        assert top_level.bar.foobar == 0

    def test_multiple_roots(self, top_level):
        tuning = Tuning()
        parser = CommandLineParser(top_level, tuning)

        parser.parse("--foo", "x", "--ratio", "0.5")

        assert top_level.foo == "x"
        assert tuning.ratio == 0.5

    def test_none_sub_object_contributes_no_options(self, top_level):
        top_level.bar = None
        parser = CommandLineParser(top_level)

        assert [spec.name for spec in parser.options] == ["--foo"]
        with pytest.raises(ConfigurationError):
            parser.parse("--foobar", "1")

    def test_options_in_registration_order(self, top_level):
        parser = CommandLineParser(top_level)

        assert [spec.name for spec in parser.options] == ["--foo", "--foobar", "--barfoo"]

    def test_bind_adds_more_objects(self, top_level):
        parser = CommandLineParser(top_level)
        creds = Credentials()
        parser.bind(creds)

        parser.parse("--user", "ada")

        assert creds.user == "ada"

    def test_parser_is_argparse(self, top_level):
        assert isinstance(CommandLineParser(top_level).parser, argparse.ArgumentParser)

    @pytest.mark.parametrize("depth", [1, 3, 6])
    def test_any_nesting_depth(self, depth):
        root = make_chain(depth)
        parser = CommandLineParser(root)
        args = []
        for level in range(depth):
            args += [f"--level{level}", str(level * 10)]

        parser.parse(*args)

        node, level = root, 0
        while node is not None:
            assert node.value == level * 10
            node, level = node.child, level + 1
        assert level == depth


# =============================================================================
# FAILURES
# =============================================================================

class TestParseErrors:
    """Every parse fault is a ConfigurationError."""

    def test_unknown_flag(self, top_level):
        with pytest.raises(ConfigurationError) as exc_info:
            CommandLineParser(top_level).parse("--nope")

        assert "--nope" in str(exc_info.value)

    def test_missing_value(self, top_level):
        with pytest.raises(ConfigurationError) as exc_info:
            CommandLineParser(top_level).parse("--foo")

        assert "--foo" in str(exc_info.value)

    def test_bad_int(self, top_level):
        with pytest.raises(ConfigurationError) as exc_info:
            CommandLineParser(top_level).parse("--foobar", "abc")

        assert "invalid int value" in str(exc_info.value)

    def test_values_apply_immediately(self, top_level):
        parser = CommandLineParser(top_level)

        with pytest.raises(ConfigurationError):
            parser.parse("--foo", "applied", "--foobar", "not-a-number")

        assert top_level.foo == "applied"

    def test_setter_failure(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CommandLineParser(ExplodingSetter()).parse("--size", "3")

        assert "size setter" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_duplicate_flag_fails_at_construction(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CommandLineParser(NextLevel(), NextLevel())

        assert "--foobar" in str(exc_info.value)

    def test_collection_option_rejected_at_construction(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CommandLineParser(ListOption())

        assert "--names" in str(exc_info.value)

    def test_missing_required(self):
        parser = CommandLineParser(Credentials())

        with pytest.raises(MissingRequiredValueError) as exc_info:
            parser.parse()

        assert str(exc_info.value) == 'Configuration value "--user" is required'
        assert isinstance(exc_info.value, ConfigurationError)

    def test_required_satisfied_per_parse(self):
        creds = Credentials()
        parser = CommandLineParser(creds)

        parser.parse("--user", "ada")
        with pytest.raises(MissingRequiredValueError):
            parser.parse()

        assert creds.user == "ada"


# =============================================================================
# TYPED OPTIONS
# =============================================================================

class TestTypedOptions:
    """Conversion driven by the declared property type."""

    def test_boolean_flag_takes_no_value(self):
        tuning = Tuning()

        CommandLineParser(tuning).parse("--verbose")

        assert tuning.verbose is True

    def test_float(self):
        tuning = Tuning()

        CommandLineParser(tuning).parse("--ratio", "0.25")

        assert tuning.ratio == 0.25

    def test_decimal(self):
        tuning = Tuning()

        CommandLineParser(tuning).parse("--budget", "10.05")

        assert tuning.budget == Decimal("10.05")

    def test_bad_decimal(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CommandLineParser(Tuning()).parse("--budget", "lots")

        assert "--budget" in str(exc_info.value)

    @pytest.mark.parametrize("text", ["GREEN", "green"])
    def test_enum_by_name_or_value(self, text):
        tuning = Tuning()

        CommandLineParser(tuning).parse("--color", text)

        assert tuning.color is Color.GREEN

    def test_bad_enum(self):
        with pytest.raises(ConfigurationError):
            CommandLineParser(Tuning()).parse("--color", "BLUE")

    def test_path_through_alias(self):
        tuning = Tuning()

        CommandLineParser(tuning).parse("-o", "out/report.txt")

        assert tuning.output == Path("out/report.txt")

    def test_read_only_collection_is_ignored(self):
        parser = CommandLineParser(Tuning())

        assert "--tags" not in [spec.name for spec in parser.options]


# =============================================================================
# USAGE AND AUDIT
# =============================================================================

class TestUsage:

    def test_usage_lists_options(self, top_level):
        stream = io.StringIO()

        CommandLineParser(top_level).usage("Test", stream)

        text = stream.getvalue()
        assert text.startswith("Usage: Test arguments...\n")
        assert "--foo f" in text
        assert "--foobar N" in text
        assert "barfoo" in text

    def test_usage_shows_enum_choices(self):
        stream = io.StringIO()

        CommandLineParser(Tuning()).usage("tune", stream)

        assert "[RED | GREEN]" in stream.getvalue()

    def test_usage_escapes_percent(self):
        class Percent:
            @property
            def share(self) -> int:
                return 0

            @share.setter
            @option("--share", usage="share in %")
            def share(self, value: int) -> None:
                pass

        stream = io.StringIO()
        CommandLineParser(Percent()).usage("p", stream)

        assert "share in %" in stream.getvalue()


class TestAudit:

    def test_writes_are_logged(self, top_level, binding_logger):
        parser = CommandLineParser(top_level, binding_logger=binding_logger)

        parser.parse("--foo", "foo", "--foobar", "23")

        events = binding_logger.get_events()
        assert [e.property_name for e in events] == ["foo", "foobar"]
        assert all(e.source is BindingSource.COMMAND_LINE for e in events)
        assert events[1].binding_name == "--foobar"
        assert events[1].value_repr == "23"
        assert events[1].owner.endswith("NextLevel")

    def test_unrelated_object_not_logged(self, other, binding_logger):
        CommandLineParser(other, binding_logger=binding_logger).parse()

        assert binding_logger.get_events() == []
