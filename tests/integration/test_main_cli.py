"""
Integration tests for the graftconf command-line tool (graftconf/main.py).

Runs main() end to end against the sample classes and checks exit codes and
what ends up on stdout/stderr.
"""
import pytest

from graftconf.main import load_class, main, snapshot
from sample_models import TopLevel

TOP = "sample_models:TopLevel"
OTHER = "sample_models:Other"
CREDENTIALS = "sample_models:Credentials"


# =============================================================================
# HELPERS
# =============================================================================

def test_load_class():
    assert load_class(TOP) is TopLevel


@pytest.mark.parametrize("target", ["sample_models", "sample_models:", ":TopLevel"])
def test_load_class_rejects_malformed_target(target):
    with pytest.raises(ValueError):
        load_class(target)


def test_load_class_rejects_non_class():
    with pytest.raises(ValueError):
        load_class("sample_models:option")


def test_snapshot_nests_sub_objects():
    top = TopLevel()
    top.foo = "x"

    assert snapshot(top) == {"foo": "x", "bar": {"foobar": 0, "barfoo": None}}


def test_snapshot_without_sub_object():
    top = TopLevel()
    top.bar = None

    assert snapshot(top) == {"foo": None, "bar": None}


# =============================================================================
# COMMANDS
# =============================================================================

def test_describe(capsys):
    assert main(["describe", TOP, CREDENTIALS]) == 0

    out = capsys.readouterr().out
    assert "sample_models.TopLevel" in out
    assert "--foo" in out
    assert "next" in out
    assert "required" in out


def test_json(capsys, resources_dir):
    config = str(resources_dir / "json_config_file_parser_test.json")

    assert main(["json", config, TOP, OTHER]) == 0

    out = capsys.readouterr().out
    assert '"foo": "foo"' in out
    assert '"foobar": 23' in out
    assert '"barfoo": "barfoo"' in out
    assert '"other": "other"' in out


def test_json_with_audit(capsys, resources_dir):
    config = str(resources_dir / "json_config_file_parser_test.json")

    assert main(["--audit", "json", config, TOP]) == 0

    out = capsys.readouterr().out
    assert "Property writes" in out
    assert "barf" in out


def test_json_missing_root(capsys, tmp_path):
    config = tmp_path / "app.json"
    config.write_text('{"elsewhere": {}}')

    assert main(["json", str(config), TOP]) == 1

    assert "Couldn't find configuration" in capsys.readouterr().err


def test_json_missing_file(capsys, tmp_path):
    assert main(["json", str(tmp_path / "absent.json"), TOP]) == 1

    assert "Configuration error" in capsys.readouterr().err


def test_json_invalid_utf8(capsys, tmp_path):
    config = tmp_path / "app.json"
    config.write_bytes(b'{"topLevel": {"foo": "\xff"}}')

    assert main(["json", str(config), TOP]) == 1

    assert "Configuration error" in capsys.readouterr().err


def test_args(capsys):
    assert main(["args", TOP, "--", "--foo", "bar", "--foobar", "7"]) == 0

    out = capsys.readouterr().out
    assert '"foo": "bar"' in out
    assert '"foobar": 7' in out


def test_args_failure_prints_usage(capsys):
    assert main(["args", TOP, "--", "--foobar", "seven"]) == 1

    err = capsys.readouterr().err
    assert "invalid int value" in err
    assert "Usage: graftconf args arguments..." in err
    assert "--barfoo" in err


def test_args_missing_required(capsys):
    assert main(["args", CREDENTIALS]) == 1

    assert "is required" in capsys.readouterr().err


def test_args_duplicate_flags(capsys):
    assert main(["args", TOP, TOP]) == 1

    assert "Cannot bind options" in capsys.readouterr().err


def test_unknown_class(capsys):
    assert main(["describe", "sample_models:Missing"]) == 2

    assert "Cannot load class" in capsys.readouterr().err
