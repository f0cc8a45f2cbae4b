"""
Unit tests for graftconf/core/annotations.py - binding metadata decorators
"""
import msgspec
import pytest

from graftconf.core.annotations import (
    JsonPropertySpec,
    OptionSpec,
    get_json_property,
    get_option,
    get_root_name,
    json_property,
    json_root_name,
    option,
)


@json_root_name("server")
class Server:
    pass


class SubServer(Server):
    pass


class TestOptionDecorator:

    def test_spec_attached_to_function(self):
        @option("--port", "-p", usage="listen port", metavar="PORT", required=True)
        def setter(self, value):
            pass

        spec = get_option(setter)
        assert spec == OptionSpec(
            name="--port", aliases=("-p",), usage="listen port", metavar="PORT", required=True,
        )
        assert spec.flags == ("--port", "-p")

    def test_defaults(self):
        @option("--host")
        def setter(self, value):
            pass

        spec = get_option(setter)
        assert spec.aliases == ()
        assert spec.usage == ""
        assert spec.metavar is None
        assert not spec.required

    def test_spec_is_frozen(self):
        @option("--host")
        def setter(self, value):
            pass

        with pytest.raises(AttributeError):
            get_option(setter).name = "--other"

    def test_undecorated(self):
        assert get_option(lambda: None) is None
        assert get_option(None) is None


class TestJsonPropertyDecorator:

    def test_named(self):
        @json_property("max-connections", required=True)
        def getter(self):
            pass

        assert get_json_property(getter) == JsonPropertySpec(name="max-connections", required=True)

    def test_required_without_rename(self):
        @json_property(required=True)
        def getter(self):
            pass

        spec = get_json_property(getter)
        assert spec.name is None
        assert spec.required

    def test_spec_encodes(self):
        spec = JsonPropertySpec(name="a", required=False)

        assert msgspec.json.decode(msgspec.json.encode(spec)) == {"name": "a", "required": False}


class TestRootName:

    def test_declared(self):
        assert get_root_name(Server) == "server"

    def test_not_inherited(self):
        assert get_root_name(SubServer) is None

    def test_absent(self):
        assert get_root_name(int) is None
