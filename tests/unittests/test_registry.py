"""
Unit tests for processor/modifier registries and modifier result normalization.
"""
import pytest

from payloadmapper.mapping.exceptions import ConfigurationError
from payloadmapper.mapping.paths import UNDEFINED
from payloadmapper.mapping.registry import ModifierResult, Registry


def identity(value):
    return value


class TestRegistry:

    def test_register_and_get(self):
        registry = Registry("processor").register("same", identity)

        assert "same" in registry
        assert registry.get("same") is identity
        assert registry.get("other") is None
        assert len(registry) == 1

    @pytest.mark.parametrize("name,func", [
        (None, identity),
        ("", identity),
        ("name", None),
    ])
    def test_missing_name_or_callback(self, name, func):
        with pytest.raises(ConfigurationError, match="both name and callback"):
            Registry("processor").register(name, func)

    def test_non_callable(self):
        with pytest.raises(ConfigurationError, match="Modifier 'x' is not callable"):
            Registry("modifier").register("x", 42)

    def test_bulk_merge_overwrites_existing(self):
        replacement = lambda value: value  # noqa: E731
        registry = Registry().register_bulk({"a": identity, "b": identity})
        registry.register_bulk({"b": replacement, "c": identity})

        assert registry.names() == ["a", "b", "c"]
        assert registry.get("b") is replacement
        assert list(registry) == ["a", "b", "c"]

    def test_bulk_rejects_bad_entries(self):
        with pytest.raises(ConfigurationError):
            Registry().register_bulk({"ok": identity, "bad": "not a function"})


class TestModifierResult:

    def test_none_means_no_change(self):
        result = ModifierResult.coerce(None)
        assert not result.has_value
        assert not result.stop

    def test_mapping_with_value_and_break(self):
        result = ModifierResult.coerce({'value': 'abc', 'break': True})
        assert result.value == 'abc'
        assert result.stop

    def test_falsy_value_is_still_a_value(self):
        assert ModifierResult.coerce({'value': None}).has_value
        assert ModifierResult.coerce({'value': 0}).has_value
        assert not ModifierResult.coerce({'value': UNDEFINED}).has_value

    def test_instance_passes_through(self):
        result = ModifierResult(value=1)
        assert ModifierResult.coerce(result) is result

    def test_unexpected_type_raises(self):
        with pytest.raises(TypeError, match="got str"):
            ModifierResult.coerce("value")
