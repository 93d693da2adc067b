"""
Named function stores for processors and modifiers.

Registries belong to a single model instance and are meant to be populated
before the first extraction reads them; there is no removal operation.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from payloadmapper.mapping.exceptions import ConfigurationError
from payloadmapper.mapping.paths import UNDEFINED


@dataclass(frozen=True)
class ModifierResult:
    """
    What a modifier hands back to the chain.

    value: replaces the accumulator unless left as UNDEFINED
    stop: halts the rest of the chain
    """
    value: Any = UNDEFINED
    stop: bool = False

    @property
    def has_value(self) -> bool:
        return self.value is not UNDEFINED

    @classmethod
    def coerce(cls, result: Any) -> 'ModifierResult':
        """
        Normalize whatever a modifier returned.

        Accepts a ModifierResult, None (no change) or a mapping with optional
        'value' and 'break' keys, e.g. {'value': 'abc'} or {'break': True}.
        """
        if isinstance(result, cls):
            return result
        if result is None:
            return cls()
        if isinstance(result, Mapping):
            return cls(
                value=result.get('value', UNDEFINED),
                stop=bool(result.get('break', False)),
            )
        raise TypeError(
            f"Modifier must return a mapping, ModifierResult or None, got {type(result).__name__}"
        )


class Registry:
    """Name -> callable store with explicit single and bulk registration."""

    def __init__(self, kind: str = "processor"):
        self.kind = kind
        self._items: Dict[str, Callable] = {}

    def register(self, name: Optional[str], func: Optional[Callable]) -> 'Registry':
        """
        Register a single callable.

        Raises:
            ConfigurationError: If the name or callable is missing, or the callable
                is not callable
        """
        if not name or func is None:
            raise ConfigurationError(f"You should specify both name and callback for a {self.kind}")
        if not callable(func):
            raise ConfigurationError(f"{self.kind.capitalize()} '{name}' is not callable")
        self._items[name] = func
        return self

    def register_bulk(self, items: Mapping[str, Callable]) -> 'Registry':
        """Additive shallow merge; existing names are overwritten."""
        for name, func in items.items():
            self.register(name, func)
        return self

    def get(self, name: str) -> Optional[Callable]:
        return self._items.get(name)

    def names(self):
        return list(self._items.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self):
        return f"Registry({self.kind}, {len(self._items)} registered)"
