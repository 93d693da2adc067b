"""
Container: a named field-spec mapping plus the data it reads from.
"""
from types import MappingProxyType
from typing import Any, Mapping, Optional

from payloadmapper.mapping.field_spec import FieldSpec
from payloadmapper.mapping.paths import UNDEFINED, PathLookup, resolve_path


class Container:
    """
    Named bundle of field specs and a data source.

    The field-spec mapping is fixed at declaration; the data source can be
    swapped later with set_source().
    """

    def __init__(self, model, name: str, fields: Mapping[str, str], source: Any = None):
        self.model = model   # owning model, used for lookups only
        self.name = name
        self._fields = MappingProxyType(dict(fields))
        self.data = source if source is not None else {}

    @property
    def fields(self) -> Mapping[str, str]:
        """Read-only effective field-spec mapping (raw key -> processor spec)."""
        return self._fields

    def field_specs(self):
        """Yield (FieldSpec, processor spec) pairs in declaration order."""
        for key, processor_spec in self._fields.items():
            yield FieldSpec.parse(key), processor_spec

    def set_source(self, source: Any) -> 'Container':
        """Replace the data source. Field specs are not re-resolved."""
        self.data = source if source is not None else {}
        return self

    def lookup(self, path: Optional[str]) -> PathLookup:
        return resolve_path(self.data, path)

    def get(self, path: Optional[str], default: Any = UNDEFINED) -> Any:
        """Read a dotted path from the data source."""
        lookup = self.lookup(path)
        return lookup.value if lookup.found else default

    def __repr__(self):
        return f"Container({self.name!r}, {len(self._fields)} fields)"
