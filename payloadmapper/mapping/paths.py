"""
Dotted path lookups over nested data.

Data sources are arbitrary: dicts, lists, plain objects or any mix of them.
A lookup never raises on a missing segment; it reports what it found instead.
"""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterable, Union


class _Undefined:
    """Marker for a value that is absent, as opposed to present and None."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNDEFINED"

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


@dataclass(frozen=True)
class PathLookup:
    """Outcome of a path lookup."""
    found: bool
    value: Any = UNDEFINED
    missing_segment: str = None   # first segment that could not be read

    def __bool__(self):
        return self.found


def split_path(path: Union[str, Iterable[str], None]) -> list:
    """Split 'a.b.c' into segments; empty or None paths have no segments."""
    if not path:
        return []
    if isinstance(path, str):
        return [segment for segment in path.split('.') if segment]
    return [segment for segment in path if segment]


def get_item(obj: Any, key: str) -> PathLookup:
    """
    Read a single key from a mapping, sequence or object.

    Mappings are read by key, lists and tuples by integer index, anything else by
    attribute (so properties on a model object work too).
    """
    if obj is None or obj is UNDEFINED:
        return PathLookup(found=False, missing_segment=key)

    if isinstance(obj, Mapping):
        if key in obj:
            return PathLookup(found=True, value=obj[key])
        return PathLookup(found=False, missing_segment=key)

    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
        try:
            return PathLookup(found=True, value=obj[int(key)])
        except (ValueError, IndexError):
            return PathLookup(found=False, missing_segment=key)

    try:
        return PathLookup(found=True, value=getattr(obj, key))
    except AttributeError:
        return PathLookup(found=False, missing_segment=key)


def resolve_path(obj: Any, path: Union[str, Iterable[str], None]) -> PathLookup:
    """
    Walk a dotted path through nested data.

    Args:
        obj: Root object (dict, list, object)
        path: 'a.b.c' or a list of segments. An empty path returns the root itself.

    Returns:
        PathLookup with found=True and the value, or found=False and the segment
        at which the walk stopped.

    Example:
        >>> resolve_path({'user': {'name': 'Karen'}}, 'user.name').value
        'Karen'
        >>> resolve_path({'user': {}}, 'user.name').found
        False
    """
    current = obj
    for segment in split_path(path):
        lookup = get_item(current, segment)
        if not lookup.found:
            return lookup
        current = lookup.value
    if current is UNDEFINED:
        return PathLookup(found=False)
    return PathLookup(found=True, value=current)
