"""
Built-in processors and modifiers.

Processors take a value and return a new one. Modifiers take a value and the
JSON parameters written after ':' in the chain, and return a mapping with an
optional 'value' and an optional 'break' flag.
"""
import math
import re
from typing import Any, Dict

from payloadmapper.mapping.paths import UNDEFINED

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def to_int(value: Any) -> int:
    """Leading integer of the value; falsy or unparsable values become 0."""
    if not value or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if not value:
        return ''
    return str(value)


def to_array(value: Any) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return []


def to_bool(value: Any) -> bool:
    return bool(value)


def currency(sign: str):
    """Processor appending a currency sign unless the value already carries it."""
    def _append(value: Any) -> Any:
        if value is UNDEFINED or value is None:
            return value
        if isinstance(value, float) and value != value:  # NaN
            return value
        text = str(value)
        return text if sign in text else f"{text}{sign}"
    return _append


def _string_method(name: str):
    def _apply(value: Any) -> Any:
        return getattr(value, name)() if isinstance(value, str) else value
    return _apply


DEFAULT_PROCESSORS: Dict[str, Any] = {
    'int': to_int,
    'string': to_string,
    'array': to_array,
    'bool': to_bool,
    'usd': currency('$'),
    'kzt': currency('₸'),
    'trim': _string_method('strip'),
    'upper': _string_method('upper'),
    'lower': _string_method('lower'),
}


def strip_modifier(value: Any, length: Any) -> dict:
    """strip:N keeps the first N characters of a string."""
    if not isinstance(value, str):
        return {}
    return {'value': value[:to_int(length)]}


def _listed(value: Any, items: Any) -> bool:
    if not isinstance(items, list):
        items = [items]
    for item in items:
        if value is item:
            return True
        # strict: True is not 1, None is not UNDEFINED
        if isinstance(value, bool) != isinstance(item, bool) or value is UNDEFINED:
            continue
        if value == item:
            return True
    return False


def allow_modifier(value: Any, allowed: Any) -> dict:
    """allow:[...] lets only the listed values through the rest of the chain."""
    return {'break': not _listed(value, allowed)}


def skip_modifier(value: Any, skipped: Any) -> dict:
    """skip:[...] passes the listed values through untouched, e.g. skip:[null].string."""
    return {'break': _listed(value, skipped)}


def default_modifier(value: Any, fallback: Any) -> dict:
    """default:X replaces a falsy value with X."""
    return {'value': value or fallback}


DEFAULT_MODIFIERS: Dict[str, Any] = {
    'strip': strip_modifier,
    'allow': allow_modifier,
    'skip': skip_modifier,
    'default': default_modifier,
}
