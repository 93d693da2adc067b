from typing import Any, Callable, Dict

import inflection


def _on_strings(transform_func: Callable[[str], str]) -> Callable[[Any], Any]:
    """Apply transform_func to strings; other values pass through untouched."""
    def _apply(value: Any) -> Any:
        return transform_func(value) if isinstance(value, str) else value
    return _apply


# Processors for identifier-like values (slugs, enum names, keys sent to the API)
CASE_PROCESSORS: Dict[str, Callable[[Any], Any]] = {
    'underscore': _on_strings(inflection.underscore),
    'camelize': _on_strings(inflection.camelize),
    'camelize_lower': _on_strings(lambda s: inflection.camelize(s, uppercase_first_letter=False)),
    'dasherize': _on_strings(lambda s: inflection.dasherize(inflection.underscore(s))),
    'titleize': _on_strings(inflection.titleize),
    'parameterize': _on_strings(inflection.parameterize),
}
