"""
Processor chains.

A processor spec is a dot-separated list of steps applied left to right:

    int                       processor
    string.strip:15           processor, then modifier 'strip' with params 15
    allow:[null].string       modifier that may stop the chain early
    @user.name                indirect: use whatever spec container 'user' has for 'name'
"""
import json
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Tuple

from payloadmapper.mapping.exceptions import FieldReferenceError, RecursionLimitExceeded, SpecParseError
from payloadmapper.mapping.field_spec import CONTAINER_MARKER, find_field_key
from payloadmapper.mapping.paths import UNDEFINED
from payloadmapper.mapping.registry import ModifierResult, Registry

# Indirect processor references may nest this deep before resolution gives up
MAX_RESOLUTION_DEPTH = 32

MODIFIER_SEPARATOR = ':'


def split_chain(spec: str) -> List[str]:
    """
    Split a processor spec on '.', keeping dots inside JSON params intact.

    Example:
        >>> split_chain('allow:["a.b", null].string')
        ['allow:["a.b", null]', 'string']
    """
    tokens, current = [], []
    depth = 0
    quote = None
    escaped = False
    for char in spec:
        if quote:
            current.append(char)
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in ('"', "'"):
            quote = char
        elif char in '[{':
            depth += 1
        elif char in ']}':
            depth = max(depth - 1, 0)
        elif char == '.' and depth == 0:
            tokens.append(''.join(current))
            current = []
            continue
        current.append(char)
    tokens.append(''.join(current))
    return [token.strip() for token in tokens if token.strip()]


@dataclass(frozen=True)
class ProcessorStep:
    name: str
    func: Optional[Callable[[Any], Any]] = None

    def apply(self, value: Any) -> Tuple[Any, bool]:
        if self.func is None:
            return UNDEFINED, False
        return self.func(value), False


@dataclass(frozen=True)
class ModifierStep:
    name: str
    params: Any = None
    func: Optional[Callable[[Any, Any], Any]] = None

    def apply(self, value: Any) -> Tuple[Any, bool]:
        if self.func is None:
            return value, False
        result = ModifierResult.coerce(self.func(value, self.params))
        return (result.value if result.has_value else value), result.stop


@dataclass
class ProcessorChain:
    """A compiled processor spec, bound to the callables registered at compile time."""
    spec: str
    steps: list = field(default_factory=list)

    @property
    def missing(self) -> List[str]:
        """Names of processors and modifiers that were not registered."""
        return [step.name for step in self.steps if step.func is None]

    @classmethod
    def compile(cls, spec: str, processors: Registry, modifiers: Registry) -> 'ProcessorChain':
        """
        Compile a concrete (non-indirect) processor spec.

        Raises:
            SpecParseError: If a modifier's parameter payload is not valid JSON
        """
        steps = []
        for token in split_chain(spec or ''):
            if MODIFIER_SEPARATOR in token:
                name, raw_params = token.split(MODIFIER_SEPARATOR, 1)
                try:
                    params = json.loads(raw_params)
                except json.JSONDecodeError as e:
                    raise SpecParseError(
                        f"Invalid parameters for modifier '{name}': {raw_params!r} ({e.msg})",
                        source=spec
                    ) from e
                steps.append(ModifierStep(name=name, params=params, func=modifiers.get(name)))
            else:
                steps.append(ProcessorStep(name=token, func=processors.get(token)))
        return cls(spec=spec, steps=steps)

    def execute(self, value: Any) -> Any:
        """Run the steps left to right; a modifier asking to stop ends the chain."""
        acc = value
        for step in self.steps:
            acc, stop = step.apply(acc)
            if stop:
                break
        return acc

    def __call__(self, value: Any) -> Any:
        return self.execute(value)

    def __repr__(self):
        return f"ProcessorChain({' -> '.join(step.name for step in self.steps)})"


def is_indirect(spec: Optional[str]) -> bool:
    return bool(spec) and spec.strip().startswith(CONTAINER_MARKER)


def resolve_processor_spec(
    spec: str,
    lookup_fields: Callable[[str], Optional[Mapping[str, str]]],
    max_depth: int = MAX_RESOLUTION_DEPTH,
) -> str:
    """
    Follow '@container.path.field' references until a concrete spec is found.

    Args:
        spec: Processor spec, possibly indirect
        lookup_fields: Returns the effective field-spec mapping of a container by
            name, or None when there is no such container
        max_depth: Maximum number of indirections to follow

    Returns:
        The concrete processor spec

    Raises:
        FieldReferenceError: If a referenced container or field does not exist
        RecursionLimitExceeded: If references loop or nest deeper than max_depth
    """
    visited = []
    current = spec
    while is_indirect(current):
        segments = current.strip()[len(CONTAINER_MARKER):].split('.')
        container_name, field_name = segments[0], segments[-1]
        if len(segments) < 2 or not container_name or not field_name:
            raise FieldReferenceError(f"Malformed processor reference '{current}'", source=spec)

        target = (container_name, field_name)
        if target in visited:
            chain = " -> ".join(f"@{c}.{f}" for c, f in visited + [target])
            raise RecursionLimitExceeded(f"Processor references form a cycle: {chain}", source=spec)
        if len(visited) >= max_depth:
            raise RecursionLimitExceeded(
                f"Processor references nest deeper than {max_depth} levels", source=spec
            )
        visited.append(target)

        fields = lookup_fields(container_name)
        if fields is None:
            raise FieldReferenceError(f"Container '{container_name}' not found", source=spec)
        key = find_field_key(fields, field_name)
        if key is None:
            raise FieldReferenceError(
                f"Container '{container_name}' has no field '{field_name}'", source=spec
            )
        current = fields[key]
    return current
