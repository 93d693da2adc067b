"""
Load model declarations from YAML or JSON files.

Declaration format:

    templates:
      flow:
        additional: int.default:5
      granded:
        token: string.default:"qweqw23342d3x"
    containers:
      user extends flow:
        fields:
          name as full_name: string
          pass: string
      post_data extends [flow, granded]:
        fields:
          text as description: skip:[null].string.strip:15
          is_mine if(&.isMine == true): bool
        source:
          text: Hello

Templates are described in file order, so a template may only extend templates
listed above it. Keys or specs starting with '&' or '@' must be quoted in YAML
('"&.lang": string'), since both characters are YAML indicators.
"""
import json
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

import yaml

from payloadmapper.mapping.base import BaseModel
from payloadmapper.mapping.exceptions import ConfigurationError
from payloadmapper.processors import DEFAULT_MODIFIERS

DECLARATION_SUFFIXES = ('.yml', '.yaml', '.json')


def find_declaration(path: Union[str, Path], base_dir: str = ".") -> Path:
    """
    Locate a declaration file.

    Supports a direct path or a bare name searched recursively under base_dir
    with any of the .yml, .yaml and .json extensions.

    Raises:
        FileNotFoundError: If nothing matches
    """
    file_path = Path(path)
    if file_path.exists():
        return file_path
    if file_path.is_absolute():
        raise FileNotFoundError(f"Declaration file not found: {path}")

    base = Path(base_dir)
    if not base.exists():
        raise FileNotFoundError(f"Base directory not found: {base_dir}")

    matches = list(base.rglob(f"{path}"))
    for suffix in DECLARATION_SUFFIXES:
        matches += list(base.rglob(f"{path}{suffix}"))
    matches = [m for m in matches if m.is_file()]
    if not matches:
        raise FileNotFoundError(f"Declaration file not found: {path} (searched in {base_dir})")
    return matches[0]


def read_document(path: Union[str, Path]) -> Any:
    """Read a YAML or JSON document (used for declarations and data files)."""
    file_path = Path(path)
    with open(file_path, 'r') as f:
        if file_path.suffix == '.json':
            return json.load(f)
        return yaml.safe_load(f)


def build_model(
    declaration: Mapping[str, Any],
    parent: Any = None,
    processors: Optional[Mapping[str, Callable]] = None,
    modifiers: Optional[Mapping[str, Callable]] = None,
    model_class: type = BaseModel,
) -> BaseModel:
    """
    Build a model from an already-parsed declaration document.

    Built-in modifiers are registered first, then any extra processors and
    modifiers, then templates and containers in document order.

    Raises:
        ConfigurationError: If the document has no 'containers' mapping or a
            section has the wrong shape
    """
    if not isinstance(declaration, Mapping):
        raise ConfigurationError("Model declaration must be a mapping")
    containers = declaration.get('containers')
    if not isinstance(containers, Mapping) or not containers:
        raise ConfigurationError("Model declaration needs a 'containers' mapping")

    model = model_class(parent)
    model.add_modifiers_bulk(DEFAULT_MODIFIERS)
    if processors:
        model.add_field_processors_bulk(processors)
    if modifiers:
        model.add_modifiers_bulk(modifiers)

    templates = declaration.get('templates') or {}
    if not isinstance(templates, Mapping):
        raise ConfigurationError("'templates' must be a mapping of name -> fields")
    for full_name, fields in templates.items():
        model.describe_container(full_name, _string_specs(full_name, fields))

    for full_name, body in containers.items():
        body = body or {}
        if not isinstance(body, Mapping):
            raise ConfigurationError(f"Container '{full_name}' must be a mapping with 'fields'")
        model.add_container(full_name, _string_specs(full_name, body.get('fields')), body.get('source'))
    return model


def _string_specs(owner: str, fields: Any) -> Dict[str, str]:
    # YAML turns 'int' into a string but 'true' or 5 into other types
    if fields is None:
        return {}
    if not isinstance(fields, Mapping):
        raise ConfigurationError(f"Fields of '{owner}' must be a mapping")
    return {str(key): '' if spec is None else str(spec) for key, spec in fields.items()}


def load_model(
    path: Union[str, Path],
    parent: Any = None,
    processors: Optional[Mapping[str, Callable]] = None,
    modifiers: Optional[Mapping[str, Callable]] = None,
    base_dir: str = ".",
) -> BaseModel:
    """
    Load a model declaration file.

    Args:
        path: Path to a declaration file, or its name to search under base_dir
        parent: Parent object for '^' references
        processors: Extra processors to register
        modifiers: Extra modifiers to register
        base_dir: Directory searched when path is a bare name

    Returns:
        BaseModel with templates and containers declared

    Example:
        >>> model = load_model("examples/post_model.yml", parent={'is_mine': True})
        >>> model.get_fields('user')
    """
    return build_model(
        read_document(find_declaration(path, base_dir)),
        parent=parent,
        processors=processors,
        modifiers=modifiers,
    )
