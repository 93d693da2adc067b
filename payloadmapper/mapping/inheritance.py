"""
Container inheritance ('extends') for field-spec mappings.

    user extends flow                 one template
    post_data extends [flow, granded] several templates, later ones win

Templates are registered with describe(); a template may extend templates that
were described before it.
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from payloadmapper.mapping.exceptions import ConfigurationError

EXTENDS_KEYWORD = ' extends '


@dataclass(frozen=True)
class Declaration:
    """A parsed container or template name clause."""
    name: str
    templates: Tuple[str, ...] = ()

    @property
    def is_extended(self) -> bool:
        return len(self.templates) > 0

    @classmethod
    def parse(cls, full_name: str) -> 'Declaration':
        """
        Parse '<name>[ extends <t> | extends [<t1>,<t2>]]'.

        Example:
            >>> Declaration.parse('post_data extends [flow, granded]')
            Declaration(name='post_data', templates=('flow', 'granded'))
        """
        if EXTENDS_KEYWORD not in full_name:
            return cls(name=full_name.strip())
        name, clause = full_name.split(EXTENDS_KEYWORD, 1)
        clause = re.sub(r"\s", "", clause)
        if clause.startswith('['):
            clause = re.sub(r"[\[\]]", "", clause)
        templates = tuple(t for t in clause.split(',') if t)
        return cls(name=name.strip(), templates=templates)


class TemplateRegistry:
    """Described-container templates, already resolved against their own parents."""

    def __init__(self):
        self._templates: Dict[str, Dict[str, str]] = {}

    def describe(self, full_name: str, fields: Optional[Mapping[str, str]] = None) -> str:
        """
        Register a template; returns its canonical name.

        Raises:
            ConfigurationError: If the name is empty or extends an unknown template
        """
        name, resolved = self.resolve(full_name, fields or {})
        if not name:
            raise ConfigurationError("Template name is required", source=full_name)
        self._templates[name] = resolved
        return name

    def resolve(self, full_name: str, fields: Mapping[str, str]) -> Tuple[str, Dict[str, str]]:
        """
        Build the effective field-spec mapping for a declaration.

        Templates are merged in the listed order, then the declaration's own fields
        are layered on top, so own fields always win.

        Returns:
            Tuple of (canonical name, effective field-spec mapping)

        Raises:
            ConfigurationError: If a referenced template has not been described
        """
        declaration = Declaration.parse(full_name)
        if not declaration.is_extended:
            return declaration.name, dict(fields)

        merged: Dict[str, str] = {}
        for template in declaration.templates:
            if template not in self._templates:
                raise ConfigurationError(f"Template '{template}' is not described", source=full_name)
            merged.update(self._templates[template])
        merged.update(fields)
        return declaration.name, merged

    def get(self, name: str) -> Optional[Dict[str, str]]:
        template = self._templates.get(name)
        return dict(template) if template is not None else None

    def names(self) -> List[str]:
        return list(self._templates.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)
