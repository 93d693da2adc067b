"""
Structured diagnostics reported while extracting a container.

Issues are returned alongside the extracted fields instead of being printed, so
callers can inspect, filter or re-raise them.
"""
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from payloadmapper.mapping.paths import UNDEFINED


class MappingWarning(UserWarning):
    """Warning category used when issues are emitted through the warnings module."""


class IssueSeverity(Enum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class MappingIssue:
    """A recoverable problem with one field (or the whole container)."""

    description = "Mapping issue"
    severity = IssueSeverity.LOW

    def __init__(self, container: str, field_key: Optional[str] = None, error: Optional[Exception] = None):
        self.container = container
        self.field_key = field_key
        self.error = error

    @property
    def message(self) -> str:
        return str(self.error) if self.error else self.description

    def __str__(self):
        location = f"{self.container}[{self.field_key}]" if self.field_key else self.container
        return f"{self.description}: {location}. {self.message}"

    def __repr__(self):
        return f"{self.__class__.__name__}(container={self.container!r}, field_key={self.field_key!r})"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'issue': self.__class__.__name__,
            'severity': self.severity.name,
            'container': self.container,
            'field': self.field_key,
            'message': self.message,
        }


class EmptyFieldSpecIssue(MappingIssue):
    description = "Container has no field specifications"
    severity = IssueSeverity.HIGH


class MissingReferenceIssue(MappingIssue):
    description = "Field source could not be resolved"
    severity = IssueSeverity.MEDIUM


class ConditionFailureIssue(MappingIssue):
    """Guard expression could not be evaluated; the field was omitted."""

    description = "Guard condition could not be evaluated"
    severity = IssueSeverity.MEDIUM


class UnresolvedProcessorIssue(MappingIssue):
    """Indirect processor reference failed (missing target or cycle)."""

    description = "Processor reference could not be resolved"
    severity = IssueSeverity.MEDIUM


class MalformedProcessorSpecIssue(MappingIssue):
    description = "Malformed processor chain"
    severity = IssueSeverity.MEDIUM


class UnregisteredProcessorIssue(MappingIssue):
    """Chain names processors or modifiers that are not registered."""

    description = "Unregistered processor"
    severity = IssueSeverity.LOW

    def __init__(self, container: str, field_key: Optional[str] = None, names: Optional[List[str]] = None):
        super().__init__(container, field_key)
        self.names = names or []

    @property
    def message(self) -> str:
        return "Unknown names: " + ", ".join(f"'{n}'" for n in self.names)


class ProcessorFailureIssue(MappingIssue):
    description = "Processor raised an exception"
    severity = IssueSeverity.HIGH


@dataclass
class ExtractionResult:
    """Fields extracted from a container together with the issues hit on the way."""
    container: str
    fields: Dict[str, Any] = field(default_factory=dict)
    issues: List[MappingIssue] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return len(self.issues) > 0

    @property
    def payload(self) -> Dict[str, Any]:
        """Fields without UNDEFINED values, ready to be serialized."""
        return {key: value for key, value in self.fields.items() if value is not UNDEFINED}

    def issues_of(self, issue_type: Type[MappingIssue]) -> List[MappingIssue]:
        return [issue for issue in self.issues if isinstance(issue, issue_type)]

    def emit_warnings(self, stacklevel: int = 3) -> None:
        """Re-emit every issue through the warnings module."""
        for issue in self.issues:
            warnings.warn(str(issue), MappingWarning, stacklevel=stacklevel)

    def to_dict(self) -> dict:
        return {
            'container': self.container,
            'fields': self.payload,
            'issues': [issue.to_dict() for issue in self.issues],
        }
