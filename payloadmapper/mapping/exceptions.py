"""
Error taxonomy for the payload mapping engine.

Registration and declaration problems are raised immediately. Reference and parse
problems hit while extracting a container are caught per field and turned into
issues (see issues.py), so one bad field never aborts its siblings.
"""
from typing import Optional


class PayloadMapperError(Exception):
    """Base class for all mapping errors."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source  # field key or spec string the error relates to

    def __str__(self):
        if self.source:
            return f"{self.message} (in '{self.source}')"
        return self.message


class ConfigurationError(PayloadMapperError):
    """Model is declared incorrectly (registration, templates, empty field specs)."""


class FieldReferenceError(PayloadMapperError):
    """A parent, self, container or processor reference could not be resolved."""


class SpecParseError(PayloadMapperError):
    """A guard expression or modifier parameter payload is malformed."""


class RecursionLimitExceeded(PayloadMapperError):
    """Indirect processor references form a cycle or nest too deeply."""
