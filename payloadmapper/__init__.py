"""
Payloadmapper package: declarative field mapping for request payloads.

This package contains:
- mapping: field-spec grammar, processor chains, guards, container inheritance
  and the extraction engine
- processors: built-in processor and modifier sets
"""

from payloadmapper.mapping import (
    BaseModel,
    Container,
    ExtractionResult,
    UNDEFINED,
    ConfigurationError,
    FieldReferenceError,
    SpecParseError,
    RecursionLimitExceeded,
    build_request,
    load_model,
)

__all__ = [
    'BaseModel',
    'Container',
    'ExtractionResult',
    'UNDEFINED',
    'ConfigurationError',
    'FieldReferenceError',
    'SpecParseError',
    'RecursionLimitExceeded',
    'build_request',
    'load_model',
]
