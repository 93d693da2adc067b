from payloadmapper.mapping.exceptions import (
    PayloadMapperError,
    ConfigurationError,
    FieldReferenceError,
    SpecParseError,
    RecursionLimitExceeded,
)
from payloadmapper.mapping.paths import UNDEFINED, PathLookup, resolve_path
from payloadmapper.mapping.field_spec import FieldSpec, FieldReference, ReferenceKind
from payloadmapper.mapping.registry import Registry, ModifierResult
from payloadmapper.mapping.conditions import ConditionEvaluator
from payloadmapper.mapping.chain import ProcessorChain, resolve_processor_spec, split_chain
from payloadmapper.mapping.inheritance import Declaration, TemplateRegistry
from payloadmapper.mapping.container import Container
from payloadmapper.mapping.issues import ExtractionResult, MappingIssue, MappingWarning, IssueSeverity
from payloadmapper.mapping.base import BaseModel
from payloadmapper.mapping.request import build_request, query_params
from payloadmapper.mapping.loader import load_model, build_model

__all__ = [
    'PayloadMapperError',
    'ConfigurationError',
    'FieldReferenceError',
    'SpecParseError',
    'RecursionLimitExceeded',
    'UNDEFINED',
    'PathLookup',
    'resolve_path',
    'FieldSpec',
    'FieldReference',
    'ReferenceKind',
    'Registry',
    'ModifierResult',
    'ConditionEvaluator',
    'ProcessorChain',
    'resolve_processor_spec',
    'split_chain',
    'Declaration',
    'TemplateRegistry',
    'Container',
    'ExtractionResult',
    'MappingIssue',
    'MappingWarning',
    'IssueSeverity',
    'BaseModel',
    'build_request',
    'query_params',
    'load_model',
    'build_model',
]
