"""
BaseModel: containers, registries and field extraction.

A model owns named containers. Each container pairs a field-spec mapping with a
data source; extracting a container walks its field specs in declaration order
and produces the flat payload sent to an API.

Example:
    >>> model = BaseModel(parent={'form': {'name': 'Karen'}}).add_container(
    ...     'user', {'^.form.name as full_name': 'string'}
    ... )
    >>> model.get_fields('user')
    {'full_name': 'Karen'}
"""
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from payloadmapper.mapping.chain import ProcessorChain, resolve_processor_spec
from payloadmapper.mapping.conditions import ConditionEvaluator
from payloadmapper.mapping.container import Container
from payloadmapper.mapping.exceptions import (
    ConfigurationError,
    FieldReferenceError,
    RecursionLimitExceeded,
    SpecParseError,
)
from payloadmapper.mapping.field_spec import FieldReference, FieldSpec, ReferenceKind
from payloadmapper.mapping.inheritance import TemplateRegistry
from payloadmapper.mapping.issues import (
    ConditionFailureIssue,
    EmptyFieldSpecIssue,
    ExtractionResult,
    MalformedProcessorSpecIssue,
    MissingReferenceIssue,
    ProcessorFailureIssue,
    UnregisteredProcessorIssue,
    UnresolvedProcessorIssue,
)
from payloadmapper.mapping.paths import UNDEFINED, get_item, resolve_path
from payloadmapper.mapping.registry import Registry
from payloadmapper.processors import CASE_PROCESSORS, DEFAULT_PROCESSORS


class BaseModel:
    """
    Declarative field mapping over named containers.

    Registries (processors, modifiers, templates) belong to the instance and are
    expected to be filled before the first extraction; extraction itself never
    mutates them.

    Args:
        parent: Optional host object, reachable from field specs and guards with '^'
    """

    def __init__(self, parent: Any = None):
        self.parent = parent
        self.processors = Registry("processor")
        self.modifiers = Registry("modifier")
        self.templates = TemplateRegistry()
        self.containers: Dict[str, Container] = {}

        self.add_field_processors_bulk(DEFAULT_PROCESSORS)
        self.add_field_processors_bulk(CASE_PROCESSORS)

    # Registration

    def add_field_processor(self, name: str, proc: Callable[[Any], Any]) -> 'BaseModel':
        self.processors.register(name, proc)
        return self

    def add_field_processors_bulk(self, processors: Mapping[str, Callable]) -> 'BaseModel':
        self.processors.register_bulk(processors)
        return self

    def add_modifier(self, name: str, proc: Callable[[Any, Any], Any]) -> 'BaseModel':
        self.modifiers.register(name, proc)
        return self

    def add_modifiers_bulk(self, modifiers: Mapping[str, Callable]) -> 'BaseModel':
        self.modifiers.register_bulk(modifiers)
        return self

    # Declaration

    def describe_container(self, full_name: str, fields: Optional[Mapping[str, str]] = None) -> 'BaseModel':
        """Register a reusable template, e.g. describe_container('flow', {...})."""
        self.templates.describe(full_name, fields)
        return self

    def add_container(self, full_name: str, fields: Mapping[str, str], source: Any = None) -> 'BaseModel':
        """
        Declare a container. Inheritance ('name extends ...') is resolved here, once.

        Args:
            full_name: Container name, optionally with an extends clause
            fields: Field-spec mapping (key -> processor spec)
            source: Optional data source

        Raises:
            ConfigurationError: If the name is empty or a template is unknown
        """
        name, effective = self.templates.resolve(full_name, fields or {})
        if not name:
            raise ConfigurationError("Container name is required", source=full_name)
        self.containers[name] = Container(self, name, effective, source)
        return self

    def add_containers(self, containers: Union[Iterable[dict], Mapping[str, dict]]) -> 'BaseModel':
        """
        Declare several containers.

        Accepts either a list of {'name', 'fields', 'source'} dicts or a mapping of
        name -> {'fields', 'source'}.
        """
        if isinstance(containers, Mapping):
            for full_name, declaration in containers.items():
                self.add_container(full_name, declaration.get('fields', {}), declaration.get('source'))
        else:
            for declaration in containers:
                self.add_container(declaration['name'], declaration.get('fields', {}), declaration.get('source'))
        return self

    # Accessors

    def get_container(self, name: str) -> Optional[Container]:
        return self.containers.get(name)

    def get_data(self, name: str) -> Any:
        """Data source of a container (explicit accessor, no proxying)."""
        container = self._require_container(name)
        return container.data

    def set_source(self, name: str, source: Any) -> 'BaseModel':
        self._require_container(name).set_source(source)
        return self

    def get_processor(self, name: str) -> str:
        """
        Concrete processor spec for a possibly indirect one ('@container.field').

        Raises:
            FieldReferenceError: If a referenced container or field does not exist
            RecursionLimitExceeded: If references loop
        """
        return resolve_processor_spec(name, self._fields_of)

    def compile_chain(self, spec: str) -> ProcessorChain:
        return ProcessorChain.compile(self.get_processor(spec), self.processors, self.modifiers)

    def _fields_of(self, name: str) -> Optional[Mapping[str, str]]:
        container = self.get_container(name)
        return container.fields if container else None

    def _require_container(self, name: str) -> Container:
        container = self.get_container(name)
        if container is None:
            raise ConfigurationError(f"Container '{name}' not found")
        return container

    # Reference resolution

    def resolve_root(self, reference: FieldReference, container: Optional[Container] = None) -> Any:
        """
        Object that holds the referenced property.

        Raises:
            FieldReferenceError: If the parent, container or nested path is missing
        """
        if reference.kind is ReferenceKind.NONE:
            if container is None:
                raise FieldReferenceError(f"No container to read '{reference}' from")
            root, label = container.data, f"container '{container.name}'"
        elif reference.kind is ReferenceKind.PARENT:
            root, label = self.parent, "parent"
        elif reference.kind is ReferenceKind.SELF:
            root, label = self, "model"
        else:
            target = self.get_container(reference.container_name)
            if target is None:
                raise FieldReferenceError(f"Container '{reference.container_name}' not found", source=str(reference))
            root, label = target.data, f"container '{target.name}'"

        if root is None:
            raise FieldReferenceError(f"No {label} to read '{reference}' from")

        lookup = resolve_path(root, reference.path)
        if not lookup.found or lookup.value is None:
            raise FieldReferenceError(
                f"Path '{'.'.join(reference.path)}' not found in {label}", source=str(reference)
            )
        return lookup.value

    def resolve_reference(self, reference: FieldReference, container: Optional[Container] = None) -> Any:
        """Value of a reference; a missing property (but existing root) is UNDEFINED."""
        root = self.resolve_root(reference, container)
        return get_item(root, reference.property_name).value

    def evaluate_condition(self, expression: Optional[str]) -> bool:
        """
        Evaluate a guard expression against this model.

        Raises:
            SpecParseError: If the expression is malformed
            FieldReferenceError: If a referenced root is missing
        """
        return ConditionEvaluator(self.resolve_reference).evaluate(expression)

    # Extraction

    def extract(self, name: str) -> ExtractionResult:
        """
        Extract the payload of a container.

        Problems with individual fields are recorded as issues on the result and
        never stop the remaining fields from being extracted.

        Raises:
            ConfigurationError: If the container does not exist
        """
        container = self._require_container(name)
        result = ExtractionResult(container=name)

        if not container.fields:
            result.issues.append(EmptyFieldSpecIssue(
                name, error=ConfigurationError("You have to specify field names")
            ))
            return result

        for spec, processor_spec in container.field_specs():
            self._extract_field(container, spec, processor_spec, result)
        return result

    def _extract_field(self, container: Container, spec: FieldSpec, processor_spec: str,
                       result: ExtractionResult) -> None:
        key = spec.raw

        try:
            if not self.evaluate_condition(spec.condition):
                return
        except Exception as e:
            # includes errors raised by properties the guard reads
            result.issues.append(ConditionFailureIssue(container.name, key, error=e))
            return

        try:
            value = self.resolve_reference(spec.reference, container)
        except Exception as e:
            result.issues.append(MissingReferenceIssue(container.name, key, error=e))
            value = UNDEFINED

        try:
            chain = self.compile_chain(processor_spec)
        except (FieldReferenceError, RecursionLimitExceeded) as e:
            result.issues.append(UnresolvedProcessorIssue(container.name, key, error=e))
            result.fields[spec.output_name] = UNDEFINED
            return
        except SpecParseError as e:
            result.issues.append(MalformedProcessorSpecIssue(container.name, key, error=e))
            result.fields[spec.output_name] = UNDEFINED
            return

        if chain.missing:
            result.issues.append(UnregisteredProcessorIssue(container.name, key, names=chain.missing))

        try:
            result.fields[spec.output_name] = chain(value)
        except Exception as e:
            result.issues.append(ProcessorFailureIssue(container.name, key, error=e))
            result.fields[spec.output_name] = UNDEFINED

    def get_fields(self, name: str) -> Dict[str, Any]:
        """
        Extracted fields of a container as a plain dict.

        Issues are emitted as MappingWarning warnings; use extract() to inspect
        them directly.
        """
        result = self.extract(name)
        result.emit_warnings(stacklevel=3)
        return result.fields

    def build_request(self, uri: str, method: str = "GET", container: Optional[str] = None,
                      data: Optional[Mapping[str, Any]] = None, headers: Optional[Mapping[str, str]] = None):
        """
        Prepare (but do not send) the request for a container's payload.

        See payloadmapper.mapping.request.build_request.
        """
        from payloadmapper.mapping.request import build_request

        if container:
            result = self.extract(container)
            result.emit_warnings(stacklevel=3)
            payload = result.payload
        else:
            payload = data
        return build_request(uri, method=method, payload=payload, headers=headers)

    def summary(self) -> List[dict]:
        """Short description of every container, used by the CLI."""
        return [
            {'name': c.name, 'fields': len(c.fields), 'has_data': bool(c.data)}
            for c in self.containers.values()
        ]
