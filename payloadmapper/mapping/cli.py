#!/usr/bin/env python
"""
Command-line interface for payloadmapper.

    payloadmapper show model.yml [--container NAME]
    payloadmapper extract model.yml --container NAME --data data.json [--data more.yml] [--json]
"""
import argparse
import json
import sys
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from tqdm import tqdm

from payloadmapper.mapping.base import BaseModel
from payloadmapper.mapping.container import Container
from payloadmapper.mapping.exceptions import PayloadMapperError
from payloadmapper.mapping.field_spec import FieldSpec
from payloadmapper.mapping.issues import MappingWarning
from payloadmapper.mapping.loader import load_model, read_document


@dataclass
class ExtractionRun:
    """Results of extracting one container against several data files."""
    container: str
    total: int = 0
    extracted: int = 0
    failed: int = 0
    payloads: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)
    warnings: List[Dict[str, str]] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0


def print_container_details(container: Container):
    """Print the effective field specs of a container, one parsed line each."""
    print(f"\n Container: {container.name}")
    print(f"   Fields:   {len(container.fields)}")
    print(f"   Data:     {'set' if container.data else '(empty)'}")

    for key, processor_spec in container.fields.items():
        spec = FieldSpec.parse(key)
        print(f"\n   {key}")
        print(f"      source:     {spec.reference} ({spec.reference.kind.value})")
        print(f"      output:     {spec.output_name}")
        if spec.condition:
            print(f"      condition:  {spec.condition}")
        print(f"      processors: {processor_spec or '(none)'}")


def print_summary(model: BaseModel):
    """Print a table of containers and templates."""
    print(f"\n{'='*80}")
    print(f"SUMMARY - {len(model.containers)} Containers, {len(model.templates)} Templates")
    print(f"{'='*80}\n")

    print(f"{'#':<4} {'Container':<40} {'Fields':<10} {'Data':<10}")
    print("-" * 80)
    for i, info in enumerate(model.summary(), 1):
        name = info['name'][:37] + "..." if len(info['name']) > 40 else info['name']
        print(f"{i:<4} {name:<40} {info['fields']:<10} {'yes' if info['has_data'] else 'no':<10}")

    if len(model.templates):
        print(f"\n Templates: {', '.join(model.templates.names())}")


def extract_files(model: BaseModel, container: str, data_files: List[str]) -> ExtractionRun:
    """
    Extract a container once per data file, each file becoming the container source.

    Warnings raised during extraction are captured per file instead of printed.
    """
    run = ExtractionRun(container=container, total=len(data_files))

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=MappingWarning)

        with tqdm(total=len(data_files), desc="Extracting", unit="file", disable=len(data_files) < 2) as pbar:
            for data_file in data_files:
                with warnings.catch_warnings(record=True) as w:
                    warnings.simplefilter("always")
                    try:
                        model.set_source(container, read_document(data_file))
                        fields = model.get_fields(container)
                        run.payloads.append({
                            'file': data_file,
                            'fields': dict(fields),
                        })
                        run.extracted += 1
                    except (OSError, yaml.YAMLError, json.JSONDecodeError, PayloadMapperError) as e:
                        run.failed += 1
                        run.errors.append({'file': data_file, 'error': str(e)})

                    for warning in w:
                        if issubclass(warning.category, MappingWarning):
                            run.warnings.append({'file': data_file, 'message': str(warning.message)})
                pbar.update(1)

    return run


def _render(value: Any) -> Any:
    # UNDEFINED and other non-JSON values print as their repr
    return repr(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payloadmapper",
        description="Inspect model declarations and extract request payloads"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Show containers and their effective field specs")
    show.add_argument("model", help="Model declaration file (YAML or JSON)")
    show.add_argument("-c", "--container", help="Show only this container")

    extract = subparsers.add_parser("extract", help="Extract a container's payload from data files")
    extract.add_argument("model", help="Model declaration file (YAML or JSON)")
    extract.add_argument("-c", "--container", required=True, help="Container to extract")
    extract.add_argument(
        "-d", "--data",
        action="append",
        default=[],
        metavar="FILE",
        help="Data file used as the container source (repeatable)"
    )
    extract.add_argument("-p", "--parent", metavar="FILE", help="Data file used as the model parent ('^')")
    extract.add_argument("--json", action="store_true", help="Print payloads as JSON")
    return parser


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        parent = read_document(args.parent) if getattr(args, 'parent', None) else None
        model = load_model(args.model, parent=parent)
    except (OSError, yaml.YAMLError, json.JSONDecodeError, PayloadMapperError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.command == "show":
        if args.container:
            container = model.get_container(args.container)
            if container is None:
                print(f"Error: Container '{args.container}' not found")
                sys.exit(1)
            print_container_details(container)
        else:
            print_summary(model)
            for container in model.containers.values():
                print_container_details(container)
        sys.exit(0)

    if model.get_container(args.container) is None:
        print(f"Error: Container '{args.container}' not found")
        sys.exit(1)

    # Without data files, extract against the inline source of the declaration
    if not args.data:
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            fields = model.get_fields(args.container)
        run = ExtractionRun(container=args.container, total=1, extracted=1,
                            payloads=[{'file': args.model, 'fields': fields}])
        run.warnings = [{'file': args.model, 'message': str(x.message)}
                        for x in w if issubclass(x.category, MappingWarning)]
    else:
        run = extract_files(model, args.container, args.data)

    if run.warnings:
        print(f"\nWarnings ({len(run.warnings)}):")
        for warning in run.warnings:
            print(f"  Processing {warning['file']}: {warning['message']}")

    if run.has_failures:
        print(f"\nFailed extractions ({run.failed}):")
        for error in run.errors:
            print(f"  - {error['file']}: {error['error']}")

    for entry in run.payloads:
        if args.json:
            print(json.dumps(entry['fields'], indent=2, default=_render))
        else:
            print(f"\n {entry['file']}:")
            for key, value in entry['fields'].items():
                print(f"   {key}: {value!r}")

    sys.exit(0 if not run.has_failures else 1)


if __name__ == "__main__":
    main()
