#!/usr/bin/env python3
"""
OData EDM derivation tool.

Scans a Python package for EDM annotated classes, derives the OData v2 Entity
Data Model from them and prints a trace of the result (or a JSON dump).
"""

import argparse
import json
import os
import sys
import traceback
from typing import List, Optional

from dotenv import load_dotenv

from odata_edm_lib import AnnotationEdmProvider, EdmSchemaError, SimpleProperty

# Load environment variables from .env file
load_dotenv()


def _is_truthy(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() in ('1', 'true', 'yes', 'on')


def print_trace_info(provider: AnnotationEdmProvider):
    """Print a readable summary of every schema and container of the provider."""
    print("=" * 80)
    print("OData EDM Trace Information")
    print("=" * 80)

    schemas = provider.get_schemas()
    print(f"\nAnnotated classes: {len(provider.annotated_classes)}")
    print(f"Schemas: {len(schemas)}")
    print(f"Default container: {provider.default_container_name or 'None'}")

    for schema in schemas:
        print(f"\nSchema {schema.namespace}")
        print("-" * 60)

        for entity_type in schema.entity_types:
            flags = []
            if entity_type.abstract:
                flags.append("abstract")
            if entity_type.has_stream:
                flags.append("media")
            base = f" : {entity_type.base_type}" if entity_type.base_type else ""
            flag_str = f" [{', '.join(flags)}]" if flags else ""
            print(f"   EntityType {entity_type.name}{base}{flag_str}")
            keys = entity_type.get_key_property_names()
            for prop in entity_type.properties:
                type_str = prop.type.value if isinstance(prop, SimpleProperty) else str(prop.type)
                key_str = " (key)" if prop.name in keys else ""
                null_str = "" if prop.facets.nullable else " not null"
                print(f"      - {prop.name}: {type_str}{null_str}{key_str}")
            for nav in entity_type.navigation_properties:
                print(f"      > {nav.name} -> {nav.relationship} ({nav.from_role} -> {nav.to_role})")

        for complex_type in schema.complex_types:
            base = f" : {complex_type.base_type}" if complex_type.base_type else ""
            print(f"   ComplexType {complex_type.name}{base}")
            for prop in complex_type.properties:
                type_str = prop.type.value if isinstance(prop, SimpleProperty) else str(prop.type)
                print(f"      - {prop.name}: {type_str}")

        for association in schema.associations:
            end1, end2 = association.end1, association.end2
            print(f"   Association {association.name}: "
                  f"{end1.role} ({end1.type}, {end1.multiplicity.value}) <-> "
                  f"{end2.role} ({end2.type}, {end2.multiplicity.value})")

        for container in schema.entity_containers:
            default_str = " (default)" if container.default_entity_container else ""
            print(f"   EntityContainer {container.name}{default_str}")
            for entity_set in container.entity_sets:
                print(f"      EntitySet {entity_set.name}: {entity_set.entity_type}")
            for association_set in container.association_sets:
                print(f"      AssociationSet {association_set.name}: "
                      f"{association_set.end1.entity_set} <-> {association_set.end2.entity_set}")
            for function_import in container.function_imports:
                params = ", ".join(f"{p.name}: {p.type.value}" for p in function_import.parameters)
                returns = ""
                if function_import.return_type is not None:
                    returns = f" -> {function_import.return_type.type_name}"
                    if function_import.return_type.multiplicity.value == "*":
                        returns += "[]"
                method = function_import.http_method or "GET"
                print(f"      FunctionImport {method} {function_import.name}({params}){returns}")

    print("\n" + "=" * 80)


def dump_json(provider: AnnotationEdmProvider) -> str:
    schemas = [schema.model_dump(mode="json") for schema in provider.get_schemas()]
    return json.dumps({"default_container": provider.default_container_name, "schemas": schemas}, indent=2)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Derive an OData v2 Entity Data Model from annotated Python classes",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--package", dest="package_via_flag",
                        help="Package to scan (overrides positional argument and EDM_SCAN_PACKAGE env var)")
    parser.add_argument("package_pos", nargs='?', help="Package to scan (alternative to --package flag or env var)")
    parser.add_argument("-v", "--verbose", "--debug", dest="verbose", action="store_true",
                        help="Enable verbose output to stderr")
    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument("--trace", action="store_true",
                              help="Print a readable summary of the derived model (default output)")
    output_group.add_argument("--json", action="store_true", help="Print the derived model as JSON")

    args = parser.parse_args(argv)
    verbose = args.verbose or _is_truthy(os.getenv("EDM_VERBOSE"))

    # --- Configuration Handling ---
    # Priority: --package flag > Positional argument > Environment Variable > .env file
    package = None
    if args.package_via_flag:
        package = args.package_via_flag
        if verbose: print("[VERBOSE] Using package from --package flag.", file=sys.stderr)
    if package is None and args.package_pos:
        package = args.package_pos
        if verbose: print("[VERBOSE] Using package from positional argument.", file=sys.stderr)
    if package is None:
        package = os.getenv("EDM_SCAN_PACKAGE")
        if package and verbose: print("[VERBOSE] Using EDM_SCAN_PACKAGE from environment.", file=sys.stderr)

    if not package:
        print("ERROR: Package to scan not provided.", file=sys.stderr)
        print("Provide it via the --package flag, as a positional argument, or EDM_SCAN_PACKAGE environment variable.",
              file=sys.stderr)
        parser.print_help(file=sys.stderr)
        return 1

    try:
        provider = AnnotationEdmProvider.from_package(package, verbose=verbose)
    except EdmSchemaError as e:
        print(f"ERROR: Model derivation failed: {e}", file=sys.stderr)
        return 1
    except ImportError as e:
        print(f"ERROR: Could not import package '{package}': {e}", file=sys.stderr)
        if verbose:
            traceback.print_exc(file=sys.stderr)
        return 1

    if args.json:
        print(dump_json(provider))
    else:
        print_trace_info(provider)
    return 0


if __name__ == "__main__":
    sys.exit(main())
