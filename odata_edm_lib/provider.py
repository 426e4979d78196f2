"""
Entity Data Model provider built from annotated domain classes.
"""

import sys
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from .builders import ContainerBuilder, SchemaBuilder, TypeBuilder
from .errors import EdmConfigurationError, EdmReferenceError
from .extractor import MetadataExtractor
from .hierarchy import TypeHierarchy
from .models import (
    Association,
    AssociationSet,
    ComplexProperty,
    ComplexType,
    EntityContainer,
    EntityContainerInfo,
    EntitySet,
    EntityType,
    FullQualifiedName,
    FunctionImport,
    Schema,
)
from .scanner import ClassScanner

QualifiedName = Union[str, FullQualifiedName]


class AnnotationEdmProvider:
    """Derives the Entity Data Model of a service from its annotated classes.

    The whole model is built in the constructor: phase one accumulates per
    class fragments in builders keyed by namespace and container name, phase
    two binds associations to entity sets, checks every cross reference and
    freezes the result. Afterwards the provider only answers lookups; a miss
    returns None.
    """

    def __init__(self, classes: Iterable[Any], verbose: bool = False):
        self.verbose = verbose
        self.extractor = MetadataExtractor()
        candidates = list(dict.fromkeys(classes))
        self.annotated_classes: List[type] = [c for c in candidates if self.extractor.is_edm_annotated(c)]
        self._log_verbose(f"{len(self.annotated_classes)} of {len(candidates)} classes carry EDM metadata.")
        if not self.annotated_classes:
            raise EdmConfigurationError("No EDM annotated classes found; a service needs at least one type")

        self.hierarchy = TypeHierarchy.build(self.annotated_classes)
        self._namespace2schema_builder: Dict[str, SchemaBuilder] = {}
        self._name2container_builder: Dict[str, ContainerBuilder] = {}
        self._namespace2schema: Dict[str, Schema] = {}
        self._name2container: Dict[str, EntityContainer] = {}
        self._default_container: Optional[EntityContainer] = None

        self._init()

    @classmethod
    def from_package(cls, package_name: str, verbose: bool = False) -> "AnnotationEdmProvider":
        """Create a provider from the annotated classes of a package and its sub-packages."""
        extractor = MetadataExtractor()
        classes = ClassScanner.load_classes(package_name, extractor.is_edm_annotated)
        if not classes:
            raise EdmConfigurationError(f"No EDM annotated classes found in package '{package_name}'")
        return cls(classes, verbose=verbose)

    def _log_verbose(self, message: str):
        """Prints message to stderr only if verbose mode is enabled."""
        if self.verbose:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
            print(f"[{timestamp} Provider VERBOSE] {message}", file=sys.stderr)

    def _init(self):
        for klass in self.annotated_classes:
            self._update_schema(klass)
            self._handle_entity_container(klass)
        self._finish()
        self._log_verbose(f"Derivation complete. {len(self._namespace2schema)} schemas, "
                          f"{len(self._name2container)} containers.")

    # --- phase one ---

    def _get_schema_builder(self, namespace: str) -> SchemaBuilder:
        builder = self._namespace2schema_builder.get(namespace)
        if builder is None:
            builder = SchemaBuilder(namespace)
            self._namespace2schema_builder[namespace] = builder
        return builder

    def _update_schema(self, klass: type):
        if self.extractor.is_entity_type(klass):
            type_builder = TypeBuilder.for_entity_type(klass, self.extractor, self.hierarchy)
            entity_type = type_builder.build_entity_type()
            self._get_schema_builder(type_builder.namespace).add_entity_type(entity_type)
            for namespace, associations in type_builder.build_associations().items():
                self._get_schema_builder(namespace).add_associations(associations)
            self._log_verbose(f"Entity type {type_builder.namespace}.{entity_type.name}: "
                              f"{len(entity_type.properties)} properties, "
                              f"{len(entity_type.navigation_properties)} navigation properties.")
        if self.extractor.is_complex_type(klass):
            type_builder = TypeBuilder.for_complex_type(klass, self.extractor, self.hierarchy)
            complex_type = type_builder.build_complex_type()
            self._get_schema_builder(type_builder.namespace).add_complex_type(complex_type)
            self._log_verbose(f"Complex type {type_builder.namespace}.{complex_type.name}: "
                              f"{len(complex_type.properties)} properties.")

    def _class_namespace(self, klass: type) -> str:
        if self.extractor.is_entity_type(klass):
            return self.extractor.entity_type_fqn(klass).namespace
        if self.extractor.is_complex_type(klass):
            return self.extractor.complex_type_fqn(klass).namespace
        return self.extractor.canonical_namespace(klass)

    def _get_container_builder(self, klass: type) -> ContainerBuilder:
        name = self.extractor.container_name(klass)
        builder = self._name2container_builder.get(name)
        if builder is None:
            builder = ContainerBuilder(self._class_namespace(klass), name)
            self._name2container_builder[name] = builder
        if self.extractor.is_default_container(klass):
            builder.explicit_default = True
        return builder

    def _handle_entity_container(self, klass: type):
        if self.extractor.is_entity_type(klass) and self.extractor.entity_set_info(klass) is not None:
            builder = self._get_container_builder(klass)
            entity_type = self.extractor.entity_type_fqn(klass)
            if not builder.entity_sets:
                # container lives in the namespace of its first entity set
                builder.namespace = entity_type.namespace
            builder.add_entity_set(EntitySet(name=self.extractor.entity_set_name(klass), entity_type=entity_type))

        for method_name, member, record in self.extractor.function_imports(klass):
            builder = self._get_container_builder(klass)
            builder.add_function_import(self._create_function_import(method_name, member, record))

    def _create_function_import(self, method_name: str, member: Any, record) -> FunctionImport:
        return FunctionImport(
            name=self.extractor.function_import_name(method_name, record),
            entity_set=record.entity_set or None,
            http_method=self.extractor.http_method(record),
            parameters=self.extractor.function_import_parameters(member),
            return_type=self.extractor.return_type(member, record),
        )

    # --- phase two ---

    def _default_container_name(self) -> Optional[str]:
        explicit = [b.name for b in self._name2container_builder.values() if b.explicit_default]
        if len(explicit) > 1:
            raise EdmConfigurationError(f"More than one default entity container: {', '.join(explicit)}")
        if explicit:
            return explicit[0]
        # first container created in input order
        return next(iter(self._name2container_builder), None)

    def _finish(self):
        default_name = self._default_container_name()
        for container_builder in self._name2container_builder.values():
            for namespace, schema_builder in self._namespace2schema_builder.items():
                associations = list(schema_builder.name2associations.values())
                if namespace != container_builder.namespace:
                    # foreign namespaces only contribute associations this container takes part in
                    associations = [a for a in associations if container_builder.holds_any_end(a)]
                container_builder.add_association_sets(namespace, associations)
            container = container_builder.build(container_builder.name == default_name)
            self._get_schema_builder(container_builder.namespace).add_entity_container(container)
            self._name2container[container.name] = container
            if container.default_entity_container:
                self._default_container = container
            self._log_verbose(f"Container {container.name} (default={container.default_entity_container}): "
                              f"{len(container.entity_sets)} entity sets, "
                              f"{len(container.association_sets)} association sets, "
                              f"{len(container.function_imports)} function imports.")

        self._check_references()

        for schema_builder in self._namespace2schema_builder.values():
            schema = schema_builder.build()
            self._namespace2schema[schema.namespace] = schema

        # builders are not needed once the frozen model exists
        self._namespace2schema_builder = {}
        self._name2container_builder = {}

    def _check_references(self):
        entity_types: Dict[FullQualifiedName, EntityType] = {}
        complex_types: Dict[FullQualifiedName, ComplexType] = {}
        for namespace, builder in self._namespace2schema_builder.items():
            for entity_type in builder.entity_types:
                entity_types[FullQualifiedName(namespace=namespace, name=entity_type.name)] = entity_type
            for complex_type in builder.complex_types:
                complex_types[FullQualifiedName(namespace=namespace, name=complex_type.name)] = complex_type

        def check_properties(owner: FullQualifiedName, properties):
            for prop in properties:
                if isinstance(prop, ComplexProperty) and prop.type not in complex_types:
                    raise EdmReferenceError(
                        f"Property '{prop.name}' of {owner} refers to unknown complex type {prop.type}")

        for fqn, complex_type in complex_types.items():
            if complex_type.base_type is not None and complex_type.base_type not in complex_types:
                raise EdmReferenceError(f"Base type {complex_type.base_type} of {fqn} is not a known complex type")
            check_properties(fqn, complex_type.properties)

        for fqn, entity_type in entity_types.items():
            if entity_type.base_type is not None and entity_type.base_type not in entity_types:
                raise EdmReferenceError(f"Base type {entity_type.base_type} of {fqn} is not a known entity type")
            check_properties(fqn, entity_type.properties)

            names = set()
            current: Optional[EntityType] = entity_type
            while current is not None:
                names.update(prop.name for prop in current.properties)
                current = entity_types.get(current.base_type) if current.base_type is not None else None
            for key_name in entity_type.get_key_property_names():
                if key_name not in names:
                    raise EdmReferenceError(f"Key '{key_name}' of {fqn} is not a property of the type")

        known = {str(fqn) for fqn in list(entity_types) + list(complex_types)}
        for container in self._name2container.values():
            for function_import in container.function_imports:
                return_type = function_import.return_type
                if return_type is not None and not return_type.type_name.startswith("Edm.") \
                        and return_type.type_name not in known:
                    raise EdmReferenceError(
                        f"Function import '{function_import.name}' returns unknown type {return_type.type_name}")

    # --- lookups ---

    def get_entity_type(self, fqn: QualifiedName) -> Optional[EntityType]:
        fqn = FullQualifiedName.parse(fqn)
        schema = self._namespace2schema.get(fqn.namespace)
        if schema is not None:
            for entity_type in schema.entity_types:
                if entity_type.name == fqn.name:
                    return entity_type
        return None

    def get_complex_type(self, fqn: QualifiedName) -> Optional[ComplexType]:
        fqn = FullQualifiedName.parse(fqn)
        schema = self._namespace2schema.get(fqn.namespace)
        if schema is not None:
            for complex_type in schema.complex_types:
                if complex_type.name == fqn.name:
                    return complex_type
        return None

    def get_association(self, fqn: QualifiedName) -> Optional[Association]:
        fqn = FullQualifiedName.parse(fqn)
        schema = self._namespace2schema.get(fqn.namespace)
        if schema is not None:
            for association in schema.associations:
                if association.name == fqn.name:
                    return association
        return None

    def get_entity_container(self, name: Optional[str] = None) -> Optional[EntityContainer]:
        if name is None:
            return self._default_container
        return self._name2container.get(name)

    def get_entity_container_info(self, name: Optional[str] = None) -> Optional[EntityContainerInfo]:
        """Container info by name; None selects the default container."""
        container = self.get_entity_container(name)
        if container is None:
            return None
        return EntityContainerInfo(name=container.name,
                                   default_entity_container=container.default_entity_container)

    @property
    def default_container_name(self) -> Optional[str]:
        return self._default_container.name if self._default_container is not None else None

    def get_entity_set(self, entity_container: str, name: str) -> Optional[EntitySet]:
        container = self._name2container.get(entity_container)
        if container is not None:
            for entity_set in container.entity_sets:
                if entity_set.name == name:
                    return entity_set
        return None

    def get_association_set(self, entity_container: str, association: QualifiedName,
                            source_entity_set_name: str, source_entity_set_role: str) -> Optional[AssociationSet]:
        association = FullQualifiedName.parse(association)
        container = self._name2container.get(entity_container)
        if container is not None:
            for association_set in container.association_sets:
                if association_set.association != association:
                    continue
                for end in (association_set.end1, association_set.end2):
                    if end.role == source_entity_set_role and end.entity_set == source_entity_set_name:
                        return association_set
        return None

    def get_function_import(self, entity_container: str, name: str) -> Optional[FunctionImport]:
        container = self._name2container.get(entity_container)
        if container is not None:
            for function_import in container.function_imports:
                if function_import.name == name:
                    return function_import
        return None

    def get_schemas(self) -> List[Schema]:
        return list(self._namespace2schema.values())
