"""
Builders that accumulate model fragments and freeze them into models.

``TypeBuilder`` works on one class at a time. ``SchemaBuilder`` collects the
output of all type builders sharing a namespace and merges associations seen
from both sides of a navigation pair. ``ContainerBuilder`` collects entity
sets and function imports and binds associations to entity sets once every
class has been processed.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from .constants import Multiplicity
from .errors import EdmConfigurationError, EdmReferenceError
from .extractor import FieldInfo, MetadataExtractor, NavigationInfo, to_facets
from .annotations import EdmProperty
from .hierarchy import TypeHierarchy
from .models import (
    Association,
    AssociationEnd,
    AssociationSet,
    AssociationSetEnd,
    ComplexProperty,
    ComplexType,
    EntityContainer,
    EntitySet,
    EntityType,
    Facets,
    FullQualifiedName,
    FunctionImport,
    Key,
    NavigationProperty,
    Property,
    PropertyRef,
    Schema,
    SimpleProperty,
)


class TypeBuilder:
    """Builds the entity or complex type described by a single class."""

    def __init__(self, fqn: FullQualifiedName, extractor: MetadataExtractor, hierarchy: TypeHierarchy):
        self.namespace = fqn.namespace
        self.name = fqn.name
        self.extractor = extractor
        self.hierarchy = hierarchy
        self.is_abstract = False
        self.is_media_resource = False
        self.base_type: Optional[FullQualifiedName] = None
        self.key_properties: List[PropertyRef] = []
        self.properties: List[Property] = []
        self.navigation_properties: List[NavigationProperty] = []
        self.associations: List[Tuple[str, Association]] = []

    @classmethod
    def for_entity_type(cls, klass: type, extractor: MetadataExtractor, hierarchy: TypeHierarchy) -> "TypeBuilder":
        builder = cls(extractor.entity_type_fqn(klass), extractor, hierarchy)
        base = hierarchy.resolve_base(klass, extractor.is_entity_type)
        if base is not None:
            builder.base_type = extractor.entity_type_fqn(base)
        builder.is_abstract = extractor.is_abstract(klass)
        return builder._with_fields(klass, allow_navigation=True)

    @classmethod
    def for_complex_type(cls, klass: type, extractor: MetadataExtractor, hierarchy: TypeHierarchy) -> "TypeBuilder":
        builder = cls(extractor.complex_type_fqn(klass), extractor, hierarchy)
        base = hierarchy.resolve_base(klass, extractor.is_complex_type)
        if base is not None:
            builder.base_type = extractor.complex_type_fqn(base)
        return builder._with_fields(klass, allow_navigation=False)

    def _with_fields(self, klass: type, allow_navigation: bool) -> "TypeBuilder":
        for field in self.extractor.declared_fields(klass):
            if self.extractor.is_navigation(field):
                if not allow_navigation:
                    raise EdmConfigurationError(
                        f"Complex type '{self.name}' cannot declare navigation '{field.name}'")
                info = self.extractor.navigation_info(field)
                self.navigation_properties.append(self._create_navigation_property(field, info))
                self.associations.append((info.relationship_fqn.namespace, self._create_association(info)))
                continue

            if self.extractor.is_media_resource(field):
                self.is_media_resource = True
            prop = self.extractor.property_info(field)
            is_key = self.extractor.is_key(field)
            if prop is None and not is_key and self.extractor.has_other_markers(field):
                # annotated, but not as property or key
                continue
            if prop is None:
                prop = EdmProperty()

            self.properties.append(self._create_property(field, prop))
            if is_key:
                self.key_properties.append(PropertyRef(name=self.extractor.property_name(field)))
        return self

    def _create_property(self, field: FieldInfo, prop: EdmProperty) -> Property:
        name = self.extractor.property_name(field)
        qualified = f"{self.namespace}.{self.name}.{field.name}"
        if field.is_collection:
            raise EdmConfigurationError(f"Collection valued property '{qualified}' is not supported")
        if self.extractor.is_complex_type(field.target):
            return ComplexProperty(
                name=name,
                type=self.extractor.complex_type_fqn(field.target, self.namespace),
                facets=Facets(nullable=prop.facets.nullable),
            )
        if self.extractor.is_entity_type(field.target):
            raise EdmConfigurationError(
                f"Field '{qualified}' refers to an entity type but is not a navigation property")
        try:
            kind = self.extractor.edm_kind(prop.type) if prop.type else self.extractor.map_type(field.target)
        except EdmConfigurationError as e:
            raise EdmConfigurationError(f"Field '{qualified}': {e}") from e
        return SimpleProperty(
            name=name,
            type=kind,
            facets=to_facets(prop.facets, self.extractor.is_concurrency_control(field)),
        )

    def _create_navigation_property(self, field: FieldInfo, info: NavigationInfo) -> NavigationProperty:
        return NavigationProperty(
            name=self.extractor.property_name(field),
            relationship=info.relationship_fqn,
            from_role=info.from_role,
            to_role=info.to_role,
        )

    def _create_association(self, info: NavigationInfo) -> Association:
        return Association(
            name=info.relationship_name,
            end1=AssociationEnd(role=info.from_role, type=info.from_fqn, multiplicity=info.from_multiplicity),
            end2=AssociationEnd(role=info.to_role, type=info.to_fqn, multiplicity=info.to_multiplicity),
        )

    def build_entity_type(self) -> EntityType:
        return EntityType(
            name=self.name,
            base_type=self.base_type,
            abstract=self.is_abstract,
            has_stream=self.is_media_resource,
            properties=tuple(self.properties),
            key=Key(keys=tuple(self.key_properties)) if self.key_properties else None,
            navigation_properties=tuple(self.navigation_properties),
        )

    def build_complex_type(self) -> ComplexType:
        return ComplexType(name=self.name, base_type=self.base_type, properties=tuple(self.properties))

    def build_associations(self) -> Dict[str, List[Association]]:
        """Associations implied by the navigation fields, grouped by the namespace they belong to."""
        grouped: Dict[str, List[Association]] = {}
        for namespace, association in self.associations:
            grouped.setdefault(namespace, []).append(association)
        return grouped


class SchemaBuilder:
    """Collects the types and associations of one namespace."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        self.entity_types: List[EntityType] = []
        self.complex_types: List[ComplexType] = []
        self.name2associations: Dict[str, Association] = {}
        self.entity_containers: List[EntityContainer] = []

    def _check_unique(self, name: str) -> None:
        for existing in self.entity_types + self.complex_types:
            if existing.name == name:
                raise EdmConfigurationError(f"Type '{self.namespace}.{name}' is declared more than once")

    def add_entity_type(self, entity_type: EntityType) -> "SchemaBuilder":
        self._check_unique(entity_type.name)
        self.entity_types.append(entity_type)
        return self

    def add_complex_type(self, complex_type: ComplexType) -> "SchemaBuilder":
        self._check_unique(complex_type.name)
        self.complex_types.append(complex_type)
        return self

    def add_entity_container(self, container: EntityContainer) -> "SchemaBuilder":
        self.entity_containers.append(container)
        return self

    def add_associations(self, associations: Iterable[Association]) -> None:
        for association in associations:
            recorded = self.name2associations.get(association.name)
            if recorded is not None:
                association = self.merge_associations(recorded, association)
            self.name2associations[association.name] = association

    @staticmethod
    def merge_associations(recorded: Association, incoming: Association) -> Association:
        """Merge two derivations of one association end by end.

        A multiplicity is only ever widened to MANY, never narrowed, so the
        order in which both sides are seen does not matter.
        """
        if {recorded.end1.role, recorded.end2.role} != {incoming.end1.role, incoming.end2.role}:
            raise EdmConfigurationError(
                f"Association '{recorded.name}' is declared with roles "
                f"{recorded.end1.role}/{recorded.end2.role} and {incoming.end1.role}/{incoming.end2.role}")
        ends = []
        for end in (recorded.end1, recorded.end2):
            other = incoming.get_end(end.role)
            if other.multiplicity == Multiplicity.MANY and end.multiplicity != Multiplicity.MANY:
                end = end.model_copy(update={'multiplicity': Multiplicity.MANY})
            ends.append(end)
        return recorded.model_copy(update={'end1': ends[0], 'end2': ends[1]})

    def build(self) -> Schema:
        return Schema(
            namespace=self.namespace,
            entity_types=tuple(self.entity_types),
            complex_types=tuple(self.complex_types),
            associations=tuple(self.name2associations.values()),
            entity_containers=tuple(self.entity_containers),
        )


class ContainerBuilder:
    """Collects entity sets, association sets and function imports of one container."""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        self.explicit_default = False
        self.entity_sets: List[EntitySet] = []
        self.association_sets: List[AssociationSet] = []
        self.function_imports: List[FunctionImport] = []

    def add_entity_set(self, entity_set: EntitySet) -> "ContainerBuilder":
        if any(existing.name == entity_set.name for existing in self.entity_sets):
            raise EdmConfigurationError(f"Entity set '{entity_set.name}' is declared twice in '{self.name}'")
        self.entity_sets.append(entity_set)
        return self

    def add_function_import(self, function_import: FunctionImport) -> "ContainerBuilder":
        if any(existing.name == function_import.name for existing in self.function_imports):
            raise EdmConfigurationError(
                f"Function import '{function_import.name}' is declared twice in '{self.name}'")
        self.function_imports.append(function_import)
        return self

    def add_association_sets(self, namespace: str, associations: Iterable[Association]) -> None:
        """Bind the associations of a namespace to the entity sets of this container."""
        for association in associations:
            self.association_sets.append(AssociationSet(
                name=association.name,
                association=FullQualifiedName(namespace=namespace, name=association.name),
                end1=AssociationSetEnd(role=association.end1.role,
                                       entity_set=self._entity_set_name(association, association.end1)),
                end2=AssociationSetEnd(role=association.end2.role,
                                       entity_set=self._entity_set_name(association, association.end2)),
            ))

    def find_entity_set(self, entity_type: FullQualifiedName) -> Optional[EntitySet]:
        for entity_set in self.entity_sets:
            if entity_set.entity_type == entity_type:
                return entity_set
        return None

    def holds_any_end(self, association: Association) -> bool:
        return any(self.find_entity_set(end.type) is not None for end in (association.end1, association.end2))

    def _entity_set_name(self, association: Association, end: AssociationEnd) -> str:
        entity_set = self.find_entity_set(end.type)
        if entity_set is not None:
            return entity_set.name
        raise EdmReferenceError(
            f"No entity set found for {end.type} (association '{association.name}', container '{self.name}')")

    def _check_function_imports(self) -> None:
        names = {entity_set.name for entity_set in self.entity_sets}
        for function_import in self.function_imports:
            if function_import.entity_set and function_import.entity_set not in names:
                raise EdmReferenceError(
                    f"Function import '{function_import.name}' refers to unknown entity set "
                    f"'{function_import.entity_set}' in container '{self.name}'")

    def build(self, is_default: bool) -> EntityContainer:
        self._check_function_imports()
        return EntityContainer(
            name=self.name,
            default_entity_container=is_default,
            entity_sets=tuple(self.entity_sets),
            association_sets=tuple(self.association_sets),
            function_imports=tuple(self.function_imports),
        )
