"""
Data models for the derived Entity Data Model.

All models are frozen; once the provider finished its derivation pass they are
shared read-only.
"""

from typing import Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, model_validator

from .constants import ConcurrencyMode, EdmSimpleTypeKind, Multiplicity


class EdmModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class FullQualifiedName(EdmModel):
    namespace: str
    name: str

    @classmethod
    def parse(cls, value: Union[str, "FullQualifiedName"]) -> "FullQualifiedName":
        """Accept either an instance or a 'Namespace.Name' string."""
        if isinstance(value, FullQualifiedName):
            return value
        namespace, _, name = str(value).rpartition('.')
        return cls(namespace=namespace, name=name)

    def __str__(self) -> str:
        return f"{self.namespace}.{self.name}"


class Facets(EdmModel):
    nullable: bool = True
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    concurrency_mode: Optional[ConcurrencyMode] = None


class SimpleProperty(EdmModel):
    name: str
    type: EdmSimpleTypeKind
    facets: Facets = Facets()


class ComplexProperty(EdmModel):
    name: str
    type: FullQualifiedName
    facets: Facets = Facets()


Property = Union[SimpleProperty, ComplexProperty]


class PropertyRef(EdmModel):
    name: str


class Key(EdmModel):
    keys: Tuple[PropertyRef, ...] = ()


class NavigationProperty(EdmModel):
    name: str
    relationship: FullQualifiedName
    from_role: str
    to_role: str


class AssociationEnd(EdmModel):
    role: str
    type: FullQualifiedName
    multiplicity: Multiplicity


class Association(EdmModel):
    name: str
    end1: AssociationEnd
    end2: AssociationEnd

    @model_validator(mode='after')
    def _check_roles(self) -> "Association":
        if self.end1.role == self.end2.role:
            raise ValueError(f"Association '{self.name}' uses role '{self.end1.role}' for both ends")
        return self

    def get_end(self, role: str) -> Optional[AssociationEnd]:
        for end in (self.end1, self.end2):
            if end.role == role:
                return end
        return None


class EntityType(EdmModel):
    name: str
    base_type: Optional[FullQualifiedName] = None
    abstract: bool = False
    has_stream: bool = False
    properties: Tuple[Property, ...] = ()
    key: Optional[Key] = None
    navigation_properties: Tuple[NavigationProperty, ...] = ()

    def get_key_property_names(self) -> Tuple[str, ...]:
        return tuple(ref.name for ref in self.key.keys) if self.key else ()


class ComplexType(EdmModel):
    name: str
    base_type: Optional[FullQualifiedName] = None
    properties: Tuple[Property, ...] = ()


class EntitySet(EdmModel):
    name: str
    entity_type: FullQualifiedName


class AssociationSetEnd(EdmModel):
    role: str
    entity_set: str


class AssociationSet(EdmModel):
    name: str
    association: FullQualifiedName
    end1: AssociationSetEnd
    end2: AssociationSetEnd


class FunctionImportParameter(EdmModel):
    name: str
    type: EdmSimpleTypeKind
    facets: Facets = Facets()


class ReturnType(EdmModel):
    # Either an Edm primitive ('Edm.String') or a qualified type name
    type_name: str
    multiplicity: Multiplicity = Multiplicity.ONE


class FunctionImport(EdmModel):
    name: str
    entity_set: Optional[str] = None
    http_method: Optional[str] = None
    parameters: Tuple[FunctionImportParameter, ...] = ()
    return_type: Optional[ReturnType] = None


class EntityContainer(EdmModel):
    name: str
    default_entity_container: bool = False
    entity_sets: Tuple[EntitySet, ...] = ()
    association_sets: Tuple[AssociationSet, ...] = ()
    function_imports: Tuple[FunctionImport, ...] = ()


class EntityContainerInfo(EdmModel):
    name: str
    default_entity_container: bool = False
    extends: Optional[str] = None


class Schema(EdmModel):
    namespace: str
    entity_types: Tuple[EntityType, ...] = ()
    complex_types: Tuple[ComplexType, ...] = ()
    associations: Tuple[Association, ...] = ()
    entity_containers: Tuple[EntityContainer, ...] = ()
