"""
Metadata records and decorators used to describe domain classes.

Class level records are attached with decorators::

    @edm_entity_type(namespace="ns1")
    @edm_entity_set(name="Buildings", container="Container1")
    class Building:
        id: Annotated[str, EdmKey(), EdmProperty(name="Id")]
        name: Annotated[str, EdmProperty(facets=EdmFacets(max_length=255))]
        rooms: Annotated[List["Room"], EdmNavigationProperty()]

Field level records are ``typing.Annotated`` markers on class attribute
annotations (or on function import parameters).
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from .constants import (
    COMPLEX_TYPE_ATTR,
    CONTAINER_ATTR,
    ENTITY_SET_ATTR,
    ENTITY_TYPE_ATTR,
    FUNCTION_IMPORT_ATTR,
    EdmSimpleTypeKind,
    Multiplicity,
)


@dataclass(frozen=True)
class EdmFacets:
    """Property facets; -1 means the facet is not set."""
    nullable: bool = True
    max_length: int = -1
    precision: int = -1
    scale: int = -1


@dataclass(frozen=True)
class EdmProperty:
    name: str = ""
    type: Optional[Union[EdmSimpleTypeKind, str]] = None
    facets: EdmFacets = field(default_factory=EdmFacets)


@dataclass(frozen=True)
class EdmKey:
    pass


@dataclass(frozen=True)
class EdmMediaResourceContent:
    pass


@dataclass(frozen=True)
class EdmConcurrencyControl:
    pass


@dataclass(frozen=True)
class EdmNavigationProperty:
    """Marks a field as a navigation to another entity type.

    ``association`` names the relationship explicitly; it is required when two
    classes are related through more than one pair of fields.
    """
    name: str = ""
    to_multiplicity: Optional[Multiplicity] = None
    to_role: str = ""
    association: str = ""


@dataclass(frozen=True)
class EdmEntityType:
    namespace: str = ""
    name: str = ""
    abstract: bool = False


@dataclass(frozen=True)
class EdmComplexType:
    namespace: str = ""
    name: str = ""


@dataclass(frozen=True)
class EdmEntitySet:
    name: str = ""
    container: str = ""


@dataclass(frozen=True)
class EdmEntityContainer:
    name: str = ""
    default: bool = False


@dataclass(frozen=True)
class EdmReturnType:
    """Explicit return type of a function import.

    ``type`` is either a domain class or an ``EdmSimpleTypeKind``.
    """
    type: Union[type, EdmSimpleTypeKind]
    is_collection: bool = False


@dataclass(frozen=True)
class EdmFunctionImport:
    name: str = ""
    entity_set: str = ""
    http_method: str = ""
    return_type: Optional[EdmReturnType] = None


@dataclass(frozen=True)
class EdmFunctionImportParameter:
    name: str = ""
    type: Optional[Union[EdmSimpleTypeKind, str]] = None
    facets: EdmFacets = field(default_factory=EdmFacets)


def _attach(attr: str, record: Any) -> Callable:
    def decorator(target):
        setattr(target, attr, record)
        return target
    return decorator


def edm_entity_type(namespace: str = "", name: str = "", abstract: bool = False) -> Callable:
    return _attach(ENTITY_TYPE_ATTR, EdmEntityType(namespace=namespace, name=name, abstract=abstract))


def edm_complex_type(namespace: str = "", name: str = "") -> Callable:
    return _attach(COMPLEX_TYPE_ATTR, EdmComplexType(namespace=namespace, name=name))


def edm_entity_set(name: str = "", container: str = "") -> Callable:
    return _attach(ENTITY_SET_ATTR, EdmEntitySet(name=name, container=container))


def edm_entity_container(name: str = "", default: bool = False) -> Callable:
    return _attach(CONTAINER_ATTR, EdmEntityContainer(name=name, default=default))


def edm_function_import(name: str = "", entity_set: str = "", http_method: str = "",
                        return_type: Optional[EdmReturnType] = None) -> Callable:
    """Marks a method as an operation exposed by the service container."""
    return _attach(FUNCTION_IMPORT_ATTR, EdmFunctionImport(
        name=name, entity_set=entity_set, http_method=http_method, return_type=return_type))
