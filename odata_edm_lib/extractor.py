"""
Metadata extraction for annotated domain classes.

The extractor is the only place that knows how metadata records are attached
to classes, fields and methods. Everything it returns is a pure function of
that metadata; it holds no state.
"""

import collections.abc
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Annotated, List, Optional, Tuple, Union, get_args, get_origin

from .annotations import (
    EdmComplexType,
    EdmConcurrencyControl,
    EdmEntityContainer,
    EdmEntitySet,
    EdmEntityType,
    EdmFacets,
    EdmFunctionImport,
    EdmFunctionImportParameter,
    EdmKey,
    EdmMediaResourceContent,
    EdmNavigationProperty,
    EdmProperty,
)
from .constants import (
    COMPLEX_TYPE_ATTR,
    CONTAINER_ATTR,
    DEFAULT_CONTAINER_NAME,
    ENTITY_SET_ATTR,
    ENTITY_SET_SUFFIX,
    ENTITY_TYPE_ATTR,
    FUNCTION_IMPORT_ATTR,
    HTTP_METHODS,
    PYTHON_TYPE_MAP,
    ROLE_PREFIX,
    ConcurrencyMode,
    EdmSimpleTypeKind,
    Multiplicity,
)
from .errors import EdmConfigurationError
from .models import Facets, FullQualifiedName, FunctionImportParameter, ReturnType

_PROPERTY_MARKERS = (EdmProperty, EdmKey, EdmConcurrencyControl)
_KNOWN_MARKERS = _PROPERTY_MARKERS + (EdmNavigationProperty, EdmMediaResourceContent)
_COLLECTION_ORIGINS = (
    list, set, frozenset, tuple,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet,
    collections.abc.Collection, collections.abc.Iterable,
)
_UNION_TYPES = (Union, getattr(types, 'UnionType', Union))


@dataclass(frozen=True)
class FieldInfo:
    """One declared attribute of a class with its type hint taken apart."""
    name: str
    owner: type
    target: Any
    is_collection: bool = False
    is_optional: bool = False
    markers: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class NavigationInfo:
    """Canonical description of one side of a navigation pair."""
    from_fqn: FullQualifiedName
    to_fqn: FullQualifiedName
    from_role: str
    to_role: str
    from_multiplicity: Multiplicity
    to_multiplicity: Multiplicity
    relationship_name: str

    @property
    def from_type_name(self) -> str:
        return self.from_fqn.name

    @property
    def to_type_name(self) -> str:
        return self.to_fqn.name

    @property
    def relationship_fqn(self) -> FullQualifiedName:
        # both sides of a pair use the namespace of the end that sorts first
        first = min(self.from_fqn, self.to_fqn, key=str)
        return FullQualifiedName(namespace=first.namespace, name=self.relationship_name)


def split_hint(hint: Any) -> Tuple[Any, bool, bool, Tuple[Any, ...]]:
    """Split a type hint into (target, is_collection, is_optional, markers)."""
    markers: Tuple[Any, ...] = ()
    if get_origin(hint) is Annotated:
        args = get_args(hint)
        hint, markers = args[0], tuple(args[1:])

    is_optional = False
    if get_origin(hint) in _UNION_TYPES:
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            is_optional = True
            hint = args[0]
            if get_origin(hint) is Annotated:
                inner = get_args(hint)
                hint, markers = inner[0], markers + tuple(inner[1:])

    is_collection = False
    origin = get_origin(hint)
    if origin in _COLLECTION_ORIGINS:
        is_collection = True
        args = [arg for arg in get_args(hint) if arg is not Ellipsis]
        hint = args[0] if args else None
    elif hint in (list, set, frozenset, tuple):
        is_collection = True
        hint = None

    if isinstance(hint, typing.ForwardRef):
        raise EdmConfigurationError(f"Unresolved forward reference '{hint.__forward_arg__}'")
    return hint, is_collection, is_optional, markers


def to_facets(facets: EdmFacets, concurrency_control: bool = False) -> Facets:
    """Convert a facets record into model facets, dropping unset values."""
    return Facets(
        nullable=facets.nullable,
        max_length=facets.max_length if facets.max_length > -1 else None,
        precision=facets.precision if facets.precision > -1 else None,
        scale=facets.scale if facets.scale > -1 else None,
        concurrency_mode=ConcurrencyMode.FIXED if concurrency_control else None,
    )


class MetadataExtractor:
    """Answers metadata questions about classes, fields and methods."""

    # --- class level ---

    @staticmethod
    def _own(klass: Any, attr: str) -> Any:
        if not isinstance(klass, type):
            return None
        return vars(klass).get(attr)

    def entity_type_info(self, klass: Any) -> Optional[EdmEntityType]:
        return self._own(klass, ENTITY_TYPE_ATTR)

    def complex_type_info(self, klass: Any) -> Optional[EdmComplexType]:
        return self._own(klass, COMPLEX_TYPE_ATTR)

    def entity_set_info(self, klass: Any) -> Optional[EdmEntitySet]:
        return self._own(klass, ENTITY_SET_ATTR)

    def container_info(self, klass: Any) -> Optional[EdmEntityContainer]:
        return self._own(klass, CONTAINER_ATTR)

    def is_entity_type(self, klass: Any) -> bool:
        return self.entity_type_info(klass) is not None

    def is_complex_type(self, klass: Any) -> bool:
        return self.complex_type_info(klass) is not None

    def is_edm_type(self, klass: Any) -> bool:
        return self.is_entity_type(klass) or self.is_complex_type(klass)

    def is_edm_annotated(self, klass: Any) -> bool:
        """True for classes that contribute anything to the model."""
        if not isinstance(klass, type):
            return False
        return self.is_edm_type(klass) or bool(self.function_imports(klass))

    def is_abstract(self, klass: type) -> bool:
        info = self.entity_type_info(klass)
        if info is not None and info.abstract:
            return True
        return inspect.isabstract(klass)

    def canonical_namespace(self, klass: type) -> str:
        return klass.__module__

    def entity_type_fqn(self, klass: type) -> FullQualifiedName:
        info = self.entity_type_info(klass)
        if info is None:
            raise EdmConfigurationError(f"Class '{klass.__qualname__}' is not an entity type")
        return FullQualifiedName(namespace=info.namespace or self.canonical_namespace(klass),
                                 name=info.name or klass.__name__)

    def complex_type_fqn(self, klass: type, default_namespace: Optional[str] = None) -> FullQualifiedName:
        info = self.complex_type_info(klass)
        if info is None:
            raise EdmConfigurationError(f"Class '{klass.__qualname__}' is not a complex type")
        namespace = info.namespace or default_namespace or self.canonical_namespace(klass)
        return FullQualifiedName(namespace=namespace, name=info.name or klass.__name__)

    def container_name(self, klass: type) -> str:
        entity_set = self.entity_set_info(klass)
        if entity_set is not None and entity_set.container:
            return entity_set.container
        container = self.container_info(klass)
        if container is not None and container.name:
            return container.name
        return DEFAULT_CONTAINER_NAME

    def is_default_container(self, klass: type) -> bool:
        container = self.container_info(klass)
        return container is not None and container.default

    def entity_set_name(self, klass: type) -> str:
        entity_set = self.entity_set_info(klass)
        if entity_set is not None and entity_set.name:
            return entity_set.name
        return self.entity_type_fqn(klass).name + ENTITY_SET_SUFFIX

    # --- field level ---

    def declared_fields(self, klass: type) -> List[FieldInfo]:
        """Own annotated attributes of klass, in declaration order."""
        own = inspect.get_annotations(klass)
        if not own:
            return []
        try:
            hints = typing.get_type_hints(klass, include_extras=True)
        except NameError as e:
            raise EdmConfigurationError(
                f"Cannot resolve type hints of '{klass.__qualname__}': {e}") from e

        fields = []
        for name in own:
            hint = hints.get(name)
            if hint is None or get_origin(hint) is typing.ClassVar:
                continue
            target, is_collection, is_optional, markers = split_hint(hint)
            fields.append(FieldInfo(name=name, owner=klass, target=target, is_collection=is_collection,
                                    is_optional=is_optional, markers=markers))
        return fields

    @staticmethod
    def _marker(field: FieldInfo, record_type: type) -> Any:
        for marker in field.markers:
            if isinstance(marker, record_type):
                return marker
        return None

    def property_info(self, field: FieldInfo) -> Optional[EdmProperty]:
        return self._marker(field, EdmProperty)

    def is_key(self, field: FieldInfo) -> bool:
        return self._marker(field, EdmKey) is not None

    def is_media_resource(self, field: FieldInfo) -> bool:
        return self._marker(field, EdmMediaResourceContent) is not None

    def is_concurrency_control(self, field: FieldInfo) -> bool:
        return self._marker(field, EdmConcurrencyControl) is not None

    def navigation_marker(self, field: FieldInfo) -> Optional[EdmNavigationProperty]:
        return self._marker(field, EdmNavigationProperty)

    def is_navigation(self, field: FieldInfo) -> bool:
        return self.navigation_marker(field) is not None

    def has_property_markers(self, field: FieldInfo) -> bool:
        return any(isinstance(marker, _PROPERTY_MARKERS) for marker in field.markers)

    def has_other_markers(self, field: FieldInfo) -> bool:
        """True if the field carries markers that are not property related."""
        return any(not isinstance(marker, _PROPERTY_MARKERS) for marker in field.markers)

    def property_name(self, field: FieldInfo) -> str:
        navigation = self.navigation_marker(field)
        if navigation is not None and navigation.name:
            return navigation.name
        prop = self.property_info(field)
        if prop is not None and prop.name:
            return prop.name
        return field.name

    def map_type(self, python_type: Any) -> EdmSimpleTypeKind:
        """Map a Python type to its default Edm primitive type."""
        if python_type in PYTHON_TYPE_MAP:
            return PYTHON_TYPE_MAP[python_type]
        if isinstance(python_type, type):
            for candidate, kind in PYTHON_TYPE_MAP.items():
                if issubclass(python_type, candidate):
                    return kind
        raise EdmConfigurationError(f"Type '{python_type}' is not supported as an Edm primitive type")

    def edm_kind(self, value: Any) -> EdmSimpleTypeKind:
        """Coerce an explicitly declared kind, e.g. 'Edm.Int64', to EdmSimpleTypeKind."""
        try:
            return EdmSimpleTypeKind(value)
        except ValueError as e:
            raise EdmConfigurationError(f"'{value}' is not an Edm primitive type") from e

    # --- navigation ---

    def _multiplicity(self, field: FieldInfo) -> Multiplicity:
        navigation = self.navigation_marker(field)
        if navigation is not None and navigation.to_multiplicity is not None:
            return Multiplicity(navigation.to_multiplicity)
        if field.is_collection:
            return Multiplicity.MANY
        if field.is_optional:
            return Multiplicity.ZERO_TO_ONE
        return Multiplicity.ONE

    def _navigations_to(self, klass: type, target: type, exclude: Optional[FieldInfo] = None) -> List[FieldInfo]:
        return [f for f in self.declared_fields(klass)
                if self.is_navigation(f) and f.target is target
                and (exclude is None or f.name != exclude.name)]

    def _find_reverse(self, field: FieldInfo) -> Optional[FieldInfo]:
        association = self.navigation_marker(field).association
        candidates = self._navigations_to(field.target, field.owner,
                                          exclude=field if field.target is field.owner else None)
        candidates = [c for c in candidates if self.navigation_marker(c).association == association]
        if len(candidates) > 1:
            names = ", ".join(c.name for c in candidates)
            raise EdmConfigurationError(
                f"Ambiguous navigation from '{field.owner.__qualname__}.{field.name}': "
                f"'{field.target.__qualname__}' declares {names}; name the association explicitly")
        return candidates[0] if candidates else None

    def _check_same_side(self, field: FieldInfo, reverse: Optional[FieldInfo]) -> None:
        association = self.navigation_marker(field).association
        siblings = [f for f in self._navigations_to(field.owner, field.target)
                    if self.navigation_marker(f).association == association
                    and (reverse is None or field.owner is not field.target or f.name != reverse.name)]
        if len(siblings) > 1:
            names = ", ".join(f.name for f in siblings)
            raise EdmConfigurationError(
                f"Ambiguous navigation: '{field.owner.__qualname__}' declares {names} "
                f"towards '{field.target.__qualname__}'; name the associations explicitly")

    @staticmethod
    def canonical_relationship_name(from_role: str, to_role: str) -> str:
        names = [role[len(ROLE_PREFIX):] if role.startswith(ROLE_PREFIX) else role
                 for role in (from_role, to_role)]
        return "_".join(sorted(names))

    def navigation_info(self, field: FieldInfo) -> NavigationInfo:
        """Derive the canonical relationship a navigation field takes part in.

        Deriving from either field of a navigation pair yields the same
        relationship name and the same pair of roles, with the ends swapped.
        """
        navigation = self.navigation_marker(field)
        if navigation is None:
            raise EdmConfigurationError(f"Field '{field.name}' is not a navigation property")
        if self.has_property_markers(field):
            raise EdmConfigurationError(
                f"Field '{field.owner.__qualname__}.{field.name}' is declared both as navigation and as property")
        if not self.is_entity_type(field.target):
            raise EdmConfigurationError(
                f"Navigation '{field.owner.__qualname__}.{field.name}' must target an entity type, "
                f"got '{field.target}'")

        reverse = self._find_reverse(field)
        self._check_same_side(field, reverse)
        reverse_navigation = self.navigation_marker(reverse) if reverse is not None else None

        from_fqn = self.entity_type_fqn(field.owner)
        to_fqn = self.entity_type_fqn(field.target)
        from_default = ROLE_PREFIX + from_fqn.name
        to_default = ROLE_PREFIX + to_fqn.name
        if field.owner is field.target:
            to_default = f"{to_default}_{field.name}"
            if reverse is not None:
                from_default = f"{from_default}_{reverse.name}"

        to_role = navigation.to_role or to_default
        from_role = (reverse_navigation.to_role if reverse_navigation is not None else "") or from_default
        if to_role == from_role:
            raise EdmConfigurationError(
                f"Navigation '{field.owner.__qualname__}.{field.name}' uses role '{to_role}' for both ends")

        return NavigationInfo(
            from_fqn=from_fqn,
            to_fqn=to_fqn,
            from_role=from_role,
            to_role=to_role,
            from_multiplicity=self._multiplicity(reverse) if reverse is not None else Multiplicity.ONE,
            to_multiplicity=self._multiplicity(field),
            relationship_name=navigation.association or self.canonical_relationship_name(from_role, to_role),
        )

    # --- function imports ---

    @staticmethod
    def _function_record(member: Any) -> Optional[EdmFunctionImport]:
        record = getattr(member, FUNCTION_IMPORT_ATTR, None)
        if record is None and isinstance(member, (staticmethod, classmethod)):
            record = getattr(member.__func__, FUNCTION_IMPORT_ATTR, None)
        return record if isinstance(record, EdmFunctionImport) else None

    def function_imports(self, klass: type) -> List[Tuple[str, Any, EdmFunctionImport]]:
        """Own methods carrying function import metadata, in declaration order."""
        result = []
        for name, member in vars(klass).items():
            record = self._function_record(member)
            if record is not None:
                result.append((name, member, record))
        return result

    def function_import_name(self, method_name: str, record: EdmFunctionImport) -> str:
        return record.name or method_name

    def http_method(self, record: EdmFunctionImport) -> Optional[str]:
        if not record.http_method:
            return None
        method = record.http_method.upper()
        if method not in HTTP_METHODS:
            raise EdmConfigurationError(f"Unsupported HTTP method '{record.http_method}' for function import")
        return method

    @staticmethod
    def _callable(member: Any) -> Any:
        if isinstance(member, (staticmethod, classmethod)):
            return member.__func__
        return member

    def _method_hints(self, member: Any) -> dict:
        try:
            return typing.get_type_hints(self._callable(member), include_extras=True)
        except NameError as e:
            raise EdmConfigurationError(f"Cannot resolve type hints of '{member}': {e}") from e

    def function_import_parameters(self, member: Any) -> Tuple[FunctionImportParameter, ...]:
        func = self._callable(member)
        hints = self._method_hints(member)
        parameters = []
        for name in inspect.signature(func).parameters:
            hint = hints.get(name)
            if hint is None:
                continue
            target, _, _, markers = split_hint(hint)
            record = next((m for m in markers if isinstance(m, EdmFunctionImportParameter)), None)
            if record is None:
                continue
            parameters.append(FunctionImportParameter(
                name=record.name or name,
                type=self.edm_kind(record.type) if record.type else self.map_type(target),
                facets=to_facets(record.facets),
            ))
        return tuple(parameters)

    def _type_name(self, target: Any) -> str:
        if isinstance(target, str):
            return self.edm_kind(target).value
        if self.is_entity_type(target):
            return str(self.entity_type_fqn(target))
        if self.is_complex_type(target):
            return str(self.complex_type_fqn(target))
        return self.map_type(target).value

    def return_type(self, member: Any, record: EdmFunctionImport) -> Optional[ReturnType]:
        if record.return_type is not None:
            multiplicity = Multiplicity.MANY if record.return_type.is_collection else Multiplicity.ONE
            return ReturnType(type_name=self._type_name(record.return_type.type), multiplicity=multiplicity)

        hint = self._method_hints(member).get('return')
        if hint is None or hint is type(None):
            return None
        target, is_collection, _, _ = split_hint(hint)
        if target is None:
            raise EdmConfigurationError(f"Return type of '{member}' has no element type")
        multiplicity = Multiplicity.MANY if is_collection else Multiplicity.ONE
        return ReturnType(type_name=self._type_name(target), multiplicity=multiplicity)
