"""
OData EDM Library - derives an OData v2 Entity Data Model from annotated classes.
"""

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
    EdmReturnType,
    edm_complex_type,
    edm_entity_container,
    edm_entity_set,
    edm_entity_type,
    edm_function_import,
)
from .constants import ConcurrencyMode, EdmSimpleTypeKind, Multiplicity
from .errors import EdmConfigurationError, EdmReferenceError, EdmSchemaError
from .models import (
    Association,
    AssociationEnd,
    AssociationSet,
    AssociationSetEnd,
    ComplexProperty,
    ComplexType,
    EntityContainer,
    EntityContainerInfo,
    EntitySet,
    EntityType,
    Facets,
    FullQualifiedName,
    FunctionImport,
    FunctionImportParameter,
    Key,
    NavigationProperty,
    PropertyRef,
    ReturnType,
    Schema,
    SimpleProperty,
)
from .extractor import MetadataExtractor
from .provider import AnnotationEdmProvider
from .service import EdmService

__all__ = [
    'EdmComplexType',
    'EdmConcurrencyControl',
    'EdmEntityContainer',
    'EdmEntitySet',
    'EdmEntityType',
    'EdmFacets',
    'EdmFunctionImport',
    'EdmFunctionImportParameter',
    'EdmKey',
    'EdmMediaResourceContent',
    'EdmNavigationProperty',
    'EdmProperty',
    'EdmReturnType',
    'edm_complex_type',
    'edm_entity_container',
    'edm_entity_set',
    'edm_entity_type',
    'edm_function_import',
    'ConcurrencyMode',
    'EdmSimpleTypeKind',
    'Multiplicity',
    'EdmConfigurationError',
    'EdmReferenceError',
    'EdmSchemaError',
    'Association',
    'AssociationEnd',
    'AssociationSet',
    'AssociationSetEnd',
    'ComplexProperty',
    'ComplexType',
    'EntityContainer',
    'EntityContainerInfo',
    'EntitySet',
    'EntityType',
    'Facets',
    'FullQualifiedName',
    'FunctionImport',
    'FunctionImportParameter',
    'Key',
    'NavigationProperty',
    'PropertyRef',
    'ReturnType',
    'Schema',
    'SimpleProperty',
    'MetadataExtractor',
    'AnnotationEdmProvider',
    'EdmService',
]
