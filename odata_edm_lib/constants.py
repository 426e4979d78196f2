"""
Constants used throughout the OData EDM library.
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum


class EdmSimpleTypeKind(str, Enum):
    """OData v2 primitive types a simple property can carry."""
    BINARY = "Edm.Binary"
    BOOLEAN = "Edm.Boolean"
    BYTE = "Edm.Byte"
    DATE_TIME = "Edm.DateTime"
    DATE_TIME_OFFSET = "Edm.DateTimeOffset"
    DECIMAL = "Edm.Decimal"
    DOUBLE = "Edm.Double"
    GUID = "Edm.Guid"
    INT16 = "Edm.Int16"
    INT32 = "Edm.Int32"
    INT64 = "Edm.Int64"
    SBYTE = "Edm.SByte"
    SINGLE = "Edm.Single"
    STRING = "Edm.String"
    TIME = "Edm.Time"


class Multiplicity(str, Enum):
    ONE = "1"
    MANY = "*"
    ZERO_TO_ONE = "0..1"


class ConcurrencyMode(str, Enum):
    NONE = "None"
    FIXED = "Fixed"


# Python types to their default OData primitive type
PYTHON_TYPE_MAP = {
    str: EdmSimpleTypeKind.STRING,
    bool: EdmSimpleTypeKind.BOOLEAN,
    int: EdmSimpleTypeKind.INT32,
    float: EdmSimpleTypeKind.DOUBLE,
    Decimal: EdmSimpleTypeKind.DECIMAL,
    bytes: EdmSimpleTypeKind.BINARY,
    bytearray: EdmSimpleTypeKind.BINARY,
    datetime.datetime: EdmSimpleTypeKind.DATE_TIME,
    datetime.date: EdmSimpleTypeKind.DATE_TIME,
    datetime.time: EdmSimpleTypeKind.TIME,
    uuid.UUID: EdmSimpleTypeKind.GUID,
}

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "MERGE", "PATCH")

DEFAULT_CONTAINER_NAME = "DefaultContainer"
ROLE_PREFIX = "r_"
ENTITY_SET_SUFFIX = "s"

# Attribute names the decorators use to attach metadata records
ENTITY_TYPE_ATTR = "__edm_entity_type__"
COMPLEX_TYPE_ATTR = "__edm_complex_type__"
ENTITY_SET_ATTR = "__edm_entity_set__"
CONTAINER_ATTR = "__edm_entity_container__"
FUNCTION_IMPORT_ATTR = "__edm_function_import__"
