"""
Exceptions raised while deriving an Entity Data Model.
"""


class EdmSchemaError(ValueError):
    """Base class for every failure during model derivation."""


class EdmConfigurationError(EdmSchemaError):
    """Input classes or their metadata cannot describe a valid model."""


class EdmReferenceError(EdmSchemaError):
    """A derived element refers to something the model does not contain."""
