"""Declarative JSON Schema validation for Python classes.

Property markers and class decorators collect per-property rules, and a
registry composes them into one object schema per class, following class
inheritance.
"""

__version__ = "0.1.0"

from .config import ValidationConfig, validation_config
from .decorators import is_, named_schema, nested, nested_array, nested_type, schema
from .exceptions import (
    ConfigurationError,
    InvalidTargetError,
    SchemaDecoratorError,
    SchemaFileError,
    SchemaNotFoundError,
    SchemaPathError,
    ValidationError,
)
from .metadata import MetadataStorage
from .registry import SchemaRegistry, default_registry
from .schema import (
    ArraySchema,
    ObjectSchema,
    PropertyRule,
    SchemaIssue,
    load_schema_file,
    new_object_schema,
)
from .validation import (
    cast,
    get_named_schema,
    get_schema,
    get_schema_by_type,
    is_valid,
    validate,
    validate_at,
)

__all__ = [
    "ArraySchema",
    "ConfigurationError",
    "InvalidTargetError",
    "MetadataStorage",
    "ObjectSchema",
    "PropertyRule",
    "SchemaDecoratorError",
    "SchemaFileError",
    "SchemaIssue",
    "SchemaNotFoundError",
    "SchemaPathError",
    "SchemaRegistry",
    "ValidationConfig",
    "ValidationError",
    "cast",
    "default_registry",
    "get_named_schema",
    "get_schema",
    "get_schema_by_type",
    "is_",
    "is_valid",
    "load_schema_file",
    "named_schema",
    "nested",
    "nested_array",
    "nested_type",
    "new_object_schema",
    "schema",
    "validate",
    "validate_at",
    "validation_config",
]
