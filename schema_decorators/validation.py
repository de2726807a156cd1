# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Validation entry points that look up the schema of an object and apply it."""

import dataclasses
from collections.abc import Mapping
from typing import Any, Optional, Union

from .exceptions import InvalidTargetError, SchemaNotFoundError
from .registry import SchemaRegistry, default_registry
from .schema.object_schema import ObjectSchema

SchemaName = Union[str, type, None]


def _is_object(obj: Any) -> bool:
    if obj is None or isinstance(obj, (str, bytes, int, float, bool, type)):
        return False
    return isinstance(obj, Mapping) or dataclasses.is_dataclass(obj) or hasattr(obj, "__dict__")


def get_named_schema(name: str, registry: Optional[SchemaRegistry] = None) -> Optional[ObjectSchema]:
    """Get the schema registered under name."""
    return (registry or default_registry).get_schema_by_name(name)


def get_schema_by_type(target: Any, registry: Optional[SchemaRegistry] = None) -> Optional[ObjectSchema]:
    """Get the schema of a class, or of the class of an instance."""
    return (registry or default_registry).get_schema_by_type(target)


def get_schema(obj: Any, schema_name: SchemaName = None, registry: Optional[SchemaRegistry] = None) -> ObjectSchema:
    """Get the schema to validate obj with.

    Args:
        obj: The object to validate
        schema_name: Registered schema name, or a class; defaults to the class of obj
        registry: Registry to look up (defaults to the shared registry)

    Raises:
        InvalidTargetError: If obj is not an object
        SchemaNotFoundError: If no schema is registered for the name or class
    """
    if not _is_object(obj):
        raise InvalidTargetError(f"Cannot validate non object types, got {type(obj).__name__}")

    registry = registry or default_registry
    if isinstance(schema_name, str):
        object_schema = registry.get_schema_by_name(schema_name)
        if object_schema is None:
            raise SchemaNotFoundError(f"No schema registered under the name '{schema_name}'")
        return object_schema

    target = schema_name if schema_name is not None else type(obj)
    object_schema = registry.get_schema_by_type(target)
    if object_schema is None:
        raise SchemaNotFoundError(f"No schema registered for type '{getattr(target, '__qualname__', target)}'")
    return object_schema


def validate(
    obj: Any,
    schema_name: SchemaName = None,
    abort_early: Optional[bool] = None,
    registry: Optional[SchemaRegistry] = None,
) -> Any:
    """Validate an object and return its plain data.

    Raises:
        ValidationError: If the object does not satisfy its schema
    """
    return get_schema(obj, schema_name, registry).validate(obj, abort_early=abort_early)


def validate_at(
    obj: Any,
    path: str,
    schema_name: SchemaName = None,
    abort_early: Optional[bool] = None,
    registry: Optional[SchemaRegistry] = None,
) -> Any:
    """Validate one property of an object and return its value."""
    return get_schema(obj, schema_name, registry).validate_at(path, obj, abort_early=abort_early)


def is_valid(obj: Any, schema_name: SchemaName = None, registry: Optional[SchemaRegistry] = None) -> bool:
    """Check whether an object satisfies its schema."""
    return get_schema(obj, schema_name, registry).is_valid(obj)


def cast(obj: Any, schema_name: SchemaName = None, registry: Optional[SchemaRegistry] = None) -> Any:
    """Convert an object to plain data, filling the defaults its schema declares."""
    return get_schema(obj, schema_name, registry).cast(obj)
