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

"""Declarative registration of property rules and class schemas.

Property markers are assigned in a class body::

    @named_schema("person")
    class Person:
        email = is_({"type": "string", "format": "email"}, required=True)
        house: House = nested()

Each marker registers its rule when the class is created and then removes
itself from the class, so it never shadows instance attributes or dataclass
fields. Class decorators run after all markers and compose the schema.
"""

from typing import Any, Callable, Optional, Type, TypeVar

from .registry import SchemaRegistry, default_registry
from .schema.object_schema import ArraySchema, ObjectSchema

T = TypeVar("T")


class PropertyDeclaration:
    """Base class for property markers."""

    def __init__(self, required: bool = False, registry: Optional[SchemaRegistry] = None):
        self.required = required
        self._registry = registry

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry if self._registry is not None else default_registry

    def __set_name__(self, owner: type, name: str) -> None:
        self.declare(owner, name)
        delattr(owner, name)

    def declare(self, owner: type, name: str) -> None:
        raise NotImplementedError


class RuleDeclaration(PropertyDeclaration):
    def __init__(self, fragment: Any, required: bool = False, registry: Optional[SchemaRegistry] = None):
        super().__init__(required, registry)
        self.fragment = fragment

    def declare(self, owner: type, name: str) -> None:
        self.registry.add_rule(owner, name, self.fragment, required=self.required)


class NestedDeclaration(PropertyDeclaration):
    def __init__(
        self,
        type_factory: Optional[Callable[[], Any]] = None,
        predefined_schema: Optional[ObjectSchema] = None,
        required: bool = False,
        registry: Optional[SchemaRegistry] = None,
    ):
        super().__init__(required, registry)
        self.type_factory = type_factory
        self.predefined_schema = predefined_schema

    def declare(self, owner: type, name: str) -> None:
        if self.type_factory is None:
            self.registry.declare_reflected_nested(owner, name, self.predefined_schema, required=self.required)
        else:
            self.registry.declare_nested(owner, name, self.type_factory, self.predefined_schema, required=self.required)


class NestedArrayDeclaration(PropertyDeclaration):
    def __init__(
        self,
        type_factory: Callable[[], Any],
        array_schema: Optional[ArraySchema] = None,
        element_schema: Optional[ObjectSchema] = None,
        required: bool = False,
        registry: Optional[SchemaRegistry] = None,
    ):
        super().__init__(required, registry)
        self.type_factory = type_factory
        self.array_schema = array_schema
        self.element_schema = element_schema

    def declare(self, owner: type, name: str) -> None:
        self.registry.declare_nested_array(
            owner, name, self.type_factory, self.array_schema, self.element_schema, required=self.required
        )


def is_(fragment: Any, required: bool = False, registry: Optional[SchemaRegistry] = None) -> RuleDeclaration:
    """Register a rule fragment for the property.

    Args:
        fragment: JSON Schema mapping, ObjectSchema or ArraySchema
        required: Whether the property must be present
        registry: Registry to declare into (defaults to the shared registry)
    """
    return RuleDeclaration(fragment, required, registry)


def nested(
    predefined_schema: Optional[ObjectSchema] = None,
    required: bool = False,
    registry: Optional[SchemaRegistry] = None,
) -> NestedDeclaration:
    """Register an object schema for a property, using the class the property is annotated with."""
    return NestedDeclaration(None, predefined_schema, required, registry)


def nested_type(
    type_factory: Callable[[], Any],
    predefined_schema: Optional[ObjectSchema] = None,
    required: bool = False,
    registry: Optional[SchemaRegistry] = None,
) -> NestedDeclaration:
    """Register an object schema for a property whose class is returned by type_factory."""
    return NestedDeclaration(type_factory, predefined_schema, required, registry)


def nested_array(
    type_factory: Callable[[], Any],
    array_schema: Optional[ArraySchema] = None,
    element_schema: Optional[ObjectSchema] = None,
    required: bool = False,
    registry: Optional[SchemaRegistry] = None,
) -> NestedArrayDeclaration:
    """Register an array property whose elements are objects of the class returned by type_factory."""
    return NestedArrayDeclaration(type_factory, array_schema, element_schema, required, registry)


def schema(
    base_schema: Optional[ObjectSchema] = None,
    registry: Optional[SchemaRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """Compose and register the schema of the decorated class."""
    def decorator(cls: Type[T]) -> Type[T]:
        (registry or default_registry).define_schema(cls, base_schema)
        return cls
    return decorator


def named_schema(
    name: str,
    base_schema: Optional[ObjectSchema] = None,
    registry: Optional[SchemaRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """Compose the schema of the decorated class and register it under name."""
    def decorator(cls: Type[T]) -> Type[T]:
        (registry or default_registry).register_named(name, cls, base_schema)
        return cls
    return decorator
