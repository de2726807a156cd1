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

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from .metadata import MetadataStorage
from .schema.object_schema import ArraySchema, ObjectSchema, PropertyRule, new_object_schema
from .utils.type_hints import declared_property_type

logger = logging.getLogger(__name__)

TypeFactory = Callable[[], Any]


def _describe(target: Any) -> str:
    return getattr(target, "__qualname__", repr(target))


def _as_type_factory(type_or_factory: Any) -> TypeFactory:
    if isinstance(type_or_factory, type):
        return lambda: type_or_factory
    return type_or_factory


class SchemaRegistry:
    """Composes object schemas from declared property rules and indexes them by type and name.

    Declarations are expected to finish before schemas are queried. Composition
    of a class is tracked on a registry-wide stack; a nested reference to a
    class that is on the stack is skipped, which breaks self references and
    reference cycles.
    """

    def __init__(self, metadata: Optional[MetadataStorage] = None):
        self.metadata = metadata if metadata is not None else MetadataStorage()
        self._schemas_by_type: Dict[Any, ObjectSchema] = {}
        self._schemas_by_name: Dict[str, ObjectSchema] = {}
        self._composing: List[Any] = []
        self._lock = threading.RLock()

    # ---- composition guard ---------------------------------------------------

    @contextmanager
    def composing(self, target: Any) -> Iterator[None]:
        """Mark target as being composed for the duration of the block."""
        with self._lock:
            self._composing.append(target)
            try:
                yield
            finally:
                self._composing.pop()

    def is_composing(self, target: Any) -> bool:
        return any(entry is target for entry in self._composing)

    # ---- lookup --------------------------------------------------------------

    def get_schema_by_name(self, name: str) -> Optional[ObjectSchema]:
        return self._schemas_by_name.get(name)

    def get_schema_by_type(self, target: Any) -> Optional[ObjectSchema]:
        """Get the schema composed for a class identity, or for the class of an instance."""
        try:
            composed = self._schemas_by_type.get(target)
        except TypeError:
            # Unhashable instances, e.g. dataclasses with eq=True
            composed = None
        if composed is None and not isinstance(target, type):
            composed = self._schemas_by_type.get(type(target))
        return composed

    # ---- composition ---------------------------------------------------------

    def add_rule(self, target: Any, property_name: str, fragment: Any, required: bool = False) -> None:
        self.metadata.add_rule(target, property_name, PropertyRule(fragment, required=required))

    def define_schema(self, target: Any, base_schema: Optional[ObjectSchema] = None) -> ObjectSchema:
        """Compose the schema of target on top of base_schema.

        Returns:
            The composed schema, registered by type. When neither the class nor
            its ancestors declare a rule, base_schema is returned unchanged
            and nothing is registered.
        """
        if base_schema is None:
            base_schema = new_object_schema()

        with self.composing(target):
            merged = self.metadata.get_merged_metadata(target)
            if merged is None:
                logger.debug(f"No rules declared for {_describe(target)}, schema left unchanged")
                return base_schema

            object_schema = base_schema.shape(merged)
            self._schemas_by_type[target] = object_schema
            logger.debug(f"Composed schema for {_describe(target)} with fields {list(merged)}")
            return object_schema

    def register_named(self, name: str, target: Any, base_schema: Optional[ObjectSchema] = None) -> ObjectSchema:
        """Compose the schema of target and also index it under name.

        A later registration under the same name replaces the earlier one.
        """
        object_schema = self.define_schema(target, base_schema)
        if self._schemas_by_type.get(target) is not object_schema:
            logger.debug(f"Schema '{name}' not registered: {_describe(target)} declares no rules")
            return object_schema

        if name in self._schemas_by_name:
            logger.debug(f"Replacing schema registered as '{name}' with the schema of {_describe(target)}")
        self._schemas_by_name[name] = object_schema
        return object_schema

    # ---- nested schema resolution ---------------------------------------------

    def resolve_nested_schema(self, target_type: Any, predefined_schema: Optional[ObjectSchema] = None) -> Optional[ObjectSchema]:
        """Get the schema to nest for a property typed as target_type.

        Returns:
            The nested schema, or None when target_type is already being
            composed, or when it has no rules and no predefined schema is given
        """
        if self.is_composing(target_type):
            logger.debug(f"Skipping nested schema for {_describe(target_type)}: composition already in progress")
            return None

        if predefined_schema is not None:
            return self.define_schema(target_type, predefined_schema.clone())

        existing = self._schemas_by_type.get(target_type)
        if existing is not None:
            return existing

        # Build one for types never registered through a class decorator
        nested_schema = self.define_schema(target_type, new_object_schema())
        if self._schemas_by_type.get(target_type) is not nested_schema:
            return None
        return nested_schema

    def resolve_array_element_schema(
        self,
        element_type_factory: TypeFactory,
        array_schema: Optional[ArraySchema] = None,
        element_schema: Optional[ObjectSchema] = None,
    ) -> ArraySchema:
        """Get the array schema for a property holding elements of a nested type."""
        if array_schema is None:
            array_schema = ArraySchema()

        nested_schema = self.resolve_nested_schema(element_type_factory(), element_schema)
        if nested_schema is None:
            return array_schema
        return array_schema.of(nested_schema)

    def resolve_reflected_nested_schema(
        self,
        target: type,
        property_name: str,
        predefined_schema: Optional[ObjectSchema] = None,
    ) -> Optional[ObjectSchema]:
        """Like resolve_nested_schema, with the type taken from the property's annotation."""
        nested_type = declared_property_type(target, property_name)
        if nested_type is None:
            logger.warning(
                f"No class annotation found for {_describe(target)}.{property_name}; nested schema skipped"
            )
            return None
        return self.resolve_nested_schema(nested_type, predefined_schema)

    # ---- declarations --------------------------------------------------------

    def declare_nested(
        self,
        target: Any,
        property_name: str,
        nested_type: Any,
        predefined_schema: Optional[ObjectSchema] = None,
        required: bool = False,
    ) -> Optional[ObjectSchema]:
        """Declare a property holding an object of nested_type (a class or a function returning one)."""
        with self.composing(target):
            nested_schema = self.resolve_nested_schema(_as_type_factory(nested_type)(), predefined_schema)
            if nested_schema is None:
                return None
            self.add_rule(target, property_name, nested_schema, required=required)
            return nested_schema

    def declare_nested_array(
        self,
        target: Any,
        property_name: str,
        element_type: Any,
        array_schema: Optional[ArraySchema] = None,
        element_schema: Optional[ObjectSchema] = None,
        required: bool = False,
    ) -> ArraySchema:
        """Declare a property holding a list of element_type objects."""
        with self.composing(target):
            resolved = self.resolve_array_element_schema(_as_type_factory(element_type), array_schema, element_schema)
            self.add_rule(target, property_name, resolved, required=required)
            return resolved

    def declare_reflected_nested(
        self,
        target: type,
        property_name: str,
        predefined_schema: Optional[ObjectSchema] = None,
        required: bool = False,
    ) -> Optional[ObjectSchema]:
        """Declare a nested property whose type is read from the class annotations."""
        with self.composing(target):
            nested_schema = self.resolve_reflected_nested_schema(target, property_name, predefined_schema)
            if nested_schema is None:
                return None
            self.add_rule(target, property_name, nested_schema, required=required)
            return nested_schema


# Registry used by the decorators unless another one is passed
default_registry = SchemaRegistry()
