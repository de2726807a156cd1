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

"""Object and array schemas backed by jsonschema.

Rule fragments are plain JSON Schema mappings, or the ObjectSchema and
ArraySchema wrappers defined here. Wrappers are immutable: shape(), of() and
clone() always return new instances, so a composed schema can be shared by
every property that nests it.
"""

from __future__ import annotations

import copy
import dataclasses
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type

import jsonschema
from jsonschema import validators
from jsonschema.exceptions import best_match

from ..config import validation_config
from ..exceptions import SchemaPathError, ValidationError


JsonPointer = str

_PATH_TOKEN_RE = re.compile(r"[^.\[\]]+")


@dataclass(frozen=True)
class SchemaIssue:
    message: str
    path: Optional[JsonPointer] = None


@dataclass(frozen=True)
class PropertyRule:
    """A rule fragment bound to a property, plus whether the property must be present."""

    fragment: Any
    required: bool = False


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _join_path(base: Optional[JsonPointer], token: str) -> JsonPointer:
    if not base:
        return f"/{_jp_escape(token)}"
    return f"{base}/{_jp_escape(token)}"


def _pointer(parts: Iterable[Any], base: Optional[JsonPointer] = None) -> JsonPointer:
    path = base or ""
    for part in parts:
        path = _join_path(path, str(part))
    return path


def as_property_rule(value: Any) -> PropertyRule:
    if isinstance(value, PropertyRule):
        return value
    return PropertyRule(value)


def render_fragment(fragment: Any) -> Any:
    """Render a rule fragment as a plain JSON Schema value."""
    if isinstance(fragment, PropertyRule):
        return render_fragment(fragment.fragment)
    if isinstance(fragment, _SchemaNode):
        return fragment.to_json_schema()
    if isinstance(fragment, Mapping):
        return copy.deepcopy(dict(fragment))
    if isinstance(fragment, bool):
        return fragment
    if fragment is None:
        return {}
    raise TypeError(f"Unsupported rule fragment: {fragment!r}")


def to_instance_data(value: Any) -> Any:
    """Convert objects to the plain data jsonschema validates.

    Mappings and sequences are copied, dataclasses and other objects become
    dicts of their public attributes. Attributes set to None are treated as
    absent; None values inside mappings are kept. Scalars are returned unchanged.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {key: to_instance_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_instance_data(item) for item in value]
    if isinstance(value, type):
        return value
    if dataclasses.is_dataclass(value):
        attributes = {field.name: getattr(value, field.name) for field in dataclasses.fields(value)}
    elif hasattr(value, "__dict__"):
        attributes = {key: item for key, item in vars(value).items() if not key.startswith("_")}
    else:
        return value
    return {key: to_instance_data(item) for key, item in attributes.items() if item is not None}


_DEFAULTING_VALIDATORS: Dict[Type, Type] = {}


def _extend_with_default(validator_class: Type) -> Type:
    """Derive a validator class that writes missing default values into the instance."""
    if validator_class in _DEFAULTING_VALIDATORS:
        return _DEFAULTING_VALIDATORS[validator_class]

    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if validator.is_type(instance, "object"):
            for name, subschema in properties.items():
                if isinstance(subschema, Mapping) and "default" in subschema:
                    instance.setdefault(name, copy.deepcopy(subschema["default"]))
        yield from validate_properties(validator, properties, instance, schema)

    extended = validators.extend(validator_class, {"properties": set_defaults})
    _DEFAULTING_VALIDATORS[validator_class] = extended
    return extended


def _build_validator(document: Any, fill_defaults: bool = False):
    validator_class = validation_config.validator_class()
    if fill_defaults:
        validator_class = _extend_with_default(validator_class)
    format_checker = jsonschema.FormatChecker() if validation_config.format_check else None
    return validator_class(document, format_checker=format_checker)


def _collect_issues(validator, data: Any, abort_early: Optional[bool], base: Optional[JsonPointer] = None) -> List[SchemaIssue]:
    if abort_early is None:
        abort_early = validation_config.abort_early

    errors = validator.iter_errors(data)
    if abort_early:
        error = best_match(errors)
        errors = [error] if error is not None else []

    return [SchemaIssue(message=error.message, path=_pointer(error.absolute_path, base)) for error in errors]


def _child_value(value: Any, token: Any) -> Tuple[Any, bool]:
    if isinstance(token, int):
        if isinstance(value, list) and token < len(value):
            return value[token], True
        return None, False
    if isinstance(value, dict) and token in value:
        return value[token], True
    return None, False


class _SchemaNode:
    """Shared validation entry points of object and array schemas."""

    def __init__(self, definition: Optional[Mapping[str, Any]] = None):
        self._definition: Dict[str, Any] = copy.deepcopy(dict(definition or {}))
        self._validators: Dict[Tuple[str, bool, bool], Any] = {}

    @property
    def definition(self) -> Mapping[str, Any]:
        """Schema keywords other than the composed properties/items."""
        return MappingProxyType(self._definition)

    def to_json_schema(self) -> Dict[str, Any]:
        raise NotImplementedError

    def _validator(self, fill_defaults: bool = False):
        key = (validation_config.draft, validation_config.format_check, fill_defaults)
        if key not in self._validators:
            self._validators[key] = _build_validator(self.to_json_schema(), fill_defaults=fill_defaults)
        return self._validators[key]

    def validate(self, instance: Any, abort_early: Optional[bool] = None) -> Any:
        """Validate an instance.

        Args:
            instance: Object, dataclass or plain data to validate
            abort_early: Report only the most relevant issue instead of all issues

        Returns:
            The validated plain data

        Raises:
            ValidationError: If the instance does not satisfy the schema
        """
        data = to_instance_data(instance)
        issues = _collect_issues(self._validator(), data, abort_early)
        if issues:
            raise ValidationError(issues)
        return data

    def is_valid(self, instance: Any) -> bool:
        return self._validator().is_valid(to_instance_data(instance))

    def cast(self, instance: Any) -> Any:
        """Convert an instance to plain data, filling defaults declared in the schema."""
        data = to_instance_data(instance)
        validator = self._validator(fill_defaults=True)
        # Defaults are written while the validator walks the instance; cast
        # does not report constraint failures.
        for _ in validator.iter_errors(data):
            pass
        return data

    def validate_at(self, path: str, instance: Any, abort_early: Optional[bool] = None) -> Any:
        """Validate a single property addressed by a dotted path such as job.office[0].name.

        Returns:
            The validated value, or None when an optional property is absent

        Raises:
            SchemaPathError: If the path does not exist in the schema
            ValidationError: If the value does not satisfy its rule
        """
        data = to_instance_data(instance)
        rule, value, present, pointer = self._resolve_path(path, data)

        if not present:
            if rule.required:
                name = pointer.rsplit("/", 1)[-1]
                raise ValidationError([SchemaIssue(message=f"'{name}' is a required property", path=pointer)])
            return None

        validator = _build_validator(render_fragment(rule.fragment))
        issues = _collect_issues(validator, value, abort_early, base=pointer)
        if issues:
            raise ValidationError(issues)
        return value

    def _resolve_path(self, path: str, data: Any) -> Tuple[PropertyRule, Any, bool, JsonPointer]:
        tokens = _PATH_TOKEN_RE.findall(path or "")
        if not tokens:
            raise SchemaPathError(f"Invalid property path: '{path}'")

        rule = PropertyRule(self)
        value, present = data, True
        pointer = ""

        for token in tokens:
            rule, key = self._child_rule(rule.fragment, token, path)
            pointer = _join_path(pointer, str(key))
            if present:
                value, present = _child_value(value, key)

        return rule, value, present, pointer

    @staticmethod
    def _child_rule(fragment: Any, token: str, path: str) -> Tuple[PropertyRule, Any]:
        if isinstance(fragment, ObjectSchema):
            if token in fragment.fields:
                return fragment.fields[token], token
        elif isinstance(fragment, ArraySchema):
            if token.isdigit():
                return PropertyRule(fragment.element), int(token)
        elif isinstance(fragment, Mapping):
            properties = fragment.get("properties", {})
            if token in properties:
                return PropertyRule(properties[token], required=token in fragment.get("required", ())), token
            if token.isdigit() and "items" in fragment:
                return PropertyRule(fragment["items"]), int(token)

        raise SchemaPathError(f"Property '{token}' of path '{path}' is not defined in the schema")


class ObjectSchema(_SchemaNode):
    """An object schema composed of named property rules."""

    def __init__(self, definition: Optional[Mapping[str, Any]] = None, fields: Optional[Mapping[str, Any]] = None):
        super().__init__(definition)
        self._fields: Dict[str, PropertyRule] = {
            name: as_property_rule(rule) for name, rule in (fields or {}).items()
        }

    @classmethod
    def from_json_schema(cls, document: Mapping[str, Any]) -> 'ObjectSchema':
        """Build an object schema from a raw JSON Schema object definition."""
        properties = dict(document.get("properties") or {})
        required = list(document.get("required") or [])

        definition = {key: value for key, value in document.items() if key not in ("type", "properties", "required")}
        leftover_required = [name for name in required if name not in properties]
        if leftover_required:
            definition["required"] = leftover_required

        fields = {
            name: PropertyRule(fragment, required=name in required)
            for name, fragment in properties.items()
        }
        return cls(definition, fields)

    @property
    def fields(self) -> Mapping[str, PropertyRule]:
        return MappingProxyType(self._fields)

    def shape(self, fields: Mapping[str, Any]) -> 'ObjectSchema':
        """Return a new schema with fields added to, or replacing, the existing fields."""
        merged = dict(self._fields)
        for name, rule in fields.items():
            merged[name] = as_property_rule(rule)
        return ObjectSchema(self._definition, merged)

    def clone(self) -> 'ObjectSchema':
        return ObjectSchema(self._definition, self._fields)

    def to_json_schema(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {"type": "object"}
        document.update(copy.deepcopy(self._definition))

        required = list(document.pop("required", []))
        properties = dict(document.pop("properties", {}))
        for name, rule in self._fields.items():
            properties[name] = render_fragment(rule.fragment)
            if rule.required and name not in required:
                required.append(name)

        if properties:
            document["properties"] = properties
        if required:
            document["required"] = required
        return document

    def __repr__(self) -> str:
        return f"ObjectSchema(fields={list(self._fields)})"


class ArraySchema(_SchemaNode):
    """An array schema with an optional element rule."""

    def __init__(self, definition: Optional[Mapping[str, Any]] = None, element: Any = None):
        super().__init__(definition)
        self._element = element

    @property
    def element(self) -> Any:
        return self._element

    def of(self, element: Any) -> 'ArraySchema':
        return ArraySchema(self._definition, element)

    def clone(self) -> 'ArraySchema':
        return ArraySchema(self._definition, self._element)

    def to_json_schema(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {"type": "array"}
        document.update(copy.deepcopy(self._definition))
        if self._element is not None:
            document["items"] = render_fragment(self._element)
        return document

    def __repr__(self) -> str:
        return f"ArraySchema(element={self._element!r})"


def new_object_schema() -> ObjectSchema:
    """Create an empty object schema."""
    return ObjectSchema()
