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

"""Declared property types recovered from class annotations."""

import logging
import sys
import types
import typing
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_UNION_ORIGINS = {typing.Union, getattr(types, "UnionType", typing.Union)}


def declared_property_type(owner: type, property_name: str) -> Optional[type]:
    """Get the class a property is annotated with.

    Only the annotation of property_name is evaluated, so unresolved forward
    references on other properties do not matter. The owner's own name
    resolves to the owner, so self references work while the class body is
    still being processed. Optional[X] resolves to X.

    Returns:
        The annotated class, or None when the annotation is missing,
        cannot be evaluated, or is not a plain class
    """
    found = _find_annotation(owner, property_name)
    if found is None:
        return None
    declaring, annotation = found

    module = sys.modules.get(declaring.__module__)
    globalns = dict(getattr(module, "__dict__", {}))
    localns = dict(vars(declaring))
    localns[declaring.__name__] = declaring
    localns[owner.__name__] = owner

    def annotation_holder():
        pass

    annotation_holder.__annotations__ = {property_name: annotation}
    try:
        hints = typing.get_type_hints(annotation_holder, globalns=globalns, localns=localns)
    except Exception as e:
        logger.warning(f"Cannot evaluate annotation of {owner.__qualname__}.{property_name}: {e}")
        return None

    return _unwrap_optional(hints[property_name])


def _find_annotation(owner: type, property_name: str) -> Optional[Tuple[type, Any]]:
    for klass in getattr(owner, "__mro__", (owner,)):
        annotations = _own_annotations(klass)
        if property_name in annotations:
            return klass, annotations[property_name]
    return None


def _own_annotations(klass: type) -> Dict[str, Any]:
    if sys.version_info >= (3, 14):
        import annotationlib

        # Unresolvable names come back as ForwardRef instead of raising.
        annotations = annotationlib.get_annotations(klass, format=annotationlib.Format.FORWARDREF)
        return {
            name: value.__forward_arg__ if isinstance(value, typing.ForwardRef) else value
            for name, value in annotations.items()
        }
    return dict(klass.__dict__.get("__annotations__", {}))


def _unwrap_optional(declared: Any) -> Optional[type]:
    origin = typing.get_origin(declared)
    if origin in _UNION_ORIGINS:
        args = [arg for arg in typing.get_args(declared) if arg is not type(None)]
        if len(args) == 1:
            return _unwrap_optional(args[0])
        return None

    if origin is not None or not isinstance(declared, type):
        return None
    return declared
