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
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from ..schema.object_schema import PropertyRule

logger = logging.getLogger(__name__)

ParentOf = Callable[[Any], Optional[Any]]


class MetadataStorage:
    """Per-class property rules with inheritance-aware, memoized lookup.

    Rules are expected to be declared while classes are defined, before any
    lookup. A merged view is cached on first lookup and is never invalidated.
    """

    def __init__(self, parent_of: Optional[ParentOf] = None):
        """Initialize the storage.

        Args:
            parent_of: Returns the parent of a class, or None at the root. When
                omitted the chain is the class's method resolution order.
        """
        self._parent_of = parent_of
        self._metadata_map: Dict[Any, Dict[str, PropertyRule]] = {}
        self._merged_cache: Dict[Any, Mapping[str, PropertyRule]] = {}
        self._lock = threading.RLock()

    def add_rule(self, target: Any, property_name: str, rule: PropertyRule) -> None:
        """Insert or replace the rule for a property declared on target."""
        with self._lock:
            if target in self._merged_cache:
                logger.warning(
                    f"Rule for '{property_name}' added to {_describe(target)} after its metadata was merged; "
                    "the cached schema will not include it"
                )
            schema_map = self._metadata_map.setdefault(target, {})
            schema_map[property_name] = rule

    def get_own_metadata(self, target: Any) -> Optional[Mapping[str, PropertyRule]]:
        """Get the rules declared on target itself, without inherited ones."""
        schema_map = self._metadata_map.get(target)
        if schema_map is None:
            return None
        return MappingProxyType(schema_map)

    def get_merged_metadata(self, target: Any) -> Optional[Mapping[str, PropertyRule]]:
        """Get the rules of target merged with those of all its ancestors.

        Ancestor rules come first; a rule declared on a more derived class
        replaces an ancestor rule of the same name.

        Returns:
            Read-only mapping of property name to rule, or None when neither
            the class nor any ancestor declares a rule
        """
        with self._lock:
            cached = self._merged_cache.get(target)
            if cached is not None:
                return cached

            levels: List[Dict[str, PropertyRule]] = []
            for ancestor in self._ancestry(target):
                schema_map = self._metadata_map.get(ancestor)
                if schema_map:
                    levels.append(schema_map)

            merged: Dict[str, PropertyRule] = {}
            for schema_map in reversed(levels):
                merged.update(schema_map)

            # Empty results are not cached so that rules declared later still show up
            if not merged:
                return None

            logger.debug(f"Merged {len(merged)} rule(s) from {len(levels)} class level(s) for {_describe(target)}")
            result = MappingProxyType(merged)
            self._merged_cache[target] = result
            return result

    def _ancestry(self, target: Any) -> Iterator[Any]:
        """Yield target and its ancestors, most derived first."""
        if self._parent_of is None:
            yield from getattr(target, "__mro__", (target,))
            return

        current = target
        while current is not None:
            yield current
            current = self._parent_of(current)


def _describe(target: Any) -> str:
    return getattr(target, "__qualname__", repr(target))
