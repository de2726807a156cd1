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

"""Base object schema loader for JSON and YAML schema files."""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..exceptions import SchemaFileError
from .object_schema import ObjectSchema

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml")

# Schema cache to avoid reloading files
_SCHEMA_CACHE: Dict[str, Dict[str, Any]] = {}


def _parse_document(schema_path: Path) -> Any:
    with open(schema_path, "r", encoding="utf-8") as f:
        if schema_path.suffix == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def load_schema_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Load the raw JSON Schema document stored in a file.

    Args:
        path: Path to a .json, .yaml or .yml file

    Returns:
        A copy of the schema dictionary; the cached document is never exposed

    Raises:
        SchemaFileError: If the file is missing, has an unsupported suffix,
            cannot be parsed, or does not describe an object schema
    """
    schema_path = Path(path).resolve()

    # Check cache
    cache_key = str(schema_path)
    if cache_key in _SCHEMA_CACHE:
        return copy.deepcopy(_SCHEMA_CACHE[cache_key])

    if schema_path.suffix not in SUPPORTED_SUFFIXES:
        raise SchemaFileError(
            f"Unsupported schema file type '{schema_path.suffix}': {schema_path}. "
            f"Supported types: {list(SUPPORTED_SUFFIXES)}"
        )
    if not schema_path.exists():
        raise SchemaFileError(f"Schema file not found: {schema_path}")

    try:
        document = _parse_document(schema_path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SchemaFileError(f"Invalid content in schema file {schema_path}: {e}") from e

    if not isinstance(document, dict):
        raise SchemaFileError(
            f"Schema file {schema_path} must contain a mapping, got {type(document).__name__}"
        )
    if document.get("type", "object") != "object":
        raise SchemaFileError(
            f"Schema file {schema_path} must describe an object schema, got type '{document.get('type')}'"
        )

    logger.debug(f"Loaded schema document from: {schema_path}")

    # Cache the schema
    _SCHEMA_CACHE[cache_key] = document

    return copy.deepcopy(document)


def load_schema_file(path: Union[str, Path]) -> ObjectSchema:
    """Load a base object schema from a file.

    Every call returns a new ObjectSchema, so callers may compose on top of it
    without affecting other users of the same file.
    """
    return ObjectSchema.from_json_schema(load_schema_document(path))


def clear_cache() -> None:
    """Clear the schema cache. Useful for testing."""
    _SCHEMA_CACHE.clear()
