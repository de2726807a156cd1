"""Schema objects and loaders.

This package wraps jsonschema and intentionally avoids depending on the
metadata and registry modules, so the composed schemas stay usable on their own.
"""

from .object_schema import (
    ArraySchema,
    ObjectSchema,
    PropertyRule,
    SchemaIssue,
    new_object_schema,
    render_fragment,
    to_instance_data,
)
from .schema_loader import clear_cache, load_schema_document, load_schema_file
