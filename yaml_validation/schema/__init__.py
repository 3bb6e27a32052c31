"""Schema loading, structural validation and defaulting.

Structural evaluation is delegated to jsonschema; this package only adapts
schemas and data to it.
"""

from .loader import (
    SchemaWithIndex,
    expand_schema,
    load_schemas,
    load_schemas_from_dir,
)
from .structural import (
    SchemaIssue,
    apply_defaults,
    find_unknown_fields,
    validate_against_schema,
)
