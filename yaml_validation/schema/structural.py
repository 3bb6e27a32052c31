from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from jsonschema import Draft4Validator, FormatChecker, validators
from jsonschema.exceptions import SchemaError, UnknownType
from referencing.exceptions import Unresolvable

JsonPointer = str


@dataclass(frozen=True)
class SchemaIssue:
    message: str
    yaml_path: Optional[JsonPointer] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        text = self.message
        if self.yaml_path:
            text += f" (yaml_path={self.yaml_path}"
            if self.line is not None:
                text += f", line {self.line}"
            text += ")"
        return text


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _pointer(path) -> JsonPointer:
    if not path:
        return ""
    return "/" + "/".join(_jp_escape(str(p)) for p in path)


def _locate(path: JsonPointer, source_map: Optional[Dict[str, Dict[str, int]]]) -> Optional[int]:
    if not source_map:
        return None
    location = source_map.get(path)
    if location is None:
        return None
    return location.get("line")


def validate_against_schema(
    data: Any,
    schema: Dict[str, Any],
    *,
    source_map: Optional[Dict[str, Dict[str, int]]] = None,
) -> List[SchemaIssue]:
    """Validate data against a JSON Schema and return every violation.

    Schemas without ``$schema`` are evaluated as draft 4, the dialect of
    OpenAPI v2/v3 structural schemas.

    Args:
        data: Decoded document
        schema: JSON Schema dictionary
        source_map: Optional pointer -> line/column map used to annotate issues

    Returns:
        List of SchemaIssue objects, empty when the data is valid
    """
    validator_cls = validators.validator_for(schema, default=Draft4Validator)
    validator = validator_cls(schema, format_checker=FormatChecker())

    issues: List[SchemaIssue] = []
    try:
        errors = sorted(
            validator.iter_errors(data),
            key=lambda e: [str(p) for p in e.absolute_path],
        )
    except (SchemaError, UnknownType, Unresolvable) as e:
        return [SchemaIssue(message=f"JSON Schema validation error: {e}", yaml_path="")]

    for error in errors:
        path = _pointer(error.absolute_path)
        issues.append(SchemaIssue(message=error.message, yaml_path=path, line=_locate(path, source_map)))

    return issues


def find_unknown_fields(data: Any, schema: Dict[str, Any]) -> List[str]:
    """Top-level keys of *data* not declared by a closed root schema."""
    if not isinstance(data, dict):
        return []
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return []
    if schema.get("additionalProperties") is not False:
        return []
    return [key for key in data if key not in properties]


def apply_defaults(data: Any, schema: Dict[str, Any]) -> Any:
    """Return a copy of *data* with schema-declared defaults filled in.

    Only call this for data that already passed validation. Inserted
    defaults are defaulted themselves, so applying twice changes nothing.
    """
    result = copy.deepcopy(data)
    _apply_defaults(result, schema)
    return result


def _apply_defaults(value: Any, schema: Any) -> None:
    if not isinstance(schema, dict):
        return

    for sub_schema in schema.get("allOf") or ():
        _apply_defaults(value, sub_schema)

    if isinstance(value, dict):
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return
        for name, prop in properties.items():
            if not isinstance(prop, dict):
                continue
            if name not in value:
                if "default" not in prop:
                    continue
                value[name] = copy.deepcopy(prop["default"])
            _apply_defaults(value[name], prop)

    elif isinstance(value, list):
        items = schema.get("items")
        if isinstance(items, list):
            for item, item_schema in zip(value, items):
                _apply_defaults(item, item_schema)
        else:
            for item in value:
                _apply_defaults(item, items)
