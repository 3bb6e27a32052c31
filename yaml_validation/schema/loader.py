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

"""Loader for bundled schema definition documents.

A definition document declares one kind and its schema per version::

    kind: TestKind
    apiVersions:
    - apiVersion: deckhouse.io/v1
      openAPISpec:
        type: object
        properties: ...
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from referencing import Registry
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT4

from ..exceptions import InvalidYAMLError, SchemaDecodeError, SchemaReferenceError
from ..index import SchemaIndex
from ..parsing.yaml_parser import Source, read_content, yaml_parser
from ..transformer import AdditionalPropertiesTransformer, transform_schema

logger = logging.getLogger(__name__)

_DEFINITION_FIELDS = ("kind", "apiVersions")
_VERSION_FIELDS = ("apiVersion", "openAPISpec")

# Keywords whose values are data, not subschemas.
_DATA_KEYWORDS = ("enum", "default", "example", "examples", "const")
# Keywords whose values map names to subschemas.
_SCHEMA_MAP_KEYWORDS = ("properties", "patternProperties", "definitions", "$defs", "dependencies")

SCHEMA_FILE_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass(frozen=True)
class SchemaWithIndex:
    index: SchemaIndex
    schema: Dict[str, Any]


def _check_fields(data: Dict[str, Any], allowed: Tuple[str, ...], where: str) -> None:
    unknown = [key for key in data if key not in allowed]
    if unknown:
        raise SchemaDecodeError(
            f"Failed unmarshal openapi schema: unknown field(s) {unknown} in {where}"
        )


def _decode_definition(content: bytes) -> Tuple[str, List[Dict[str, Any]]]:
    try:
        data = yaml_parser.load_mapping(content, strict=True)
    except InvalidYAMLError as exc:
        raise SchemaDecodeError(f"Failed unmarshal openapi schema: {exc}") from exc

    _check_fields(data, _DEFINITION_FIELDS, "schema definition")

    kind = data.get("kind")
    if not isinstance(kind, str) or not kind:
        raise SchemaDecodeError("Failed unmarshal openapi schema: 'kind' must be a non-empty string")

    versions = data.get("apiVersions")
    if versions is None:
        versions = []
    if not isinstance(versions, list):
        raise SchemaDecodeError("Failed unmarshal openapi schema: 'apiVersions' must be a list")

    for position, entry in enumerate(versions):
        where = f"apiVersions[{position}]"
        if not isinstance(entry, dict):
            raise SchemaDecodeError(f"Failed unmarshal openapi schema: {where} must be a mapping")
        _check_fields(entry, _VERSION_FIELDS, where)
        if not isinstance(entry.get("apiVersion"), str) or not entry["apiVersion"]:
            raise SchemaDecodeError(
                f"Failed unmarshal openapi schema: {where}.apiVersion must be a non-empty string"
            )
        if not isinstance(entry.get("openAPISpec"), dict):
            raise SchemaDecodeError(
                f"Failed unmarshal openapi schema: {where}.openAPISpec must be a mapping"
            )

    return kind, versions


def _canonical_schema(raw: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return json.loads(json.dumps(raw))
    except (TypeError, ValueError) as exc:
        raise SchemaDecodeError(f"json marshal schema: {exc}") from exc


def expand_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of *schema* with every ``$ref`` replaced by its target.

    Raises:
        SchemaReferenceError: For unresolvable or circular references
    """
    resource = DRAFT4.create_resource(schema)
    resolver = Registry().resolver_with_root(resource)
    return _expand(schema, resolver, ())


def _expand(node: Any, resolver, stack: Tuple[str, ...]) -> Any:
    if isinstance(node, list):
        return [_expand(item, resolver, stack) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        if ref in stack:
            raise SchemaReferenceError(f"expand the schema: circular reference {ref!r}")
        try:
            resolved = resolver.lookup(ref)
        except Unresolvable as exc:
            raise SchemaReferenceError(f"expand the schema: cannot resolve {ref!r}: {exc}") from exc
        return _expand(resolved.contents, resolved.resolver, stack + (ref,))

    expanded = {}
    for key, value in node.items():
        if key in _DATA_KEYWORDS:
            expanded[key] = value
        elif key in _SCHEMA_MAP_KEYWORDS and isinstance(value, dict):
            expanded[key] = {name: _expand(sub, resolver, stack) for name, sub in value.items()}
        else:
            expanded[key] = _expand(value, resolver, stack)
    return expanded


def load_schemas(source: Source) -> List[SchemaWithIndex]:
    """Load every versioned schema declared by a definition document.

    Undeclared fields are closed (``additionalProperties: false``) unless a
    schema node declares ``additionalProperties`` itself.

    Args:
        source: Definition bytes, text, path or readable file object

    Returns:
        One SchemaWithIndex per declared version

    Raises:
        ReadError: If the source cannot be read
        SchemaDecodeError: If the definition document is malformed
        SchemaReferenceError: If schema references cannot be expanded
    """
    content = read_content(source)
    kind, versions = _decode_definition(content)

    result: List[SchemaWithIndex] = []
    for entry in versions:
        schema = expand_schema(_canonical_schema(entry["openAPISpec"]))
        schema = transform_schema(schema, AdditionalPropertiesTransformer())

        index = SchemaIndex(kind=kind, version=entry["apiVersion"])
        logger.debug(f"Loaded schema for {index}")
        result.append(SchemaWithIndex(index=index, schema=schema))

    return result


def load_schemas_from_dir(directory: Union[str, Path]) -> List[SchemaWithIndex]:
    """Load all definition documents in *directory* (sorted by file name)."""
    schema_dir = Path(directory)
    result: List[SchemaWithIndex] = []
    for path in sorted(schema_dir.iterdir()):
        if not path.is_file() or path.suffix not in SCHEMA_FILE_SUFFIXES:
            continue
        logger.debug(f"Loading schema definitions from: {path}")
        result.extend(load_schemas(path))
    return result
