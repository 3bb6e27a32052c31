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

"""YAML document decoding and encoding."""

import logging
from collections.abc import Hashable
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..exceptions import InvalidYAMLError, ReadError

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, str, Path, Any]

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_MERGE_TAG = "tag:yaml.org,2002:merge"


class DocumentLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates and timestamps as plain strings.

    Documents are validated as JSON data, where a date is just a string.
    """


DocumentLoader.yaml_implicit_resolvers = {
    first: [resolver for resolver in resolvers if resolver[0] != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class StrictDocumentLoader(DocumentLoader):
    """DocumentLoader that rejects duplicate mapping keys."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == _MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                if not isinstance(key, Hashable):
                    continue
                if key in seen:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def read_content(source: Source) -> bytes:
    """Read raw document bytes from bytes, text, a path or a file-like object.

    Raises:
        ReadError: If the underlying source cannot be read
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str):
        return source.encode("utf-8")

    try:
        if isinstance(source, Path):
            return source.read_bytes()
        content = source.read()
    except (OSError, ValueError) as exc:
        raise ReadError(f"read failed: {exc}") from exc

    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


class YamlParser:
    """Decode and encode single YAML documents."""

    @staticmethod
    def _json_pointer_escape(token: str) -> str:
        # JSON Pointer escaping: "~" -> "~0", "/" -> "~1"
        return token.replace("~", "~0").replace("/", "~1")

    def load(self, content: Union[bytes, str], strict: bool = False) -> Any:
        """Decode one YAML document into generic Python data.

        Args:
            content: Raw document
            strict: Reject duplicate mapping keys

        Returns:
            Decoded data, ``{}`` for an empty document

        Raises:
            InvalidYAMLError: If content cannot be decoded
        """
        loader = StrictDocumentLoader if strict else DocumentLoader
        try:
            data = yaml.load(content, Loader=loader)
        except yaml.YAMLError as exc:
            mode = "strict " if strict else ""
            raise InvalidYAMLError(f"yaml {mode}unmarshal failed: {exc}") from exc

        if data is None:
            data = {}
        return data

    def load_mapping(self, content: Union[bytes, str], strict: bool = False) -> Dict[str, Any]:
        """Decode one YAML document that must be a mapping."""
        data = self.load(content, strict=strict)
        if not isinstance(data, dict):
            raise InvalidYAMLError(
                f"document must be a mapping, got {type(data).__name__}"
            )
        return data

    def dump(self, data: Any) -> bytes:
        """Encode generic data back to YAML bytes, keeping key order."""
        return yaml.safe_dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        ).encode("utf-8")

    def build_source_map(self, content: Union[bytes, str]) -> Dict[str, Dict[str, int]]:
        """Build a mapping from JSON-pointer-like paths to 1-based line/column.

        This uses PyYAML's node tree (yaml.compose) so we can track locations without
        changing the decoded data shapes.
        """
        source_map: Dict[str, Dict[str, int]] = {}

        try:
            root = yaml.compose(content, Loader=DocumentLoader)
        except yaml.YAMLError:
            # Decoding errors are reported by load().
            return source_map

        if root is None:
            return source_map

        def _record(path: str, node) -> None:
            mark = getattr(node, "start_mark", None)
            if mark is None:
                return
            # PyYAML uses 0-based line/column
            source_map[path] = {"line": int(mark.line) + 1, "column": int(mark.column) + 1}

        def _walk(node, path: str) -> None:
            _record(path, node)

            if isinstance(node, yaml.nodes.MappingNode):
                for key_node, value_node in node.value:
                    key = getattr(key_node, "value", None)
                    if key is None:
                        continue
                    _walk(value_node, f"{path}/{self._json_pointer_escape(str(key))}")
            elif isinstance(node, yaml.nodes.SequenceNode):
                for idx, item_node in enumerate(node.value):
                    _walk(item_node, f"{path}/{idx}")

        _walk(root, "")
        return source_map


yaml_parser = YamlParser()
