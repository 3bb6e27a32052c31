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

"""Schema index: the ``(kind, apiVersion)`` identity of a document.

``apiVersion`` may carry a group (``deckhouse.io/v1``):
  * no ``/``      -> no group, the whole string is the group version;
  * exactly one   -> split into group and group version;
  * more than one -> malformed, both parts become ``"invalid: <apiVersion>"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import List, Tuple

from .exceptions import InvalidYAMLError, ValidationFailedError
from .parsing.yaml_parser import Source, read_content, yaml_parser

INVALID_GROUP_PREFIX = "invalid:"


@dataclass(frozen=True)
class SchemaIndex:
    """Identity used to route a document to its schema."""

    kind: str = ""
    version: str = ""

    def is_valid(self) -> bool:
        return self.kind != "" and self.version != ""

    def group_and_group_version(self) -> Tuple[str, str]:
        """Return ``(group, group_version)`` derived from the version.

        Check for a malformed version with
        ``group.startswith(INVALID_GROUP_PREFIX)``.
        """
        v = self.version
        if v == "":
            return "", ""

        separators = v.count("/")
        if separators == 0:
            return "", v
        if separators == 1:
            group, group_version = v.split("/", 1)
            return group, group_version

        invalid = f"{INVALID_GROUP_PREFIX} {v}"
        return invalid, invalid

    def group(self) -> str:
        return self.group_and_group_version()[0]

    def group_version(self) -> str:
        return self.group_and_group_version()[1]

    def with_version(self, version: str) -> "SchemaIndex":
        return replace(self, version=version)

    def __str__(self) -> str:
        return f"{self.kind}, {self.version}"


# ---- duplicate identity keys ------------------------------------------------

# Line-anchored on purpose: nested or commented keys are not identity keys.
_API_VERSION_RE = re.compile(rb"^apiVersion:.*$", re.MULTILINE)
_KIND_RE = re.compile(rb"^kind:.*$", re.MULTILINE)


def _find_first(regex: "re.Pattern[bytes]", content: bytes, limit: int) -> List[bytes]:
    found = []
    for match in regex.finditer(content):
        found.append(match.group(0).rstrip(b"\r"))
        if len(found) == limit:
            break
    return found


def check_multiple_schema_keys(content: bytes) -> None:
    """Fail if ``apiVersion`` or ``kind`` is declared more than once.

    Raises:
        ValidationFailedError: Naming the duplicated key and the matched lines
    """
    for key_name, regex in (("apiVersion", _API_VERSION_RE), ("kind", _KIND_RE)):
        lines = _find_first(regex, content, 2)
        if len(lines) > 1:
            joined = b" ".join(lines).decode("utf-8", errors="replace")
            raise ValidationFailedError(f"multiple {key_name} keys found: {joined}")


# ---- parsing ----------------------------------------------------------------


def _identity_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidYAMLError(
            f"schema index unmarshal failed: '{key}' must be a string, "
            f"got {type(value).__name__}: {value!r}"
        )
    return value


def invalid_index_message(index: SchemaIndex, doc: bytes, omit_doc: bool = False) -> str:
    message = (
        'document must contain "kind" and "apiVersion" fields:\n'
        f"\tapiVersion: {index.version}\n"
        f"\tkind: {index.kind}"
    )
    if not omit_doc:
        message += "\n\n" + doc.decode("utf-8", errors="replace")
    return message


def parse_index(
    source: Source,
    *,
    check_valid: bool = True,
    omit_doc_in_error: bool = False,
) -> SchemaIndex:
    """Parse the schema index of a single YAML document.

    Args:
        source: Document bytes, text, path or readable file object
        check_valid: Require both ``kind`` and ``apiVersion``
        omit_doc_in_error: Do not embed the document in the error message

    Returns:
        The parsed :class:`SchemaIndex`

    Raises:
        ReadError: If the source cannot be read
        InvalidYAMLError: If the document cannot be decoded
        ValidationFailedError: On duplicated identity keys or incomplete index
    """
    content = read_content(source)

    # A lenient decoder silently keeps the last duplicate key.
    check_multiple_schema_keys(content)

    try:
        data = yaml_parser.load_mapping(content)
    except InvalidYAMLError as exc:
        raise InvalidYAMLError(f"schema index unmarshal failed: {exc}") from exc

    index = SchemaIndex(
        kind=_identity_field(data, "kind"),
        version=_identity_field(data, "apiVersion"),
    )

    if check_valid and not index.is_valid():
        raise ValidationFailedError(invalid_index_message(index, content, omit_doc_in_error))

    return index
