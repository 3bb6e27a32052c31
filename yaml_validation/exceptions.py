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

"""Custom exceptions for yaml_validation.

Every exception carries an :class:`ErrorKind` so calling code can branch on
the failure kind (``isinstance`` or :func:`extract_validation_errors`) instead
of matching message strings.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from .schema.structural import SchemaIssue


class ErrorKind(enum.IntEnum):
    """Failure kinds, ordered by severity for aggregate reports."""

    UNKNOWN = 0
    VALIDATION_FAILED = 1
    INVALID_YAML = 2
    SCHEMA_NOT_FOUND = 3
    READ = 4

    def __str__(self) -> str:
        return _KIND_NAMES[self]


_KIND_NAMES = {
    ErrorKind.UNKNOWN: "unknown",
    ErrorKind.VALIDATION_FAILED: "ValidationFailed",
    ErrorKind.INVALID_YAML: "InvalidYAML",
    ErrorKind.SCHEMA_NOT_FOUND: "SchemaNotFound",
    ErrorKind.READ: "Read",
}

# Order in which kinds are reported by extract_validation_errors.
_EXTRACT_ORDER = (
    ErrorKind.SCHEMA_NOT_FOUND,
    ErrorKind.READ,
    ErrorKind.VALIDATION_FAILED,
    ErrorKind.INVALID_YAML,
)


class YamlValidationError(Exception):
    """Base exception for yaml_validation related errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class ReadError(YamlValidationError):
    """Exception raised when the underlying byte source cannot be read."""

    kind = ErrorKind.READ


class ValidationFailedError(YamlValidationError):
    """Exception raised when a document fails validation."""

    kind = ErrorKind.VALIDATION_FAILED


class InvalidYAMLError(ValidationFailedError):
    """Exception raised when a document cannot be decoded."""

    kind = ErrorKind.INVALID_YAML


class SchemaNotFoundError(YamlValidationError):
    """Exception raised when no schema is registered for a document.

    Callers usually treat this as "not a managed resource" and pass the
    document through instead of failing.
    """

    kind = ErrorKind.SCHEMA_NOT_FOUND

    def __init__(self, index=None):
        self.index = index
        message = "schema not found"
        if index is not None:
            message = f"schema not found for {index}"
        super().__init__(message)


class StructuralValidationError(ValidationFailedError):
    """All structural schema violations found in one document."""

    def __init__(self, issues: Sequence["SchemaIssue"]):
        self.issues: List["SchemaIssue"] = list(issues)
        super().__init__(self.format(pretty=False))

    def format(self, pretty: bool = True) -> str:
        if pretty:
            return "\n".join(f"  - {issue}" for issue in self.issues)
        return "; ".join(str(issue) for issue in self.issues)


class ExtensionRuleError(ValidationFailedError):
    """An extension rule handler rejected a data fragment."""

    def __init__(self, rule: str, path: str, cause: BaseException):
        self.rule = rule
        self.path = path
        self.cause = cause
        prefix = f"{path}: " if path else ""
        super().__init__(f"{prefix}rule '{rule}': {cause}")


class DocumentValidationError(ValidationFailedError):
    """Wrapper raised by the validator with the diagnostic message.

    The original failure is kept as ``__cause__``.
    """

    def __init__(self, message: str, index=None):
        self.index = index
        super().__init__(message)


class SchemaLoadError(YamlValidationError):
    """Base exception for schema definition loading errors."""


class SchemaDecodeError(SchemaLoadError):
    """Exception raised when a schema definition document is malformed."""


class SchemaReferenceError(SchemaLoadError):
    """Exception raised when schema references cannot be expanded."""


def _error_chain(exc: BaseException):
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def _kinds_of(exc: BaseException) -> List[ErrorKind]:
    kinds = []
    for cls in type(exc).__mro__:
        kind = cls.__dict__.get("kind")
        if isinstance(kind, ErrorKind) and kind is not ErrorKind.UNKNOWN:
            kinds.append(kind)
    return kinds


def extract_validation_errors(exc: BaseException) -> List[ErrorKind]:
    """Return every error kind carried by *exc* and its ``__cause__`` chain.

    Kinds are returned in a fixed order (schema not found, read, validation
    failed, invalid YAML). ``[ErrorKind.UNKNOWN]`` is returned when the chain
    holds no yaml_validation error.
    """
    found = set()
    for err in _error_chain(exc):
        found.update(_kinds_of(err))

    kinds = [kind for kind in _EXTRACT_ORDER if kind in found]
    if not kinds:
        return [ErrorKind.UNKNOWN]
    return kinds


def extract_validation_error(exc: BaseException) -> ErrorKind:
    """Return the first kind reported by :func:`extract_validation_errors`."""
    return extract_validation_errors(exc)[0]


@dataclass
class DocumentError:
    """One failed document inside a :class:`ValidationErrors` report."""

    messages: List[str] = field(default_factory=list)
    index: Optional[int] = None
    group: str = ""
    version: str = ""
    kind: str = ""
    name: str = ""

    def __str__(self) -> str:
        prefix = ""
        if self.index is not None:
            prefix += f"[{self.index}]"
        if self.group:
            prefix += f"{self.group}/{self.version}, Kind={self.kind}"
        if self.name:
            prefix += f' "{self.name}"'
        if prefix:
            prefix += ": "
        return prefix + "; ".join(self.messages)


class ValidationErrors(YamlValidationError):
    """Aggregate report for validating several documents.

    The report kind is the most severe kind appended so far.
    """

    def __init__(self):
        super().__init__()
        self.kind = ErrorKind.UNKNOWN
        self.errors: List[DocumentError] = []

    def append(self, kind: ErrorKind, error: DocumentError) -> None:
        if self.kind < kind:
            self.kind = kind
        self.errors.append(error)

    def error_or_none(self) -> Optional["ValidationErrors"]:
        if not self.errors:
            return None
        return self

    def __str__(self) -> str:
        return str(self.kind) + ": " + "\n".join(str(e) for e in self.errors)
