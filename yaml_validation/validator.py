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

"""Schema registry and document validator.

Registration methods are meant to run during setup, before any validation.
Validation only reads the registry, so a fully populated validator can be
shared between threads; registering while validating is not supported.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import ValidatorConfig
from .exceptions import (
    DocumentValidationError,
    InvalidYAMLError,
    SchemaNotFoundError,
    StructuralValidationError,
    ValidationFailedError,
)
from .extensions import ExtensionsValidator
from .index import SchemaIndex, invalid_index_message, parse_index
from .parsing.yaml_parser import Source, read_content, yaml_parser
from .schema.loader import load_schemas
from .schema.structural import apply_defaults, find_unknown_fields, validate_against_schema
from .transformer import Schema, SchemaTransformer, apply_transformers

Document = Union[bytes, bytearray, str]


class PreValidator(ABC):
    """Per-index hook that runs before structural validation."""

    @abstractmethod
    def validate(self, doc: bytes, current_schema: Optional[Schema]) -> Optional[Schema]:
        """Check the raw document and choose the schema to validate it with.

        Args:
            doc: Raw document bytes
            current_schema: Registered schema for the index, may be None

        Returns:
            ``current_schema`` to keep it, or a schema of its own

        Raises:
            Exception: Any error aborts validation and reaches the caller as is
        """


@dataclass(frozen=True)
class ValidationResult:
    index: SchemaIndex
    document: bytes


@dataclass(frozen=True)
class _ValidateOptions:
    omit_doc_in_error: bool = False
    strict_unmarshal: bool = False
    no_pretty_error: bool = False


class Validator:
    """Validate YAML documents against schemas registered by index."""

    def __init__(
        self,
        schemas: Optional[Dict[SchemaIndex, Schema]] = None,
        config: Optional[ValidatorConfig] = None,
    ):
        if config is None:
            config = ValidatorConfig()

        self._schemas: Dict[SchemaIndex, Schema] = dict(schemas or {})
        self._pre_validators: Dict[SchemaIndex, PreValidator] = {}
        self._version_fallbacks: Dict[str, str] = dict(config.version_fallbacks)
        self._transformers: Dict[SchemaIndex, List[SchemaTransformer]] = {}
        self._default_transformers: List[SchemaTransformer] = []
        self._extensions_validators: List[ExtensionsValidator] = []
        self._logger: logging.Logger = config.get_logger()

    # ---- registration ----------------------------------------------------

    def add_schema(self, index: SchemaIndex, schema: Schema) -> "Validator":
        self._schemas[index] = schema
        return self

    def load_schemas(self, source: Source) -> "Validator":
        """Load a schema definition document and register all its versions."""
        for loaded in load_schemas(source):
            self._logger.debug(f"Register schema for {loaded.index}")
            self.add_schema(loaded.index, loaded.schema)
        return self

    def add_pre_validator(self, index: SchemaIndex, validator: PreValidator) -> "Validator":
        self._pre_validators[index] = validator
        return self

    def add_extensions_validators(self, *validators: ExtensionsValidator) -> "Validator":
        self._extensions_validators.extend(validators)
        return self

    def add_version_fallback(self, fail_version: str, fallback: str) -> "Validator":
        self._version_fallbacks[fail_version] = fallback
        return self

    def add_transformers(self, index: SchemaIndex, *transformers: SchemaTransformer) -> "Validator":
        self._transformers[index] = list(transformers)
        return self

    def set_default_transformers(self, *transformers: SchemaTransformer) -> "Validator":
        self._default_transformers = list(transformers)
        return self

    def set_logger(self, logger: logging.Logger) -> "Validator":
        self._logger = logger
        return self

    def get(self, index: SchemaIndex) -> Optional[Schema]:
        return self._schemas.get(index)

    # ---- validation ------------------------------------------------------

    def validate(
        self,
        doc: Document,
        *,
        omit_doc_in_error: bool = False,
        strict_unmarshal: bool = False,
        no_pretty_error: bool = False,
    ) -> ValidationResult:
        """Parse the document index and validate the document with it.

        See :meth:`validate_with_index`.
        """
        index = parse_index(read_content(doc), check_valid=False, omit_doc_in_error=omit_doc_in_error)
        return self.validate_with_index(
            index,
            doc,
            omit_doc_in_error=omit_doc_in_error,
            strict_unmarshal=strict_unmarshal,
            no_pretty_error=no_pretty_error,
        )

    def validate_with_index(
        self,
        index: SchemaIndex,
        doc: Document,
        *,
        omit_doc_in_error: bool = False,
        strict_unmarshal: bool = False,
        no_pretty_error: bool = False,
    ) -> ValidationResult:
        """Validate one document and return it with schema defaults applied.

        A ``bytearray`` document is overwritten with the result on success.
        On failure the document is left untouched.

        Args:
            index: Document index
            doc: Raw document
            omit_doc_in_error: Do not embed the document in error messages
            strict_unmarshal: Reject duplicate keys and undeclared top-level fields
            no_pretty_error: One-line error messages

        Returns:
            ValidationResult with the resolved index (after version fallback)
            and the defaulted document

        Raises:
            ValidationFailedError: If the index is incomplete or the document is invalid
            SchemaNotFoundError: If no schema is registered or supplied for the index
            Exception: Whatever a pre-validator raises
        """
        options = _ValidateOptions(
            omit_doc_in_error=omit_doc_in_error,
            strict_unmarshal=strict_unmarshal,
            no_pretty_error=no_pretty_error,
        )
        content = read_content(doc)

        if not index.is_valid():
            raise ValidationFailedError(invalid_index_message(index, content, omit_doc_in_error))

        index, schema = self._get_schema_with_fallback(index)

        pre_validator = self._pre_validators.get(index)
        if pre_validator is not None:
            schema = pre_validator.validate(content, schema)

        if schema is None:
            self._logger.debug(f"No schema for index {index}. Skip it")
            raise SchemaNotFoundError(index)

        schema = self._transform(index, schema)

        try:
            data = self._decode(content, schema, options)
            issues = validate_against_schema(data, schema, source_map=yaml_parser.build_source_map(content))
            if issues:
                raise StructuralValidationError(issues)

            defaulted = apply_defaults(data, schema)

            for extensions_validator in self._extensions_validators:
                extensions_validator.validate(data, schema)
        except ValidationFailedError as err:
            raise DocumentValidationError(self._error_message(index, content, err, options), index) from err

        result = yaml_parser.dump(defaulted)
        if isinstance(doc, bytearray):
            doc[:] = result

        return ValidationResult(index=index, document=result)

    # ---- stages ----------------------------------------------------------

    def _get_schema_with_fallback(self, index: SchemaIndex) -> Tuple[SchemaIndex, Optional[Schema]]:
        schema = self.get(index)
        if schema is not None:
            return index, schema

        fallback = self._version_fallbacks.get(index.version)
        if not fallback:
            self._logger.debug(f"No fallback schema for version {index.version}")
            return index, None

        # One hop only, fallbacks are never chained.
        index = index.with_version(fallback)
        return index, self.get(index)

    def _transform(self, index: SchemaIndex, schema: Schema) -> Schema:
        transformers = self._transformers.get(index)
        if not transformers:
            transformers = self._default_transformers

        return apply_transformers(schema, transformers)

    def _decode(self, content: bytes, schema: Schema, options: _ValidateOptions) -> Any:
        data = yaml_parser.load(content, strict=options.strict_unmarshal)

        if options.strict_unmarshal:
            unknown = find_unknown_fields(data, schema)
            if unknown:
                raise InvalidYAMLError(f"yaml strict unmarshal failed: unknown field(s) {unknown}")

        return data

    def _error_message(
        self,
        index: SchemaIndex,
        content: bytes,
        err: ValidationFailedError,
        options: _ValidateOptions,
    ) -> str:
        if isinstance(err, StructuralValidationError):
            compact = err.format(pretty=False)
            pretty = err.format(pretty=True)
        else:
            compact = pretty = str(err)

        if options.no_pretty_error:
            return f'"{index}" document validation failed: {compact}'
        if options.omit_doc_in_error:
            return f'"{index}" document validation failed:\n{pretty}'

        doc_text = content.decode("utf-8", errors="replace")
        return f"Document validation failed:\n---\n{doc_text}\n\n{pretty}"
