#!/usr/bin/env python3
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

"""CLI entry point for validating YAML documents against schema definitions."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ValidatorConfig
from .exceptions import (
    DocumentError,
    ErrorKind,
    SchemaNotFoundError,
    ValidationErrors,
    YamlValidationError,
    extract_validation_error,
)
from .index import SchemaIndex
from .schema.loader import load_schemas_from_dir
from .validator import Validator

logger = logging.getLogger(__name__)


def build_validator(schema_paths: List[str], config: ValidatorConfig) -> Validator:
    """Create a validator with every schema definition found in *schema_paths*."""
    validator = Validator(config=config)
    for path_str in schema_paths:
        path = Path(path_str)
        if path.is_dir():
            for loaded in load_schemas_from_dir(path):
                validator.add_schema(loaded.index, loaded.schema)
        else:
            validator.load_schemas(path)
    return validator


def _document_error(position: int, path: Path, index: Optional[SchemaIndex], exc: Exception) -> DocumentError:
    error = DocumentError(messages=[str(exc)], index=position, name=str(path))
    if index is not None:
        group, version = index.group_and_group_version()
        error.group = group
        error.version = version
        error.kind = index.kind
    return error


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the validation CLI."""
    parser = argparse.ArgumentParser(
        description='Validate single-document YAML files against schema definitions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'documents',
        nargs='+',
        help='YAML documents to validate',
    )
    parser.add_argument(
        '--schema',
        action='append',
        required=True,
        help='Schema definition file or directory (repeatable)',
    )
    parser.add_argument('--omit-doc', action='store_true', help='Do not print documents in errors')
    parser.add_argument('--strict', action='store_true', help='Reject duplicate keys and undeclared fields')
    parser.add_argument('--no-pretty', action='store_true', help='One-line error messages')
    parser.add_argument(
        '--allow-unknown',
        action='store_true',
        help='Skip documents without a registered schema instead of failing',
    )
    parser.add_argument('--print', dest='print_documents', action='store_true', help='Print defaulted documents')

    args = parser.parse_args(argv)

    config = ValidatorConfig.from_env()
    config.set_logging()

    try:
        validator = build_validator(args.schema, config)
    except YamlValidationError as exc:
        print(f"Failed to load schemas: {exc}", file=sys.stderr)
        sys.exit(2)

    report = ValidationErrors()
    for position, doc_path in enumerate(Path(p) for p in args.documents):
        index = None
        try:
            content = doc_path.read_bytes()
            result = validator.validate(
                content,
                omit_doc_in_error=args.omit_doc,
                strict_unmarshal=args.strict,
                no_pretty_error=args.no_pretty,
            )
            index = result.index
        except SchemaNotFoundError as exc:
            if args.allow_unknown:
                logger.info(f"Skip {doc_path}: {exc}")
                continue
            report.append(exc.kind, _document_error(position, doc_path, exc.index, exc))
            continue
        except YamlValidationError as exc:
            report.append(extract_validation_error(exc), _document_error(position, doc_path, getattr(exc, 'index', None), exc))
            continue
        except OSError as exc:
            report.append(ErrorKind.READ, _document_error(position, doc_path, None, exc))
            continue

        logger.debug(f"{doc_path} is valid ({index})")
        if args.print_documents:
            sys.stdout.write("---\n" + result.document.decode("utf-8"))

    failed = report.error_or_none()
    if failed is not None:
        print(str(failed), file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


if __name__ == '__main__':
    main()
