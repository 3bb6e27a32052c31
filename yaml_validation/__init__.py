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

"""Schema-indexed validation of YAML documents.

Documents are routed to schemas by their ``(kind, apiVersion)`` index,
validated structurally, checked by extension rules and returned with schema
defaults applied.
"""

__version__ = "0.1.0"

from .config import ValidatorConfig
from .exceptions import (
    DocumentError,
    DocumentValidationError,
    ErrorKind,
    ExtensionRuleError,
    InvalidYAMLError,
    ReadError,
    SchemaDecodeError,
    SchemaLoadError,
    SchemaNotFoundError,
    SchemaReferenceError,
    StructuralValidationError,
    ValidationErrors,
    ValidationFailedError,
    YamlValidationError,
    extract_validation_error,
    extract_validation_errors,
)
from .extensions import X_RULES_EXTENSION, ExtensionsValidator
from .index import INVALID_GROUP_PREFIX, SchemaIndex, parse_index
from .schema import SchemaIssue, SchemaWithIndex, load_schemas
from .transformer import AdditionalPropertiesTransformer, SchemaTransformer, transform_schema
from .validator import PreValidator, ValidationResult, Validator
