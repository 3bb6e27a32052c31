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

"""Schema transformers rewrite a schema before it validates data."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

Schema = Dict[str, Any]


class SchemaTransformer(ABC):
    """Rewrite a schema tree.

    Implementations must not mutate the schema they receive; registered
    schemas are shared by every validation call.
    """

    @abstractmethod
    def transform(self, schema: Schema) -> Schema:
        """Return the transformed schema."""


def transform_schema(
    schema: Optional[Schema],
    *transformers: Optional[SchemaTransformer],
) -> Optional[Schema]:
    """Apply transformers in order, skipping ``None`` entries."""
    return apply_transformers(schema, transformers)


def apply_transformers(
    schema: Optional[Schema],
    transformers: Iterable[Optional[SchemaTransformer]],
) -> Optional[Schema]:
    if schema is None:
        return None

    for transformer in transformers:
        if transformer is None:
            continue
        schema = transformer.transform(schema)

    return schema
