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

import copy
from typing import Any

from .base import Schema, SchemaTransformer


def _is_object_schema(schema: Schema) -> bool:
    schema_type = schema.get("type")
    if schema_type == "object":
        return True
    if isinstance(schema_type, list) and "object" in schema_type:
        return True
    return "properties" in schema


class AdditionalPropertiesTransformer(SchemaTransformer):
    """Close open object shapes with ``additionalProperties: false``.

    By default only objects that do not declare ``additionalProperties`` are
    closed, so a property can still opt into freeform content. With
    ``disallow_full`` every object is closed, whatever it declares.
    """

    def __init__(self, disallow_full: bool = False):
        self.disallow_full = disallow_full

    @classmethod
    def disallow_full_transformer(cls) -> "AdditionalPropertiesTransformer":
        return cls(disallow_full=True)

    def _should_disallow(self, schema: Schema) -> bool:
        if not _is_object_schema(schema):
            return False
        if "additionalProperties" not in schema:
            return True
        return self.disallow_full

    def transform(self, schema: Schema) -> Schema:
        if schema is None:
            return None
        result = copy.deepcopy(schema)
        self._close(result)
        return result

    def _close(self, schema: Any) -> None:
        if not isinstance(schema, dict):
            return

        if self._should_disallow(schema):
            schema["additionalProperties"] = False

        properties = schema.get("properties")
        if isinstance(properties, dict):
            for prop in properties.values():
                self._close(prop)

        items = schema.get("items")
        if isinstance(items, list):
            for item in items:
                self._close(item)
        else:
            self._close(items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(disallow_full={self.disallow_full})"
