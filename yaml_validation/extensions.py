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

"""Extension rules: semantic checks attached to schema nodes.

Rules cannot be expressed in JSON Schema (e.g. "this passphrase must contain
punctuation"). A schema node lists rule names under an extension attribute::

    sshAgentPrivateKeys:
      type: array
      items:
        type: object
        x-rules: [passphrase]

and each name is bound to a handler that receives the matching data fragment
and raises to reject it.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .exceptions import ExtensionRuleError

logger = logging.getLogger(__name__)

X_RULES_EXTENSION = "x-rules"

ExtensionsValidatorHandler = Callable[[Any], None]

PathToken = Union[str, int]


def format_path(path: Tuple[PathToken, ...]) -> str:
    """Render a field path as ``a.b[0].c``."""
    text = ""
    for token in path:
        if isinstance(token, int):
            text += f"[{token}]"
        elif text:
            text += f".{token}"
        else:
            text = str(token)
    return text


class ExtensionsValidator:
    """Run named rule handlers declared under one extension attribute.

    Handlers return nothing to accept a fragment and raise to reject it.
    Every exception a handler raises, including unexpected ones such as an
    ``AttributeError`` on an absent (``None``) field, is wrapped in
    :class:`ExtensionRuleError` with the original kept as ``__cause__``.
    """

    def __init__(
        self,
        extension_name: str,
        validators: Optional[Dict[str, ExtensionsValidatorHandler]] = None,
    ):
        self._name = extension_name
        self._validators: Dict[str, ExtensionsValidatorHandler] = dict(validators or {})

    @classmethod
    def x_rules(cls, validators: Optional[Dict[str, ExtensionsValidatorHandler]] = None) -> "ExtensionsValidator":
        return cls(X_RULES_EXTENSION, validators)

    @property
    def extension_name(self) -> str:
        return self._name

    def validate(self, data: Any, schema: Dict[str, Any]) -> None:
        """Validate decoded document data against the rules in *schema*.

        Raises:
            ExtensionRuleError: On the first rejected fragment
        """
        self._validate_node(data, schema, ())

    def _rules(self, schema: Any) -> List[str]:
        if not isinstance(schema, dict):
            return []
        rules = schema.get(self._name)
        if not isinstance(rules, list) or not all(isinstance(r, str) for r in rules):
            return []
        return rules

    def _run(self, rule: str, data: Any, path: Tuple[PathToken, ...]) -> None:
        handler = self._validators.get(rule)
        if handler is None:
            logger.debug(f"No handler for {self._name} rule '{rule}'. Skip it")
            return
        try:
            handler(data)
        except Exception as exc:
            raise ExtensionRuleError(rule, format_path(path), exc) from exc

    def _validate_node(self, data: Any, schema: Any, path: Tuple[PathToken, ...]) -> None:
        if not isinstance(schema, dict):
            return

        # Own rules first, then descend.
        for rule in self._rules(schema):
            self._run(rule, data, path)

        self._validate_items(data, schema, path)
        self._descend(data, schema, path)

    def _validate_items(self, data: Any, schema: Dict[str, Any], path: Tuple[PathToken, ...]) -> None:
        items_schema = schema.get("items")
        rules = [rule for rule in self._rules(items_schema) if rule in self._validators]
        if not rules:
            return

        # An optional array that is absent has nothing to check.
        if data is None or data == [] or data == "":
            return

        if not isinstance(data, list):
            raise ExtensionRuleError(
                rules[0], format_path(path), TypeError(f"expected a list of items, got {type(data).__name__}")
            )

        for rule in rules:
            for position, item in enumerate(data):
                self._run(rule, item, path + (position,))

    def _descend(self, data: Any, schema: Dict[str, Any], path: Tuple[PathToken, ...]) -> None:
        properties = schema.get("properties")
        if isinstance(properties, dict):
            fields = data if isinstance(data, dict) else {}
            for name, field_schema in properties.items():
                self._validate_node(fields.get(name), field_schema, path + (name,))

        if not isinstance(data, list):
            return

        items_schema = schema.get("items")
        if isinstance(items_schema, dict):
            # Item-level rules already ran in _validate_items.
            for position, item in enumerate(data):
                item_path = path + (position,)
                self._validate_items(item, items_schema, item_path)
                self._descend(item, items_schema, item_path)
        elif isinstance(items_schema, list):
            for position, (item, item_schema) in enumerate(zip(data, items_schema)):
                self._validate_node(item, item_schema, path + (position,))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r}, rules={sorted(self._validators)})"
