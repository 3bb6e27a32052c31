from typing import Any, Dict, Optional

import pytest
import yaml

from yaml_validation import PreValidator, SchemaIndex, Validator, load_schemas

TEST_KIND_SCHEMA = """
kind: TestKind
apiVersions:
- apiVersion: deckhouse.io/v1
  openAPISpec:
    type: object
    additionalProperties: false
    anyOf:
      - required: [apiVersion, kind, sshUser, sshAgentPrivateKeys]
      - required: [apiVersion, kind, sshUser, sudoPassword]
    properties:
      kind:
        type: string
      apiVersion:
        type: string
      sshUser:
        type: string
        description: SSH username.
      sudoPassword:
        description: |
          A sudo password for the user.
        type: string
      sshPort:
        default: 22
        type: integer
        description: SSH port.
      sshAgentPrivateKeys:
        type: array
        minItems: 1
        items:
          type: object
          additionalProperties: false
          required: [key]
          x-rules: [passphrase]
          properties:
            key:
              type: string
              description: Private SSH key.
            passphrase:
              type: string
              description: Password for SSH key.
"""

ANOTHER_TEST_KIND_SCHEMA = """
kind: AnotherTestKind
apiVersions:
- apiVersion: test
  openAPISpec:
    type: object
    additionalProperties: false
    properties:
      kind:
        type: string
      apiVersion:
        type: string
      key:
        type: string
      value:
        type: object
        additionalProperties: true
        default: {"valueEnum": "AWS", "valueBool": true}
        properties:
          valueEnum:
            type: string
            enum:
            - "OpenStack"
            - "AWS"
          valueBool:
            type: boolean
"""

INDEX_TEST_KIND = SchemaIndex(kind="TestKind", version="deckhouse.io/v1")
INDEX_ANOTHER_TEST_KIND = SchemaIndex(kind="AnotherTestKind", version="test")

PASSWORD_DOC = """
apiVersion: deckhouse.io/v1
kind: TestKind
sshUser: ubuntu
sudoPassword: "no secret"
sshPort: 2200
"""


def decode(document: bytes) -> Dict[str, Any]:
    return yaml.safe_load(document)


class SSHPortPreValidator(PreValidator):
    """Accept ports in [22000, 30000) and supply a schema when none is registered."""

    def __init__(self, own_schema: Optional[Dict[str, Any]] = None):
        self.own_schema = own_schema

    def validate(self, doc, current_schema):
        port = yaml.safe_load(doc).get("sshPort", 0)
        if 22000 <= port < 30000:
            if current_schema is None:
                return self.own_schema
            return current_schema
        raise ValueError(f"invalid SSH port: {port}")


def single_schema(definition: str) -> Dict[str, Any]:
    loaded = load_schemas(definition)
    assert len(loaded) == 1
    return loaded[0].schema


@pytest.fixture
def test_kind_validator() -> Validator:
    return Validator().load_schemas(TEST_KIND_SCHEMA)


@pytest.fixture
def another_test_kind_validator() -> Validator:
    return Validator().load_schemas(ANOTHER_TEST_KIND_SCHEMA)


@pytest.fixture
def passphrase_handler():
    def _passphrase(item):
        should_present = ".!@"
        passphrase = item.get("passphrase", "")
        if not any(char in passphrase for char in should_present):
            raise ValueError(f"invalid passphrase: should contain {should_present}")

    return _passphrase
