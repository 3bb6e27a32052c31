import io

import pytest

from yaml_validation import (
    ReadError,
    SchemaDecodeError,
    SchemaIndex,
    SchemaLoadError,
    SchemaReferenceError,
    load_schemas,
)
from yaml_validation.schema import expand_schema, load_schemas_from_dir

from conftest import ANOTHER_TEST_KIND_SCHEMA, INDEX_TEST_KIND, TEST_KIND_SCHEMA

MULTI_VERSION_SCHEMA = """
kind: Multi
apiVersions:
- apiVersion: v1
  openAPISpec:
    type: object
    properties:
      name:
        type: string
- apiVersion: v2
  openAPISpec:
    type: object
    properties:
      name:
        type: string
      settings:
        type: object
        properties:
          level:
            type: integer
"""

REF_SCHEMA = """
kind: WithRefs
apiVersions:
- apiVersion: v1
  openAPISpec:
    type: object
    definitions:
      port:
        type: integer
        default: 22
      endpoint:
        type: object
        properties:
          port:
            $ref: "#/definitions/port"
    properties:
      sshPort:
        $ref: "#/definitions/port"
      endpoints:
        type: array
        items:
          $ref: "#/definitions/endpoint"
"""


class _ErrorReader:
    def read(self):
        raise OSError("error")


class TestLoadSchemas:

    def test_loads_index_and_schema(self):
        loaded = load_schemas(TEST_KIND_SCHEMA)

        assert len(loaded) == 1
        assert loaded[0].index == INDEX_TEST_KIND
        assert loaded[0].schema["properties"]["sshPort"]["default"] == 22

    def test_multiple_versions(self):
        loaded = load_schemas(io.StringIO(MULTI_VERSION_SCHEMA))

        assert [item.index for item in loaded] == [
            SchemaIndex(kind="Multi", version="v1"),
            SchemaIndex(kind="Multi", version="v2"),
        ]

    def test_closes_undeclared_objects(self):
        v2 = load_schemas(MULTI_VERSION_SCHEMA)[1].schema

        assert v2["additionalProperties"] is False
        assert v2["properties"]["settings"]["additionalProperties"] is False

    def test_keeps_freeform_objects(self):
        schema = load_schemas(ANOTHER_TEST_KIND_SCHEMA)[0].schema

        assert schema["properties"]["value"]["additionalProperties"] is True

    def test_read_error(self):
        with pytest.raises(ReadError):
            load_schemas(_ErrorReader())

    @pytest.mark.parametrize(
        "definition",
        [
            "kind: A\napiVersions: []\nextra: true\n",
            "kind: A\napiVersions:\n- apiVersion: v1\n  openAPISpec: {}\n  unknown: 1\n",
            "kind: A\nkind: B\napiVersions: []\n",
            "apiVersions: []\n",
            "kind: A\napiVersions: {}\n",
            "kind: A\napiVersions:\n- apiVersion: v1\n",
            "kind: A\napiVersions:\n- openAPISpec: {}\n",
            "- kind: A\n",
            "{invalid",
        ],
    )
    def test_strict_decode_errors(self, definition):
        with pytest.raises(SchemaDecodeError):
            load_schemas(definition)

    def test_errors_share_load_base(self):
        assert issubclass(SchemaDecodeError, SchemaLoadError)
        assert issubclass(SchemaReferenceError, SchemaLoadError)
        assert not issubclass(ReadError, SchemaLoadError)

    def test_from_dir(self, tmp_path):
        (tmp_path / "a.yaml").write_text(TEST_KIND_SCHEMA)
        (tmp_path / "b.yml").write_text(ANOTHER_TEST_KIND_SCHEMA)
        (tmp_path / "notes.txt").write_text("not a schema")

        loaded = load_schemas_from_dir(tmp_path)

        assert [item.index.kind for item in loaded] == ["TestKind", "AnotherTestKind"]


class TestReferenceExpansion:

    def test_refs_inlined(self):
        schema = load_schemas(REF_SCHEMA)[0].schema
        properties = schema["properties"]

        assert properties["sshPort"] == {"type": "integer", "default": 22}
        endpoint = properties["endpoints"]["items"]
        assert endpoint["properties"]["port"] == {"type": "integer", "default": 22}
        assert endpoint["additionalProperties"] is False
        assert "$ref" not in str(properties)

    def test_unresolvable_ref(self):
        schema = {"type": "object", "properties": {"a": {"$ref": "#/definitions/missing"}}}

        with pytest.raises(SchemaReferenceError, match="cannot resolve"):
            expand_schema(schema)

    def test_circular_ref(self):
        schema = {
            "definitions": {
                "node": {
                    "type": "object",
                    "properties": {"child": {"$ref": "#/definitions/node"}},
                },
            },
            "properties": {"tree": {"$ref": "#/definitions/node"}},
        }

        with pytest.raises(SchemaReferenceError, match="circular"):
            expand_schema(schema)

    def test_data_keywords_not_expanded(self):
        schema = {
            "type": "object",
            "properties": {
                "default": {"type": "string"},
                "ref": {"type": "object", "default": {"$ref": "literal"}},
            },
        }

        expanded = expand_schema(schema)

        assert expanded == schema
        assert expanded is not schema
