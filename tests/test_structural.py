from yaml_validation.parsing import yaml_parser
from yaml_validation.schema.structural import apply_defaults, find_unknown_fields, validate_against_schema

SCHEMA = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string"},
        "port": {"type": "integer", "default": 22},
        "server": {
            "type": "object",
            "default": {},
            "properties": {
                "host": {"type": "string", "default": "localhost"},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
        },
        "mounts": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"readOnly": {"type": "boolean", "default": False}},
            },
        },
    },
}


class TestValidateAgainstSchema:

    def test_valid(self):
        assert validate_against_schema({"name": "a", "port": 1}, SCHEMA) == []

    def test_collects_all_issues_in_path_order(self):
        issues = validate_against_schema({"port": "x", "server": {"host": 1}}, SCHEMA)

        assert [issue.yaml_path for issue in issues] == ["", "/port", "/server/host"]
        assert issues[0].message == "'name' is a required property"

    def test_lines_from_source_map(self):
        content = b"name: a\nserver:\n  host: 1\n"
        data = yaml_parser.load(content)

        issues = validate_against_schema(data, SCHEMA, source_map=yaml_parser.build_source_map(content))

        assert len(issues) == 1
        assert str(issues[0]) == "1 is not of type 'string' (yaml_path=/server/host, line 3)"

    def test_broken_schema_reported_as_issue(self):
        schema = {"type": "object", "properties": {"a": {"type": "unknown-type"}}}

        issues = validate_against_schema({"a": 1}, schema)

        assert len(issues) == 1
        assert issues[0].message.startswith("JSON Schema validation error")

    def test_format_checked(self):
        schema = {"type": "object", "properties": {"email": {"type": "string", "format": "email"}}}

        assert validate_against_schema({"email": "not-an-email"}, schema)
        assert validate_against_schema({"email": "user@example.com"}, schema) == []


class TestFindUnknownFields:

    def test_closed_root(self):
        schema = {"type": "object", "additionalProperties": False, "properties": {"a": {}}}

        assert find_unknown_fields({"a": 1, "b": 2, "c": 3}, schema) == ["b", "c"]

    def test_open_root(self):
        assert find_unknown_fields({"b": 2}, {"type": "object", "properties": {"a": {}}}) == []
        assert find_unknown_fields({"b": 2}, {"additionalProperties": True, "properties": {"a": {}}}) == []

    def test_not_a_mapping(self):
        assert find_unknown_fields(["a"], {"additionalProperties": False, "properties": {}}) == []


class TestApplyDefaults:

    def test_fills_missing(self):
        result = apply_defaults({"name": "a"}, SCHEMA)

        assert result == {"name": "a", "port": 22, "server": {"host": "localhost"}}

    def test_keeps_present_values(self):
        data = {"name": "a", "port": 2200, "server": {"host": "example.com"}}

        assert apply_defaults(data, SCHEMA) == data

    def test_array_items(self):
        result = apply_defaults({"name": "a", "mounts": [{}, {"readOnly": True}]}, SCHEMA)

        assert result["mounts"] == [{"readOnly": False}, {"readOnly": True}]

    def test_does_not_mutate_input(self):
        data = {"name": "a"}

        apply_defaults(data, SCHEMA)

        assert data == {"name": "a"}

    def test_default_values_copied(self):
        first = apply_defaults({"name": "a"}, SCHEMA)
        first["server"]["host"] = "changed"

        assert SCHEMA["properties"]["server"]["default"] == {}
        assert apply_defaults({"name": "a"}, SCHEMA)["server"]["host"] == "localhost"

    def test_idempotent(self):
        once = apply_defaults({"name": "a"}, SCHEMA)

        assert apply_defaults(once, SCHEMA) == once

    def test_all_of(self):
        schema = {"allOf": [{"properties": {"a": {"default": 1}}}, {"properties": {"b": {"default": 2}}}]}

        assert apply_defaults({}, schema) == {"a": 1, "b": 2}
