from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

import pytest

from rpgvault.validation.catalog import MAGIC_SCHOOLS
from rpgvault.validation.service import SchemaValidator


@pytest.fixture()
def validator() -> SchemaValidator:
    return SchemaValidator()


@pytest.fixture()
def spell(validator: SchemaValidator) -> dict[str, Any]:
    return validator.common_schemas()["spell"]


def test_valid_spell_has_no_violations(validator: SchemaValidator, spell: dict) -> None:
    assert validator.validate({"name": "Fireball", "level": 3, "school": "Evocation"}, spell) == []


def test_collects_every_missing_required_property(validator: SchemaValidator, spell: dict) -> None:
    errors = validator.validate({"level": 3}, spell)

    assert errors == [
        "Missing required property 'name' at root",
        "Missing required property 'school' at root",
    ]


def test_maximum_violation(validator: SchemaValidator, spell: dict) -> None:
    errors = validator.validate({"level": 99, "name": "X", "school": "Evocation"}, spell)

    assert errors == ["Property at /level should be <= 9"]


def test_type_enum_and_min_length_messages(validator: SchemaValidator, spell: dict) -> None:
    errors = validator.validate({"name": "", "level": "three", "school": "Pyromancy"}, spell)

    assert "Property at /name should have at least 1 characters" in errors
    assert "Property at /level should be number, but got string" in errors
    assert f"Property at /school should be one of: {', '.join(MAGIC_SCHOOLS)}" in errors
    assert len(errors) == 3


def test_nested_paths_use_json_pointer(validator: SchemaValidator) -> None:
    monster = validator.common_schemas()["monster"]
    payload = {
        "name": "Goblin",
        "type": "humanoid",
        "size": "Small",
        "hitPoints": 7,
        "armorClass": 15,
        "abilities": {
            "strength": 8,
            "dexterity": 40,
            "constitution": 10,
            "intelligence": 10,
            "wisdom": 8,
        },
    }

    errors = validator.validate(payload, monster)

    assert errors == [
        "Property at /abilities/dexterity should be <= 30",
        "Missing required property 'charisma' at /abilities",
    ]


def test_item_minimum_and_rarity(validator: SchemaValidator) -> None:
    item = validator.common_schemas()["item"]

    errors = validator.validate(
        {"name": "Rope", "type": "gear", "weight": -1, "rarity": "Mythic"}, item
    )

    assert "Property at /weight should be >= 0" in errors
    assert any(e.startswith("Property at /rarity should be one of: Common, Uncommon") for e in errors)


def test_array_string_and_format_keywords(validator: SchemaValidator) -> None:
    schema = {
        "type": "object",
        "properties": {
            "tags": {"type": "array", "minItems": 1, "maxItems": 2},
            "code": {"type": "string", "pattern": "^[A-Z]{3}$", "maxLength": 3},
            "contact": {"type": "string", "format": "email"},
        },
    }

    assert validator.validate({"tags": []}, schema) == ["Array at /tags should have at least 1 items"]
    assert validator.validate({"tags": [1, 2, 3]}, schema) == [
        "Array at /tags should have at most 2 items"
    ]
    assert validator.validate({"code": "abcd"}, schema) == [
        "Property at /code should match pattern '^[A-Z]{3}$'",
        "Property at /code should have at most 3 characters",
    ]
    assert validator.validate({"contact": "not-an-email"}, schema) == [
        "Property at /contact should match format 'email'"
    ]


def test_root_type_mismatch_reports_runtime_type(validator: SchemaValidator, spell: dict) -> None:
    assert validator.validate([1, 2], spell) == ["Property at root should be object, but got array"]
    assert validator.validate(None, {"type": ["string", "number"]}) == [
        "Property at root should be string,number, but got null"
    ]


def test_unknown_keyword_falls_back_to_generic_message(validator: SchemaValidator) -> None:
    errors = validator.validate({"edition": 4}, {"properties": {"edition": {"const": 5}}})

    assert len(errors) == 1
    assert errors[0].startswith("Validation error at /edition: ")


def test_path_segments_are_escaped(validator: SchemaValidator) -> None:
    schema = {"properties": {"a/b": {"type": "string"}}}

    assert validator.validate({"a/b": 1}, schema) == [
        "Property at /a~1b should be string, but got number"
    ]


def test_invalid_schema_becomes_single_violation(validator: SchemaValidator) -> None:
    errors = validator.validate({}, {"type": "not-a-real-type"})

    assert len(errors) == 1
    assert errors[0].startswith("Schema validation error: ")


def test_non_schema_values_never_raise(validator: SchemaValidator) -> None:
    assert len(validator.validate({}, ["not", "a", "schema"])) == 1
    assert len(validator.validate({}, {"default": object()})) == 1
    assert not validator.is_valid_schema(42)


def test_is_valid_schema(validator: SchemaValidator) -> None:
    assert validator.is_valid_schema({"type": "object"})
    assert validator.is_valid_schema(True)
    # 모르는 키워드는 허용 (non-strict)
    assert validator.is_valid_schema({"type": "object", "x-editor": {"widget": "tabs"}})
    assert not validator.is_valid_schema({"type": "not-a-real-type"})
    assert not validator.is_valid_schema({"minLength": -1})


def test_compile_is_cached(validator: SchemaValidator) -> None:
    first = validator.compile({"type": "object", "required": ["a"]})
    second = validator.compile({"type": "object", "required": ["a"]})

    assert first.ok
    assert first is second


def test_ruleset_meta_schema(validator: SchemaValidator) -> None:
    assert validator.validate_ruleset_schema({"type": "object", "properties": {}}) == []
    assert validator.validate_ruleset_schema({}) == ["Missing required property 'type' at root"]
    assert validator.validate_ruleset_schema({"type": "array"}) == [
        "Property at /type should be one of: object"
    ]
    assert validator.validate_ruleset_schema(
        {"type": "object", "required": "name", "additionalProperties": "no"}
    ) == [
        "Property at /required should be array, but got string",
        "Property at /additionalProperties should be boolean, but got string",
    ]
    assert validator.validate_ruleset_schema({"type": "object", "required": ["name", 3]}) == [
        "Property at /required/1 should be string, but got number"
    ]


def test_common_schemas_are_copies(validator: SchemaValidator) -> None:
    schemas = validator.common_schemas()
    assert set(schemas) == {"spell", "monster", "item"}

    schemas["spell"]["required"].append("components")

    assert validator.common_schemas()["spell"]["required"] == ["name", "level", "school"]


def test_malformed_dialect_marker_never_raises(validator: SchemaValidator) -> None:
    schema = {"$schema": [], "type": "object"}

    errors = validator.validate({}, schema)

    assert len(errors) == 1
    assert errors[0].startswith("Schema validation error: ")
    assert not validator.is_valid_schema(schema)


def test_local_refs_still_resolve(validator: SchemaValidator) -> None:
    schema = {
        "definitions": {"level": {"type": "number", "maximum": 9}},
        "properties": {"level": {"$ref": "#/definitions/level"}},
    }

    assert validator.validate({"level": 3}, schema) == []
    assert validator.validate({"level": 12}, schema) == ["Property at /level should be <= 9"]


def test_remote_refs_are_never_fetched(validator: SchemaValidator) -> None:
    hits: list[str] = []

    class _Recorder(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            hits.append(self.path)
            body = b'{"type": "string"}'
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, *args: Any) -> None:
            pass

    server = HTTPServer(("127.0.0.1", 0), _Recorder)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        url = f"http://127.0.0.1:{server.server_address[1]}/internal/secret"
        errors = validator.validate({"name": 1}, {"properties": {"name": {"$ref": url}}})
    finally:
        server.shutdown()
        server.server_close()

    assert hits == []
    assert len(errors) == 1
    assert errors[0].startswith("Schema validation error: ")


def test_date_time_and_uri_formats_are_checked(validator: SchemaValidator) -> None:
    schema = {
        "type": "object",
        "properties": {
            "releasedAt": {"type": "string", "format": "date-time"},
            "homepage": {"type": "string", "format": "uri"},
        },
    }

    assert validator.validate(
        {"releasedAt": "2024-05-01T10:00:00Z", "homepage": "https://example.com/rules"}, schema
    ) == []
    assert validator.validate({"releasedAt": "nope", "homepage": "not a uri"}, schema) == [
        "Property at /releasedAt should match format 'date-time'",
        "Property at /homepage should match format 'uri'",
    ]
