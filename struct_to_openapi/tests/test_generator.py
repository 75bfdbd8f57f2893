from __future__ import annotations

import json
from pathlib import Path

import pytest

from struct_to_openapi.pipeline import DocumentStore, LoadError, NameCollisionError, SchemaGenerator, SchemaGeneratorConfig

PETSTORE_DIR = Path(__file__).parent / "test_data" / "petstore"

EXPECTED_PET = {
    "type": "object",
    "properties": {
        "id": {"type": "integer"},
        "name": {"type": "string", "minLength": 1},
        "tag": {"type": "string", "description": "Short label shown in listings"},
        "age": {"type": "integer", "minimum": 0, "maximum": 30},
        "kind": {"type": "string", "enum": ["cat", "dog"]},
        "owner": {"$ref": "#/components/schemas/Owner"},
        "friends": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
        "labels": {"type": "object"},
        "born": {"type": "object"},
    },
    "required": ["id", "name", "age", "kind", "born"],
}

EXPECTED_OWNER = {
    "type": "object",
    "properties": {
        "id": {"type": "integer"},
        "email": {"type": "string", "format": "email"},
        "Home": {
            "type": "object",
            "properties": {"City": {"type": "string"}, "Street": {"type": "string"}},
            "required": ["City", "Street"],
        },
    },
    "required": ["id", "email", "Home"],
}


class TestSchemaGenerator:
    """End to end generation on the petstore package"""

    def test_petstore(self):
        store = DocumentStore()
        result = SchemaGenerator().generate_from_paths([PETSTORE_DIR], store)

        assert list(result.schemas) == ["Owner", "Pet"]
        assert result.warnings == []
        assert store.schemas == {"Owner": EXPECTED_OWNER, "Pet": EXPECTED_PET}
        store.validate()

    def test_written_document_reloads_and_validates(self, tmp_path):
        store = DocumentStore()
        SchemaGenerator().generate_from_paths([PETSTORE_DIR], store)
        store.save_json(tmp_path / "api.json")

        reloaded = DocumentStore.from_file(tmp_path / "api.json")
        reloaded.validate()
        assert reloaded.to_json() == store.to_json()

    def test_collision_with_existing_schema_registers_nothing(self):
        store = DocumentStore()
        store.add_schema("Pet", {"type": "string"})

        with pytest.raises(NameCollisionError) as excinfo:
            SchemaGenerator().generate_from_paths([PETSTORE_DIR], store)

        assert excinfo.value.name == "Pet"
        assert excinfo.value.first == "existing document schema"
        assert store.schemas == {"Pet": {"type": "string"}}

    def test_build_index_keeps_first_declaration(self, tmp_path):
        (tmp_path / "a.go").write_text("package a\n\n// oapi:schema\ntype Item struct {\n\tA string\n}\n")
        (tmp_path / "b.go").write_text("package b\n\n// oapi:schema\ntype Item struct {\n\tB string\n}\n")
        generator = SchemaGenerator()
        source = generator.load([tmp_path / "a.go", tmp_path / "b.go"])

        index = generator.build_index(source)
        assert index["Item"].package == "a"

        # Same name from two packages is still a collision at registration
        with pytest.raises(NameCollisionError, match="a.Item"):
            generator.generate(source, DocumentStore())

    def test_repeated_runs_are_identical(self):
        outputs = []
        for _ in range(2):
            store = DocumentStore()
            SchemaGenerator().generate_from_paths([PETSTORE_DIR], store)
            outputs.append(store.to_json())
        assert outputs[0] == outputs[1]


class TestSchemaGeneratorConfig:
    def test_defaults(self):
        config = SchemaGeneratorConfig()
        assert config.decorations == ["oapi:schema", "swagger:model"]
        assert config.max_depth == 64
        assert config.omitempty_optional is False
        assert config.strict_directives is False

    def test_from_dict_ignores_unknown_keys(self):
        config = SchemaGeneratorConfig.from_dict({"max_depth": 8, "colour": "red"})
        assert config.max_depth == 8
        assert not hasattr(config, "colour")

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("omitempty_optional: true\nforeign_types:\n  time.Time:\n    type: string\n    format: date-time\n")
        config = SchemaGeneratorConfig.from_file(path)

        assert config.omitempty_optional is True
        assert config.foreign_types == {"time.Time": {"type": "string", "format": "date-time"}}

    def test_config_must_be_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(LoadError, match="must contain a mapping"):
            SchemaGeneratorConfig.from_file(path)

    def test_json_round_trip(self, tmp_path):
        config = SchemaGeneratorConfig(title="Shop", strict_directives=True)
        path = tmp_path / "config.json"
        path.write_text(json.dumps(config.to_dict()))

        assert SchemaGeneratorConfig.from_file(path) == config
