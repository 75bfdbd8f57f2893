#!/usr/bin/env python3

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from struct_to_openapi.cli_utils import reconstruct_command_line
from struct_to_openapi.struct_to_openapi import struct_to_openapi

PETSTORE_DIR = Path(__file__).parent / "test_data" / "petstore"


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Test command reconstruction without active Click context (fallback)"""
        # Since there's no active Click context in tests, this should return fallback
        result = reconstruct_command_line(struct_to_openapi)
        assert result == "struct_to_openapi"


class TestCli:
    """Runs the command through click's test runner"""

    def invoke(self, *args):
        return CliRunner().invoke(struct_to_openapi, [str(a) for a in args])

    def test_json_output(self, tmp_path):
        out = tmp_path / "api.json"
        result = self.invoke(PETSTORE_DIR, "-o", out, "--title", "Pets", "--api-version", "1.2.3")

        assert result.exit_code == 0, result.output
        assert "2 schemas written to" in result.output

        document = json.loads(out.read_text())
        assert document["info"]["title"] == "Pets"
        assert document["info"]["version"] == "1.2.3"
        assert document["info"]["description"].startswith("Generated by: struct_to_openapi petstore --output")
        assert list(document["components"]["schemas"]) == ["Owner", "Pet"]

    def test_yaml_output_from_extension(self, tmp_path):
        out = tmp_path / "api.yaml"
        result = self.invoke(PETSTORE_DIR, "-o", out)

        assert result.exit_code == 0, result.output
        document = yaml.safe_load(out.read_text())
        assert document["components"]["schemas"]["Pet"]["properties"]["kind"] == {"type": "string", "enum": ["cat", "dog"]}

    def test_config_file(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("add_generation_comment: false\nforeign_types:\n  time.Time:\n    type: string\n    format: date-time\n")
        out = tmp_path / "api.json"
        result = self.invoke(PETSTORE_DIR, "-o", out, "-c", config)

        assert result.exit_code == 0, result.output
        document = json.loads(out.read_text())
        assert "description" not in document["info"]
        assert document["components"]["schemas"]["Pet"]["properties"]["born"] == {"type": "string", "format": "date-time"}

    def test_base_document(self, tmp_path):
        base = tmp_path / "base.json"
        base.write_text(
            json.dumps(
                {
                    "openapi": "3.0.3",
                    "info": {"title": "Store", "version": "9"},
                    "paths": {"/pets": {"get": {"responses": {"200": {"description": "ok"}}}}},
                }
            )
        )
        out = tmp_path / "api.json"
        result = self.invoke(PETSTORE_DIR, "-o", out, "-b", base)

        assert result.exit_code == 0, result.output
        document = json.loads(out.read_text())
        assert document["info"] == {"title": "Store", "version": "9"}
        assert "/pets" in document["paths"]
        assert set(document["components"]["schemas"]) == {"Owner", "Pet"}

    def test_warnings_are_reported(self, tmp_path):
        source = tmp_path / "models.go"
        source.write_text('package models\n\n// oapi:schema\ntype W struct {\n\tSize int `json:"size" oapi_minimum:"big"`\n}\n')
        out = tmp_path / "api.json"
        result = self.invoke(source, "-o", out)

        assert result.exit_code == 0, result.output
        assert "warning: W.Size: invalid number 'big' for Minimum (oapi_minimum:big)" in result.output

    def test_fatal_error_exits_non_zero(self, tmp_path):
        source = tmp_path / "models.go"
        source.write_text('package models\n\n// oapi:schema\ntype Node struct {\n\tNext *Node `json:"next"`\n}\n')
        out = tmp_path / "api.json"
        result = self.invoke(source, "-o", out)

        assert result.exit_code == 1
        assert "cyclic declaration without an array indirection: Node -> Node" in result.output
        assert not out.exists()

    def test_invalid_config_file(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text("{broken")
        result = self.invoke(PETSTORE_DIR, "-o", tmp_path / "api.json", "-c", config)

        assert result.exit_code == 1
        assert "Cannot parse config file" in result.output

    def test_missing_output_option(self):
        result = self.invoke(PETSTORE_DIR)
        assert result.exit_code == 2


if __name__ == "__main__":
    pytest.main([__file__])
