"""
Configuration for the schema generation pipeline.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import LoadError

OPENAPI_SCHEMA_DECORATION = "oapi:schema"
SWAGGER_SCHEMA_DECORATION = "swagger:model"


@dataclass
class SchemaGeneratorConfig:
    """Configuration options for schema generation."""

    # Doc comment markers selecting the declarations to generate
    decorations: list[str] = field(default_factory=lambda: [OPENAPI_SCHEMA_DECORATION, SWAGGER_SCHEMA_DECORATION])

    # Maximum nesting depth of declaration resolution
    max_depth: int = 64

    # Treat `json:",omitempty"` fields as optional unless oapi_required says otherwise
    omitempty_optional: bool = False

    # Raise DirectiveError instead of recording a warning for bad directives
    strict_directives: bool = False

    # Schemas used for qualified foreign types, e.g. {"time.Time": {"type": "string", "format": "date-time"}}
    foreign_types: dict[str, dict[str, Any]] = field(default_factory=dict)

    # Document info
    openapi_version: str = "3.0.3"
    title: str = "API"
    version: str = "0.0.0"

    # Write the reconstructed command line into info.description
    add_generation_comment: bool = True

    @staticmethod
    def from_dict(d: dict) -> SchemaGeneratorConfig:
        """Create a config from a dictionary."""
        config = SchemaGeneratorConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    @staticmethod
    def from_file(path: str | Path) -> SchemaGeneratorConfig:
        """Load a config from a JSON or YAML file."""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise LoadError(f"Cannot parse config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise LoadError(f"Config file {path} must contain a mapping")
        return SchemaGeneratorConfig.from_dict(data)

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "decorations": self.decorations,
            "max_depth": self.max_depth,
            "omitempty_optional": self.omitempty_optional,
            "strict_directives": self.strict_directives,
            "foreign_types": self.foreign_types,
            "openapi_version": self.openapi_version,
            "title": self.title,
            "version": self.version,
            "add_generation_comment": self.add_generation_comment,
        }
