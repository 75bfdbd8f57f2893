"""
Document store holding the OpenAPI document being produced.

Schemas are stored in their rendered (dict) form. The YAML form is always
derived from the JSON form so both serializations describe the same document.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..config import SchemaGeneratorConfig
from ..errors import DocumentValidationError, LoadError, NameCollisionError
from ..schema.nodes import SCHEMA_REF_PREFIX, Schema
from .atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)

SCHEMA_TYPES = {"object", "array", "string", "number", "integer", "boolean"}
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Keys whose values are nested schemas, or lists of them
_NESTED_SCHEMA_KEYS = ("items", "not", "additionalProperties")
_SCHEMA_LIST_KEYS = ("oneOf", "allOf", "anyOf")


class DocumentStore:
    """An OpenAPI document with schema registration, validation and serialization."""

    def __init__(self, document: dict[str, Any] | None = None, config: SchemaGeneratorConfig | None = None):
        """
        Initialize the store.

        Args:
            document: Base document to extend; a minimal one is created when None
            config: Supplies openapi version and info for a new document
        """
        config = config or SchemaGeneratorConfig()
        if document is None:
            document = {
                "openapi": config.openapi_version,
                "info": {"title": config.title, "version": config.version},
                "paths": {},
            }
        self.document = document
        self.document.setdefault("components", {}).setdefault("schemas", {})

    @staticmethod
    def from_file(path: str | Path, config: SchemaGeneratorConfig | None = None) -> DocumentStore:
        """Load a base document from a JSON or YAML file."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
            document = yaml.safe_load(text) if path.suffix in (".yaml", ".yml") else json.loads(text)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise LoadError(f"Cannot load base document {path}: {e}") from e
        if not isinstance(document, dict):
            raise LoadError(f"Base document {path} must be a mapping")
        return DocumentStore(document, config)

    @property
    def schemas(self) -> dict[str, Any]:
        return self.document["components"]["schemas"]

    def has_schema(self, name: str) -> bool:
        return name in self.schemas

    def add_schema(self, name: str, schema: Schema | dict[str, Any], origin: str = "") -> None:
        """
        Register a schema under components.schemas.

        Raises:
            NameCollisionError: If a schema with this name already exists
        """
        if name in self.schemas:
            raise NameCollisionError(name, "existing document schema", origin or name)
        self.schemas[name] = schema.to_dict() if isinstance(schema, Schema) else schema

    def add_path(self, path: str, item: dict[str, Any]) -> None:
        """Add a path item, merging operations into an existing item for the same path."""
        paths = self.document.setdefault("paths", {})
        existing = paths.get(path)
        if existing is None:
            paths[path] = item
            return
        for method in HTTP_METHODS:
            if item.get(method) is not None:
                existing[method] = item[method]

    def validate(self) -> None:
        """
        Resolve every $ref and check the structure of every component schema.

        Raises:
            DocumentValidationError: Listing every problem found
        """
        problems: list[str] = []
        if not isinstance(self.document.get("openapi"), str):
            problems.append("missing openapi version")
        info = self.document.get("info")
        if not isinstance(info, dict) or "title" not in info or "version" not in info:
            problems.append("info must have a title and a version")

        for name, schema in self.schemas.items():
            self._check_schema(schema, f"#/components/schemas/{name}", problems)
        self._check_refs(self.document, "#", problems)

        if problems:
            raise DocumentValidationError(problems)
        logger.debug("Document valid: %d schemas", len(self.schemas))

    def _check_schema(self, schema: Any, location: str, problems: list[str]) -> None:
        if not isinstance(schema, dict):
            problems.append(f"{location}: schema must be a mapping")
            return
        if "$ref" in schema:
            return

        schema_type = schema.get("type")
        if schema_type is not None and schema_type not in SCHEMA_TYPES:
            problems.append(f"{location}: unsupported type '{schema_type}'")
        if schema_type == "array" and "items" not in schema:
            problems.append(f"{location}: array schema without items")

        properties = schema.get("properties", {})
        for required in schema.get("required", []):
            if required not in properties:
                problems.append(f"{location}: required property '{required}' is not defined")
        for prop_name, prop_schema in properties.items():
            self._check_schema(prop_schema, f"{location}/properties/{prop_name}", problems)

        for key in _NESTED_SCHEMA_KEYS:
            if isinstance(schema.get(key), dict):
                self._check_schema(schema[key], f"{location}/{key}", problems)
        for key in _SCHEMA_LIST_KEYS:
            for i, member in enumerate(schema.get(key, [])):
                self._check_schema(member, f"{location}/{key}/{i}", problems)

        discriminator = schema.get("discriminator")
        if discriminator is not None:
            if not isinstance(discriminator, dict) or not discriminator.get("propertyName"):
                problems.append(f"{location}: discriminator without propertyName")
            else:
                for key, target in discriminator.get("mapping", {}).items():
                    if not self._resolves(target):
                        problems.append(f"{location}: discriminator mapping '{key}' targets unknown {target}")

    def _check_refs(self, node: Any, location: str, problems: list[str]) -> None:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and not self._resolves(ref):
                problems.append(f"{location}: unresolved reference {ref}")
            for key, value in node.items():
                self._check_refs(value, f"{location}/{key}", problems)
        elif isinstance(node, list):
            for i, value in enumerate(node):
                self._check_refs(value, f"{location}/{i}", problems)

    def _resolves(self, ref: str) -> bool:
        """Whether a local JSON pointer reference points at something in the document."""
        if not ref.startswith("#/"):
            return False
        if ref.startswith(SCHEMA_REF_PREFIX):
            return ref[len(SCHEMA_REF_PREFIX) :] in self.schemas
        node: Any = self.document
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if isinstance(node, dict) and part in node:
                node = node[part]
            elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
                node = node[int(part)]
            else:
                return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return self.document

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.document, indent=indent, ensure_ascii=False) + "\n"

    def to_yaml(self) -> str:
        return yaml.safe_dump(json.loads(self.to_json()), sort_keys=False, allow_unicode=True)

    def save_json(self, path: str | Path, writer: AtomicWriter | None = None) -> None:
        (writer or AtomicWriter()).write(Path(path), self.to_json(), "json")

    def save_yaml(self, path: str | Path, writer: AtomicWriter | None = None) -> None:
        (writer or AtomicWriter()).write(Path(path), self.to_yaml(), "yaml")
