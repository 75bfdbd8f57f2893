"""
Schema node definitions for the generated OpenAPI components.

A Schema only carries the attributes the engine knows how to set;
to_dict() renders it with OpenAPI key names, leaving unset attributes out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SCHEMA_REF_PREFIX = "#/components/schemas/"

# Python attribute -> OpenAPI key, in rendering order
SCHEMA_ATTRIBUTE_KEYS = {
    "type": "type",
    "title": "title",
    "description": "description",
    "format": "format",
    "pattern": "pattern",
    "enum": "enum",
    "default": "default",
    "example": "example",
    "nullable": "nullable",
    "read_only": "readOnly",
    "write_only": "writeOnly",
    "deprecated": "deprecated",
    "allow_empty_value": "allowEmptyValue",
    "unique_items": "uniqueItems",
    "minimum": "minimum",
    "exclusive_minimum": "exclusiveMinimum",
    "maximum": "maximum",
    "exclusive_maximum": "exclusiveMaximum",
    "multiple_of": "multipleOf",
    "min_length": "minLength",
    "max_length": "maxLength",
    "min_items": "minItems",
    "max_items": "maxItems",
    "min_properties": "minProperties",
    "max_properties": "maxProperties",
}


def create_ref(name: str) -> str:
    """Build the $ref string of a registered schema."""
    return f"{SCHEMA_REF_PREFIX}{name}"


def ref_name(ref: str) -> str:
    """Final path segment of a $ref string."""
    return ref.rsplit("/", 1)[-1]


@dataclass
class Discriminator:
    """The discriminator block of a oneOf schema."""

    property_name: str = ""
    mapping: dict[str, str] = field(default_factory=dict)  # variant key -> $ref

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"propertyName": self.property_name}
        if self.mapping:
            result["mapping"] = dict(self.mapping)
        return result


@dataclass
class Schema:
    """An OpenAPI schema under construction."""

    type: str | None = None
    title: str | None = None
    description: str | None = None
    format: str | None = None
    pattern: str | None = None
    enum: list[str] = field(default_factory=list)
    default: str | None = None
    example: str | None = None

    nullable: bool | None = None
    read_only: bool | None = None
    write_only: bool | None = None
    deprecated: bool | None = None
    allow_empty_value: bool | None = None
    unique_items: bool | None = None

    minimum: float | None = None
    exclusive_minimum: bool | None = None
    maximum: float | None = None
    exclusive_maximum: bool | None = None
    multiple_of: float | None = None

    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    min_properties: int | None = None
    max_properties: int | None = None

    properties: dict[str, SchemaRef] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    items: SchemaRef | None = None
    one_of: list[SchemaRef] = field(default_factory=list)
    all_of: list[SchemaRef] = field(default_factory=list)
    discriminator: Discriminator | None = None

    @staticmethod
    def from_attributes(d: dict[str, Any]) -> Schema:
        """Build a schema from OpenAPI keys; only the simple attributes are read."""
        schema = Schema()
        for attr, key in SCHEMA_ATTRIBUTE_KEYS.items():
            if key in d:
                value = d[key]
                setattr(schema, attr, list(value) if isinstance(value, list) else value)
        return schema

    def set_property(self, name: str, schema_ref: SchemaRef, required: bool) -> None:
        """Add or replace a property, keeping `required` a duplicate-free subset of `properties`."""
        self.properties[name] = schema_ref
        if required and name not in self.required:
            self.required.append(name)
        elif not required and name in self.required:
            self.required.remove(name)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for attr, key in SCHEMA_ATTRIBUTE_KEYS.items():
            value = getattr(self, attr)
            if value is None or value == []:
                continue
            if isinstance(value, float):
                value = _json_number(value)
            elif isinstance(value, list):
                value = list(value)
            result[key] = value

        if self.properties:
            result["properties"] = {name: ref.to_dict() for name, ref in self.properties.items()}
        if self.required:
            result["required"] = list(self.required)
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.one_of:
            result["oneOf"] = [ref.to_dict() for ref in self.one_of]
        if self.all_of:
            result["allOf"] = [ref.to_dict() for ref in self.all_of]
        if self.discriminator is not None:
            result["discriminator"] = self.discriminator.to_dict()
        return result


@dataclass
class SchemaRef:
    """A schema slot holding either an inline Schema or a $ref string, never both."""

    ref: str = ""
    value: Schema | None = None

    def __post_init__(self):
        if bool(self.ref) == (self.value is not None):
            raise ValueError("SchemaRef must hold exactly one of an inline schema or a reference")

    @staticmethod
    def inline(schema: Schema) -> SchemaRef:
        return SchemaRef(value=schema)

    @staticmethod
    def reference(name: str) -> SchemaRef:
        return SchemaRef(ref=create_ref(name))

    @property
    def is_reference(self) -> bool:
        return bool(self.ref)

    def to_dict(self) -> dict[str, Any]:
        if self.value is None:
            return {"$ref": self.ref}
        return self.value.to_dict()


def _json_number(value: float) -> int | float:
    return int(value) if value.is_integer() else value
