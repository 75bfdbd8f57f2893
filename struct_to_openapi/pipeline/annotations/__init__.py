"""
Annotations module.

Contains the directive parser and the schema attribute applier.
"""

from __future__ import annotations

from .applier import SCHEMA_ATTRIBUTES, AttributeKind, SchemaAttribute, apply_directive, parse_bool
from .parser import (
    CompositionMarker,
    Directive,
    has_omitempty,
    json_name,
    parse_composition_marker,
    parse_directives,
    split_directive_key,
)

__all__ = [
    "Directive",
    "CompositionMarker",
    "parse_directives",
    "parse_composition_marker",
    "split_directive_key",
    "json_name",
    "has_omitempty",
    "apply_directive",
    "parse_bool",
    "AttributeKind",
    "SchemaAttribute",
    "SCHEMA_ATTRIBUTES",
]
