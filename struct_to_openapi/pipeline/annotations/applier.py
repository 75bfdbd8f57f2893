"""
Applies schema directives to a schema under construction.

Attributes are looked up in a closed table keyed by the capitalized
attribute name of the directive (`oapi_minLength` -> `MinLength`); each
entry knows how to coerce the raw text. Unknown names are reported and
ignored so that newer annotations do not break older generators.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ...utils import capitalize_first
from ..schema.nodes import SchemaRef
from .parser import split_directive_key

logger = logging.getLogger(__name__)

REQUIRED_ATTRIBUTE = "Required"

_TRUE_LITERALS = {"1", "t", "T", "true", "TRUE", "True"}
_FALSE_LITERALS = {"0", "f", "F", "false", "FALSE", "False"}


class AttributeKind(Enum):
    """How the raw directive text is coerced."""

    STRING = "string"
    STRING_LIST = "string_list"
    BOOL = "bool"
    FLOAT = "float"
    UINT = "uint"


@dataclass(frozen=True)
class SchemaAttribute:
    """A settable Schema attribute."""

    kind: AttributeKind
    attr: str  # Attribute name on Schema


SCHEMA_ATTRIBUTES: dict[str, SchemaAttribute] = {
    "Type": SchemaAttribute(AttributeKind.STRING, "type"),
    "Title": SchemaAttribute(AttributeKind.STRING, "title"),
    "Description": SchemaAttribute(AttributeKind.STRING, "description"),
    "Format": SchemaAttribute(AttributeKind.STRING, "format"),
    "Pattern": SchemaAttribute(AttributeKind.STRING, "pattern"),
    "Default": SchemaAttribute(AttributeKind.STRING, "default"),
    "Example": SchemaAttribute(AttributeKind.STRING, "example"),
    "Enum": SchemaAttribute(AttributeKind.STRING_LIST, "enum"),
    "Nullable": SchemaAttribute(AttributeKind.BOOL, "nullable"),
    "ReadOnly": SchemaAttribute(AttributeKind.BOOL, "read_only"),
    "WriteOnly": SchemaAttribute(AttributeKind.BOOL, "write_only"),
    "Deprecated": SchemaAttribute(AttributeKind.BOOL, "deprecated"),
    "AllowEmptyValue": SchemaAttribute(AttributeKind.BOOL, "allow_empty_value"),
    "UniqueItems": SchemaAttribute(AttributeKind.BOOL, "unique_items"),
    "ExclusiveMin": SchemaAttribute(AttributeKind.BOOL, "exclusive_minimum"),
    "ExclusiveMinimum": SchemaAttribute(AttributeKind.BOOL, "exclusive_minimum"),
    "ExclusiveMax": SchemaAttribute(AttributeKind.BOOL, "exclusive_maximum"),
    "ExclusiveMaximum": SchemaAttribute(AttributeKind.BOOL, "exclusive_maximum"),
    "Min": SchemaAttribute(AttributeKind.FLOAT, "minimum"),
    "Minimum": SchemaAttribute(AttributeKind.FLOAT, "minimum"),
    "Max": SchemaAttribute(AttributeKind.FLOAT, "maximum"),
    "Maximum": SchemaAttribute(AttributeKind.FLOAT, "maximum"),
    "MultipleOf": SchemaAttribute(AttributeKind.FLOAT, "multiple_of"),
    "MinLength": SchemaAttribute(AttributeKind.UINT, "min_length"),
    "MaxLength": SchemaAttribute(AttributeKind.UINT, "max_length"),
    "MinItems": SchemaAttribute(AttributeKind.UINT, "min_items"),
    "MaxItems": SchemaAttribute(AttributeKind.UINT, "max_items"),
    "MinProps": SchemaAttribute(AttributeKind.UINT, "min_properties"),
    "MinProperties": SchemaAttribute(AttributeKind.UINT, "min_properties"),
    "MaxProps": SchemaAttribute(AttributeKind.UINT, "max_properties"),
    "MaxProperties": SchemaAttribute(AttributeKind.UINT, "max_properties"),
}


def parse_bool(text: str) -> bool | None:
    """Parse a boolean literal, None when the text is not one."""
    if text in _TRUE_LITERALS:
        return True
    if text in _FALSE_LITERALS:
        return False
    return None


def apply_directive(
    schema_ref: SchemaRef,
    key: str,
    raw_value: str,
    warn: Callable[[str, str], None],
) -> bool | None:
    """
    Apply one `oapi_*` directive to a schema.

    Args:
        schema_ref: The field's schema; a pure $ref is left untouched
        key: Directive key, e.g. "oapi_minimum"
        raw_value: Directive value as written
        warn: Called with (message, directive text) for recoverable problems

    Returns:
        The parsed flag for `oapi_required`, None for every other directive
        and for a required flag that could not be parsed
    """
    directive_text = f"{key}:{raw_value}"
    parts = split_directive_key(key)
    if parts is None:
        warn(f"malformed directive key '{key}'", directive_text)
        return None

    attribute = capitalize_first(parts[1])
    value = raw_value.strip()

    if attribute == REQUIRED_ATTRIBUTE:
        required = parse_bool(value)
        if required is None:
            warn(f"invalid boolean '{value}' for required", directive_text)
        return required

    schema = schema_ref.value
    if schema is None:
        logger.debug("Ignoring %s on reference %s", directive_text, schema_ref.ref)
        return None

    spec = SCHEMA_ATTRIBUTES.get(attribute)
    if spec is None:
        warn(f"unknown schema attribute '{attribute}'", directive_text)
        return None

    match spec.kind:
        case AttributeKind.BOOL:
            flag = parse_bool(value)
            if flag is None:
                warn(f"invalid boolean '{value}' for {attribute}", directive_text)
                flag = False
            setattr(schema, spec.attr, flag)
        case AttributeKind.FLOAT:
            try:
                number = float(value)
            except ValueError:
                number = math.nan
            if not math.isfinite(number):
                warn(f"invalid number '{value}' for {attribute}", directive_text)
                return None
            setattr(schema, spec.attr, number)
        case AttributeKind.UINT:
            if not (value.isascii() and value.isdigit()):
                warn(f"invalid unsigned integer '{value}' for {attribute}", directive_text)
                return None
            setattr(schema, spec.attr, int(value))
        case AttributeKind.STRING_LIST:
            getattr(schema, spec.attr).extend(item.strip() for item in value.split(","))
        case _:
            setattr(schema, spec.attr, value)
    return None
