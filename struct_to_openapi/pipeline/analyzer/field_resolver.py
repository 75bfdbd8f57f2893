"""
Field resolver: turns one field's type expression into a schema slot.

Besides the schema, every resolution yields the field's default required
flag: pointers, slices and maps are optional, everything else is required.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from ..declarations.nodes import (
    ArrayOf,
    Declaration,
    Field,
    Foreign,
    MapOf,
    NamedReference,
    PointerTo,
    Primitive,
    TypeExpr,
)
from ..errors import CyclicDeclarationError
from ..schema.nodes import Schema, SchemaRef
from .context import ResolutionContext

if TYPE_CHECKING:
    from .declaration_resolver import DeclarationResolver

logger = logging.getLogger(__name__)

INTEGER_TYPES = {"int", "int8", "int16", "int32", "int64", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr", "rune"}
NUMBER_TYPES = {"float", "float32", "float64"}
STRING_TYPES = {"string", "byte"}
BOOLEAN_TYPES = {"bool"}


def primitive_schema_type(name: str) -> str:
    """Map a builtin type name to an OpenAPI type; anything unknown is an object."""
    if name in INTEGER_TYPES:
        return "integer"
    if name in NUMBER_TYPES:
        return "number"
    if name in STRING_TYPES:
        return "string"
    if name in BOOLEAN_TYPES:
        return "boolean"
    return "object"


class FieldResolver:
    """Resolves field type expressions to SchemaRefs."""

    def __init__(self, context: ResolutionContext, declarations: DeclarationResolver):
        """
        Initialize the resolver.

        Args:
            context: The run's resolution context
            declarations: Resolver used for fields naming other declarations
        """
        self.context = context
        self.declarations = declarations

    def resolve(self, field: Field, type_expr: TypeExpr, owner: Declaration) -> tuple[SchemaRef, bool]:
        """
        Resolve a type expression.

        Args:
            field: The field being resolved (for messages)
            type_expr: The type expression to resolve, initially field.type_expr
            owner: Declaration containing the field, whose package scopes identifiers

        Returns:
            (schema slot, required unless overridden)
        """
        match type_expr:
            case MapOf():
                return SchemaRef.inline(Schema(type="object")), False
            case ArrayOf(elem=elem):
                if isinstance(elem, PointerTo):
                    elem = elem.elem
                items = self._resolve_items(field, elem, owner)
                return SchemaRef.inline(Schema(type="array", items=items)), False
            case PointerTo(elem=elem):
                schema_ref, _ = self.resolve(field, elem, owner)
                return schema_ref, False
            case Foreign():
                return SchemaRef.inline(self._foreign_schema(type_expr)), True
            case Primitive(name=name):
                return SchemaRef.inline(Schema(type=primitive_schema_type(name))), True
            case NamedReference(name=name):
                return self._resolve_named(field, name, owner), True
            case _:
                return SchemaRef.inline(Schema(type="object")), True

    def _resolve_items(self, field: Field, elem: TypeExpr, owner: Declaration) -> SchemaRef:
        # Indexed declarations are referenced, never resolved here: this is what
        # lets a declaration hold a slice of itself
        if isinstance(elem, NamedReference):
            target = self.context.lookup(elem.name, owner.package)
            if target is not None and target.is_object_like and self.context.is_indexed(target):
                return SchemaRef.reference(self.context.schema_name(target))
        schema_ref, _ = self.resolve(field, elem, owner)
        return schema_ref

    def _resolve_named(self, field: Field, name: str, owner: Declaration) -> SchemaRef:
        target = self.context.lookup(name, owner.package)
        if target is None:
            logger.debug("%s.%s: unknown type %s, using an object schema", owner.name, field.display_name, name)
            return SchemaRef.inline(Schema(type=primitive_schema_type(name)))

        if target in self.context.in_progress:
            start = self.context.in_progress.index(target)
            chain = [d.name for d in self.context.in_progress[start:]] + [target.name]
            raise CyclicDeclarationError(chain, f"{owner.name}.{field.display_name}")

        schema_name, schema = self.declarations.resolve(target)
        if schema_name is not None and self.context.is_indexed(target):
            return SchemaRef.reference(schema_name)
        # Fields may mutate their schema, so they get their own copy
        return SchemaRef.inline(copy.deepcopy(schema))

    def _foreign_schema(self, type_expr: Foreign) -> Schema:
        override = self.context.config.foreign_types.get(type_expr.qualified_name)
        if override is not None:
            return Schema.from_attributes(override)
        logger.debug("Foreign type %s resolved as an opaque object", type_expr.qualified_name)
        return Schema(type="object")
