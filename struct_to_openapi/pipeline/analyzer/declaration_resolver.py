"""
Declaration resolver: builds the schema of one named declaration.

Struct declarations become object schemas. Embedded fields compose the
schema through allOf (the default) or oneOf (`oapi_oneOf` doc line); once
a composition list exists, the named properties are folded into one extra
inline object member of that list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..annotations.applier import apply_directive
from ..annotations.parser import (
    DISCRIMINATOR_KEY,
    DISCRIMINATOR_PARSED_KEY,
    DISCRIMINATOR_PARSER_KEY,
    JSON_KEY,
    SCHEMA_NAME_KEY,
    CompositionMarker,
    doc_lines,
    has_omitempty,
    json_name,
    parse_composition_marker,
    parse_directives,
)
from ..declarations.nodes import Declaration, Field
from ..errors import CyclicDeclarationError, RecursionDepthError
from ..schema.nodes import Schema, SchemaRef
from .context import ResolutionContext, ResolvedDeclaration
from .discriminator import build_discriminator
from .field_resolver import FieldResolver

logger = logging.getLogger(__name__)

_DECLARATION_ONLY_KEYS = {DISCRIMINATOR_KEY, DISCRIMINATOR_PARSED_KEY, DISCRIMINATOR_PARSER_KEY, SCHEMA_NAME_KEY}


@dataclass
class ResolvedField:
    """A field after type resolution and directive application."""

    name: str
    schema_ref: SchemaRef
    required: bool
    marker: CompositionMarker | None = None


@dataclass
class DiscriminatorDirectives:
    property_name: str = ""
    parsed_mode: str | None = None
    parser_mode: str | None = None


class DeclarationResolver:
    """Resolves declarations to schemas, each at most once per context."""

    def __init__(self, context: ResolutionContext):
        self.context = context
        self.fields = FieldResolver(context, self)

    def resolve(self, declaration: Declaration) -> tuple[str | None, Schema]:
        """
        Resolve a declaration.

        Args:
            declaration: The declaration to resolve

        Returns:
            (registered name, schema) for struct declarations,
            (None, schema) for alias declarations

        Raises:
            CyclicDeclarationError: If the declaration is already being resolved
            RecursionDepthError: If nesting exceeds config.max_depth
        """
        key = (declaration.package, declaration.name)
        cached = self.context.resolved.get(key)
        if cached is not None:
            return cached.name, cached.schema

        in_progress = self.context.in_progress
        if declaration in in_progress:
            start = in_progress.index(declaration)
            raise CyclicDeclarationError([d.name for d in in_progress[start:]] + [declaration.name])
        if len(in_progress) >= self.context.config.max_depth:
            raise RecursionDepthError(declaration.name, self.context.config.max_depth)

        in_progress.append(declaration)
        try:
            if declaration.is_object_like:
                name: str | None = self.context.schema_name(declaration)
                schema = self._resolve_object(declaration)
            else:
                name = None
                schema = self._resolve_alias(declaration)
        finally:
            in_progress.pop()

        logger.debug("Resolved %s", declaration.identity)
        self.context.resolved[key] = ResolvedDeclaration(name=name, schema=schema)
        return name, schema

    def _resolve_object(self, declaration: Declaration) -> Schema:
        schema = Schema(type="object")
        named = Schema(type="object")
        mapping_keys: dict[int, str] = {}
        directives = self._discriminator_directives(declaration)

        for field in declaration.fields or ():
            resolved = self._resolve_field(declaration, field)
            if resolved is None:
                continue
            if resolved.name:
                named.set_property(resolved.name, resolved.schema_ref, resolved.required)
            elif resolved.marker is not None and resolved.marker.mode == "oneOf":
                schema.one_of.append(resolved.schema_ref)
                if resolved.marker.mapping_key:
                    mapping_keys[len(schema.one_of) - 1] = resolved.marker.mapping_key
            else:
                # Embedding composes through allOf unless marked otherwise
                schema.all_of.append(resolved.schema_ref)

        if schema.one_of or schema.all_of:
            if named.properties:
                composition = schema.one_of if schema.one_of else schema.all_of
                composition.append(SchemaRef.inline(named))
        else:
            schema.properties = named.properties
            schema.required = named.required

        if directives.property_name:
            schema.discriminator = build_discriminator(
                declaration.name,
                directives.property_name,
                directives.parsed_mode,
                directives.parser_mode,
                schema.one_of,
                mapping_keys,
                lambda message, directive: self.context.warn(message, directive, declaration.name),
            )
        return schema

    def _resolve_alias(self, declaration: Declaration) -> Schema:
        field = Field(name=declaration.name, type_expr=declaration.underlying, line=declaration.line)
        schema_ref, _ = self.fields.resolve(field, declaration.underlying, declaration)
        if schema_ref.is_reference:
            schema_ref = SchemaRef.inline(Schema(all_of=[schema_ref]))

        def warn(message: str, directive: str) -> None:
            self.context.warn(message, directive, declaration.name)

        for line in doc_lines(declaration.doc):
            for directive in parse_directives(line):
                if directive.key.startswith("oapi_") and directive.key not in _DECLARATION_ONLY_KEYS:
                    apply_directive(schema_ref, directive.key, directive.raw_value, warn)
        return schema_ref.value

    def _resolve_field(self, declaration: Declaration, field: Field) -> ResolvedField | None:
        def warn(message: str, directive: str) -> None:
            self.context.warn(message, directive, declaration.name, field.display_name)

        name = field.name or ""
        schema_ref, required = self.fields.resolve(field, field.type_expr, declaration)
        explicit_required = False

        for directive in parse_directives(field.tag):
            if directive.key == JSON_KEY:
                if directive.raw_value.strip() == "-":
                    return None
                tag_name = json_name(directive.raw_value)
                if tag_name:
                    name = tag_name
                if self.context.config.omitempty_optional and not explicit_required and has_omitempty(directive.raw_value):
                    required = False
            elif directive.is_schema_directive:
                flag = apply_directive(schema_ref, directive.key, directive.raw_value, warn)
                if flag is not None:
                    required = flag
                    explicit_required = True

        marker = None
        for line in doc_lines(field.doc):
            found = parse_composition_marker(line)
            if found is not None:
                marker = found
                line = found.rest
            for directive in parse_directives(line):
                if not directive.is_schema_directive:
                    continue
                flag = apply_directive(schema_ref, directive.key, directive.raw_value, warn)
                if flag is not None:
                    required = flag

        return ResolvedField(name=name, schema_ref=schema_ref, required=required, marker=marker)

    def _discriminator_directives(self, declaration: Declaration) -> DiscriminatorDirectives:
        result = DiscriminatorDirectives()
        for line in doc_lines(declaration.doc):
            for directive in parse_directives(line):
                value = directive.raw_value.strip()
                match directive.key:
                    case "oapi_discriminator":
                        result.property_name = value
                    case "oapi_discriminator_mapped_parsed":
                        result.parsed_mode = value
                    case "oapi_discriminator_mapped_parser":
                        result.parser_mode = value
        return result
