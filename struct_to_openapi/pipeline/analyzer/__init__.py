"""
Analyzer module.

Contains the field and declaration resolvers and the discriminator builder.
"""

from __future__ import annotations

from .context import ResolutionContext, ResolvedDeclaration
from .declaration_resolver import DeclarationResolver
from .discriminator import build_discriminator
from .field_resolver import FieldResolver, primitive_schema_type

__all__ = [
    "ResolutionContext",
    "ResolvedDeclaration",
    "DeclarationResolver",
    "FieldResolver",
    "build_discriminator",
    "primitive_schema_type",
]
