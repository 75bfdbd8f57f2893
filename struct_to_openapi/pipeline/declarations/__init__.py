"""
Declarations module.

Contains the declaration model and the Go source loader.
"""

from __future__ import annotations

from .loader import GoSourceLoader, parse_type_expr
from .nodes import (
    ArrayOf,
    Declaration,
    DeclarationSource,
    Field,
    Foreign,
    MapOf,
    NamedReference,
    PointerTo,
    Primitive,
    TypeExpr,
)

__all__ = [
    "TypeExpr",
    "Primitive",
    "NamedReference",
    "PointerTo",
    "ArrayOf",
    "MapOf",
    "Foreign",
    "Field",
    "Declaration",
    "DeclarationSource",
    "GoSourceLoader",
    "parse_type_expr",
]
