"""
Pipeline - Go declarations to OpenAPI schemas.

1. Phase 0 (Loader): Scan Go sources into a DeclarationSource
2. Phase 1 (Index): Map names to annotated declarations
3. Phase 2 (Analyzer): Resolve declarations into schemas
4. Phase 3 (Document): Register schemas, validate and serialize the document
"""

from __future__ import annotations

from .config import SchemaGeneratorConfig
from .declarations import DeclarationSource, GoSourceLoader
from .document import AtomicWriter, DocumentStore
from .errors import (
    CyclicDeclarationError,
    DirectiveError,
    DirectiveWarning,
    DiscriminatorMappingError,
    DocumentValidationError,
    LoadError,
    NameCollisionError,
    OutputError,
    RecursionDepthError,
    StructToOpenAPIError,
)
from .generator import GenerationResult, SchemaGenerator
from .schema import Schema, SchemaRef

__all__ = [
    "SchemaGenerator",
    "GenerationResult",
    "SchemaGeneratorConfig",
    "GoSourceLoader",
    "DeclarationSource",
    "DocumentStore",
    "AtomicWriter",
    "Schema",
    "SchemaRef",
    "StructToOpenAPIError",
    "LoadError",
    "NameCollisionError",
    "CyclicDeclarationError",
    "RecursionDepthError",
    "DiscriminatorMappingError",
    "DocumentValidationError",
    "DirectiveError",
    "DirectiveWarning",
    "OutputError",
]
