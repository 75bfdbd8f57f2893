"""Struct to OpenAPI Generator

A Python package for generating OpenAPI component schemas from annotated
Go struct declarations, driven by struct tags and doc comment directives.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    DocumentStore,
    GoSourceLoader,
    SchemaGenerator,
    SchemaGeneratorConfig,
    StructToOpenAPIError,
)

__all__ = [
    "SchemaGenerator",
    "SchemaGeneratorConfig",
    "GoSourceLoader",
    "DocumentStore",
    "AtomicWriter",
    "StructToOpenAPIError",
]
