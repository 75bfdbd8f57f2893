"""
Schema generator: drives declaration resolution for a whole source.

1. Phase 1 (Index): map declaration names to annotated declarations
2. Phase 2 (Resolve): resolve every annotated declaration into a fresh collection
3. Phase 3 (Register): commit the collection to the document store, all or nothing
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .analyzer.context import ResolutionContext
from .analyzer.declaration_resolver import DeclarationResolver
from .config import SchemaGeneratorConfig
from .declarations.loader import GoSourceLoader
from .declarations.nodes import Declaration, DeclarationSource
from .document.store import DocumentStore
from .errors import DirectiveWarning, NameCollisionError
from .schema.nodes import Schema

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation run."""

    schemas: dict[str, Schema] = field(default_factory=dict)
    warnings: list[DirectiveWarning] = field(default_factory=list)


class SchemaGenerator:
    """Generates component schemas from annotated declarations."""

    def __init__(self, config: SchemaGeneratorConfig | None = None):
        self.config = config or SchemaGeneratorConfig()

    def load(self, paths: Iterable[str | Path]) -> DeclarationSource:
        """Load annotated declarations from Go files or package directories."""
        return GoSourceLoader(self.config.decorations).load(paths)

    def build_index(self, source: DeclarationSource) -> dict[str, Declaration]:
        """Phase 1: name -> annotated declaration, first declaration wins."""
        index: dict[str, Declaration] = {}
        for declaration in source.declarations:
            if declaration.name in index:
                logger.debug("%s shadowed by %s in the index", declaration.identity, index[declaration.name].identity)
                continue
            index[declaration.name] = declaration
        return index

    def resolve_all(self, source: DeclarationSource) -> ResolutionContext:
        """
        Phase 2: resolve every annotated declaration into a new collection.

        Returns:
            The run's context, with the schema collection and warnings

        Raises:
            StructToOpenAPIError: On any fatal resolution error
        """
        context = ResolutionContext(
            config=self.config,
            index=self.build_index(source),
            bindings=source.bindings,
        )
        resolver = DeclarationResolver(context)
        for declaration in source.declarations:
            name, schema = resolver.resolve(declaration)
            if name is not None:
                context.register(name, schema, declaration)
        logger.info("Resolved %d schemas from %d declarations", len(context.schemas), len(source.declarations))
        return context

    def generate(self, source: DeclarationSource, store: DocumentStore) -> GenerationResult:
        """
        Resolve a declaration source and register its schemas in a document store.

        Nothing is registered unless every declaration resolves and no
        generated name clashes with a schema already in the store.

        Raises:
            NameCollisionError: If a generated name is already used
            StructToOpenAPIError: On any other fatal resolution error
        """
        context = self.resolve_all(source)
        for name in context.schemas:
            if store.has_schema(name):
                raise NameCollisionError(name, "existing document schema", context.origins[name])
        for name, schema in context.schemas.items():
            store.add_schema(name, schema, context.origins[name])
        return GenerationResult(schemas=context.schemas, warnings=context.warnings)

    def generate_from_paths(self, paths: Iterable[str | Path], store: DocumentStore) -> GenerationResult:
        """Load Go sources from paths and generate their schemas into the store."""
        return self.generate(self.load(paths), store)
