"""
Resolution context shared by the resolvers during one generation run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..annotations.parser import SCHEMA_NAME_KEY, doc_lines, parse_directives
from ..config import SchemaGeneratorConfig
from ..declarations.nodes import Declaration
from ..errors import DirectiveError, DirectiveWarning, NameCollisionError
from ..schema.nodes import Schema

logger = logging.getLogger(__name__)


@dataclass
class ResolvedDeclaration:
    """Memoised result of resolving one declaration."""

    name: str | None  # Registered schema name, None for alias-like declarations
    schema: Schema


@dataclass
class ResolutionContext:
    """All mutable state of one run: index, collection, warnings and the resolution stack.

    Attributes:
        config: Generation options
        index: Declaration name -> annotated declaration (phase 1 output)
        bindings: package -> name -> declaration, for identifiers visible in a package
        schemas: The schema collection, registered name -> schema
        origins: Registered name -> identity of the declaration that owns it
        warnings: Recoverable directive problems, in discovery order
    """

    config: SchemaGeneratorConfig = field(default_factory=SchemaGeneratorConfig)
    index: dict[str, Declaration] = field(default_factory=dict)
    bindings: dict[str, dict[str, Declaration]] = field(default_factory=dict)
    schemas: dict[str, Schema] = field(default_factory=dict)
    origins: dict[str, str] = field(default_factory=dict)
    warnings: list[DirectiveWarning] = field(default_factory=list)

    # Resolution bookkeeping
    resolved: dict[tuple[str, str], ResolvedDeclaration] = field(default_factory=dict)
    in_progress: list[Declaration] = field(default_factory=list)

    def lookup(self, name: str, package: str) -> Declaration | None:
        """Find the declaration an identifier refers to: package binding first, then the index."""
        declaration = self.bindings.get(package, {}).get(name)
        if declaration is None:
            declaration = self.index.get(name)
        return declaration

    def is_indexed(self, declaration: Declaration) -> bool:
        return self.index.get(declaration.name) is declaration

    def schema_name(self, declaration: Declaration) -> str:
        """Registered name of a declaration: its own name unless renamed with `oapi_name`."""
        for line in doc_lines(declaration.doc):
            for directive in parse_directives(line):
                if directive.key == SCHEMA_NAME_KEY and directive.raw_value.strip():
                    return directive.raw_value.strip()
        return declaration.name

    def register(self, name: str, schema: Schema, declaration: Declaration) -> None:
        """Add a schema to the collection; a name is never registered twice."""
        if name in self.schemas:
            raise NameCollisionError(name, self.origins[name], declaration.identity)
        self.schemas[name] = schema
        self.origins[name] = declaration.identity

    def warn(self, message: str, directive: str = "", declaration: str = "", field_name: str = "") -> None:
        warning = DirectiveWarning(declaration=declaration, field=field_name, directive=directive, message=message)
        if self.config.strict_directives:
            raise DirectiveError(str(warning))
        self.warnings.append(warning)
        logger.warning("%s", warning)
