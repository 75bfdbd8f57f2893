"""
Errors and warnings raised while turning declarations into schemas.

Fatal problems are exceptions that abort the whole generation run.
Annotation problems are recorded as DirectiveWarning and never abort,
unless strict mode is enabled.
"""

from __future__ import annotations

from dataclasses import dataclass


class StructToOpenAPIError(Exception):
    """Base class for every error raised by the pipeline."""

    pass


class LoadError(StructToOpenAPIError):
    """Raised when the declaration source cannot be read or parsed."""

    pass


class NameCollisionError(StructToOpenAPIError):
    """Raised when two declarations resolve to the same schema name."""

    def __init__(self, name: str, first: str, second: str):
        self.name = name
        self.first = first
        self.second = second
        super().__init__(f"Generated schema conflict Name={name}: {first} and {second}")


class CyclicDeclarationError(StructToOpenAPIError):
    """Raised when a declaration refers back to itself without an array indirection."""

    def __init__(self, chain: list[str], field_name: str = ""):
        self.chain = chain
        self.field_name = field_name
        location = f" (field {field_name})" if field_name else ""
        super().__init__(f"cyclic declaration without an array indirection: {' -> '.join(chain)}{location}")


class RecursionDepthError(StructToOpenAPIError):
    """Raised when declarations nest deeper than the configured maximum."""

    def __init__(self, declaration: str, max_depth: int):
        self.declaration = declaration
        self.max_depth = max_depth
        super().__init__(f"Maximum resolution depth {max_depth} exceeded while resolving {declaration}")


class DiscriminatorMappingError(StructToOpenAPIError):
    """Raised when two oneOf variants produce the same discriminator key."""

    def __init__(self, declaration: str, key: str, first: str, second: str):
        self.declaration = declaration
        self.key = key
        super().__init__(f"Discriminator key '{key}' of {declaration} maps to both {first} and {second}")


class DocumentValidationError(StructToOpenAPIError):
    """Raised when the document store finds dangling references or malformed schemas."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Document validation failed:\n" + "\n".join(f"  - {p}" for p in problems))


class DirectiveError(StructToOpenAPIError):
    """Raised instead of recording a warning when strict directives are enabled."""

    pass


@dataclass
class DirectiveWarning:
    """A recoverable problem found in a tag or doc directive."""

    declaration: str = ""
    field: str = ""
    directive: str = ""
    message: str = ""

    def __str__(self) -> str:
        location = self.declaration
        if self.field:
            location = f"{location}.{self.field}"
        return f"{location}: {self.message} ({self.directive})"


class OutputError(StructToOpenAPIError):
    """Raised when a serialized document fails its pre-write check."""

    pass
