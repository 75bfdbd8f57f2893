"""
Declaration model produced by the declaration source.

Type expressions form a closed set of variants that the resolvers
dispatch on with pattern matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TypeExpr:
    """Base class for all type expressions."""


@dataclass(frozen=True)
class Primitive(TypeExpr):
    """A builtin type such as int64, string or bool."""

    name: str = ""


@dataclass(frozen=True)
class NamedReference(TypeExpr):
    """An identifier naming another declaration in the same package."""

    name: str = ""


@dataclass(frozen=True)
class PointerTo(TypeExpr):
    """*T"""

    elem: TypeExpr = field(default_factory=TypeExpr)


@dataclass(frozen=True)
class ArrayOf(TypeExpr):
    """[]T or [N]T"""

    elem: TypeExpr = field(default_factory=TypeExpr)


@dataclass(frozen=True)
class MapOf(TypeExpr):
    """map[K]V"""

    key: TypeExpr = field(default_factory=TypeExpr)
    value: TypeExpr = field(default_factory=TypeExpr)


@dataclass(frozen=True)
class Foreign(TypeExpr):
    """A type the engine cannot see into: pkg.Name, inline struct, chan, func."""

    package: str = ""
    name: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


@dataclass(frozen=True)
class Field:
    """A field of an object-like declaration."""

    name: str | None = None  # None for embedded fields
    type_expr: TypeExpr = field(default_factory=TypeExpr)
    tag: str = ""  # Raw tag string, without backticks
    doc: str = ""  # Doc comment text, comment markers stripped
    line: int = 0

    @property
    def is_embedded(self) -> bool:
        return self.name is None

    @property
    def display_name(self) -> str:
        """Name used in messages; embedded fields are named after their type."""
        if self.name is not None:
            return self.name
        return _type_label(self.type_expr)


@dataclass(frozen=True)
class Declaration:
    """A named type declaration: either a field list or a single underlying type."""

    name: str = ""
    package: str = ""
    doc: str = ""
    fields: tuple[Field, ...] | None = None
    underlying: TypeExpr | None = None
    source_path: str = ""
    line: int = 0

    @property
    def is_object_like(self) -> bool:
        return self.fields is not None

    @property
    def identity(self) -> str:
        """Where the declaration comes from, for error messages."""
        location = f"{self.source_path}:{self.line}" if self.source_path else "<memory>"
        return f"{self.package}.{self.name} ({location})" if self.package else f"{self.name} ({location})"


@dataclass
class DeclarationSource:
    """Declarations found by a loader.

    Attributes:
        declarations: Annotated declarations, in source order
        bindings: package -> name -> declaration, for every type declaration
            in the package whether annotated or not
    """

    declarations: list[Declaration] = field(default_factory=list)
    bindings: dict[str, dict[str, Declaration]] = field(default_factory=dict)

    def add(self, declaration: Declaration, annotated: bool) -> None:
        self.bindings.setdefault(declaration.package, {})[declaration.name] = declaration
        if annotated:
            self.declarations.append(declaration)


def _type_label(type_expr: TypeExpr) -> str:
    match type_expr:
        case PointerTo(elem=elem):
            return _type_label(elem)
        case NamedReference(name=name) | Primitive(name=name):
            return name
        case Foreign():
            return type_expr.qualified_name
        case _:
            return "<anonymous>"
