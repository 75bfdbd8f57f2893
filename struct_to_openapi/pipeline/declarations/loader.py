"""
Go source scanner producing a DeclarationSource.

Phase 0 of the pipeline: read `.go` files and collect type declarations
with their fields, struct tags and doc comments. Only the subset of Go
syntax that appears in type declarations is understood; everything else
at top level (imports, funcs, vars) is skipped by brace matching.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..config import OPENAPI_SCHEMA_DECORATION, SWAGGER_SCHEMA_DECORATION
from ..errors import LoadError
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

logger = logging.getLogger(__name__)

GO_BUILTIN_TYPES = {
    "bool",
    "string",
    "byte",
    "rune",
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uintptr",
    "float32",
    "float64",
    "complex64",
    "complex128",
    "error",
    "any",
}

_PACKAGE_PATTERN = re.compile(r"^\s*package\s+([A-Za-z_]\w*)")
_TYPE_KEYWORD_PATTERN = re.compile(r"^type\b\s*(.*)$")
_SPEC_PATTERN = re.compile(r"^([A-Za-z_]\w*)(\[[^\]]*\])?\s*(?:=\s*)?(.*)$")
_STRUCT_OPEN_PATTERN = re.compile(r"\bstruct\s*\{")
_FIELD_NAMES_PATTERN = re.compile(r"^([A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s+(\S.*)$")
_RAW_TAG_PATTERN = re.compile(r"`([^`]*)`\s*$")
_QUOTED_TAG_PATTERN = re.compile(r'"((?:[^"\\]|\\.)*)"\s*$')
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_]\w*$")

# Constructs that stay open across line ends
_RAW_STRING = "`"
_BLOCK_COMMENT = "/*"


@dataclass
class _Line:
    """One source line split into code and comment.

    `skeleton` is `code` with the contents of string literals blanked out,
    so that brackets can be counted without looking inside literals.
    """

    number: int
    code: str
    comment: str | None
    skeleton: str

    def slice(self, start: int, end: int | None, keep_comment: bool) -> _Line:
        return _Line(
            number=self.number,
            code=self.code[start:end],
            comment=self.comment if keep_comment else None,
            skeleton=self.skeleton[start:end],
        )


def parse_type_expr(text: str) -> TypeExpr:
    """Parse a Go type expression into a TypeExpr."""
    text = text.strip()
    if text.startswith("*"):
        return PointerTo(parse_type_expr(text[1:]))
    if text.startswith("[]"):
        return ArrayOf(parse_type_expr(text[2:]))
    if text.startswith("["):
        close = _matching_bracket(text, 0)
        return ArrayOf(parse_type_expr(text[close + 1 :]))
    if text.startswith("map["):
        close = _matching_bracket(text, 3)
        return MapOf(parse_type_expr(text[4:close]), parse_type_expr(text[close + 1 :]))
    if re.match(r"^struct\s*\{", text):
        return Foreign("", "struct")
    if re.match(r"^interface\s*\{", text):
        return Primitive("any")
    if text.startswith("chan") or text.startswith("<-chan"):
        return Foreign("", "chan")
    if text.startswith("func"):
        return Foreign("", "func")

    # Generic instantiation: only the base name matters
    if "[" in text:
        text = text[: text.index("[")]
    if "." in text:
        package, name = text.rsplit(".", 1)
        return Foreign(package.strip(), name.strip())
    if text in GO_BUILTIN_TYPES:
        return Primitive(text)
    if _IDENTIFIER_PATTERN.match(text):
        return NamedReference(text)
    return Foreign("", text)


def _matching_bracket(text: str, start: int) -> int:
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "[":
            depth += 1
        elif text[i] == "]":
            depth -= 1
            if depth == 0:
                return i
    raise LoadError(f"Unbalanced brackets in type expression: {text}")


def _split_line(number: int, line: str, state: str | None) -> tuple[_Line, str | None]:
    """Split a line into code and trailing `//` comment.

    Raw string literals and block comments may span lines, so the open
    construct (_RAW_STRING, _BLOCK_COMMENT or None) is threaded from one line
    to the next. Block comments are replaced by a single space.
    """
    code: list[str] = []
    skeleton: list[str] = []
    comment = None
    quote = _RAW_STRING if state == _RAW_STRING else None
    in_block = state == _BLOCK_COMMENT
    i = 0
    while i < len(line):
        if in_block:
            end = line.find("*/", i)
            if end < 0:
                break
            in_block = False
            code.append(" ")
            skeleton.append(" ")
            i = end + 2
            continue
        c = line[i]
        if quote is not None:
            if quote != "`" and c == "\\" and i + 1 < len(line):
                code.append(line[i : i + 2])
                skeleton.append("  ")
                i += 2
                continue
            code.append(c)
            if c == quote:
                quote = None
                skeleton.append(c)
            else:
                skeleton.append(" ")
            i += 1
            continue
        if line.startswith("//", i):
            comment = line[i + 2 :]
            break
        if line.startswith("/*", i):
            in_block = True
            i += 2
            continue
        if c in "\"'`":
            quote = c
        code.append(c)
        skeleton.append(c)
        i += 1

    if in_block:
        next_state = _BLOCK_COMMENT
    elif quote == _RAW_STRING:
        next_state = _RAW_STRING
    else:
        next_state = None
    return _Line(number, "".join(code), comment, "".join(skeleton)), next_state


def _comment_text(comment: str) -> str:
    """Comment text with one leading space removed, like go/ast CommentGroup.Text."""
    return comment[1:] if comment.startswith(" ") else comment


def _depth_delta(skeleton: str) -> int:
    return sum(1 for c in skeleton if c in "{(") - sum(1 for c in skeleton if c in "})")


class GoSourceLoader:
    """Loads annotated type declarations from Go source files."""

    def __init__(self, decorations: Iterable[str] | None = None):
        """
        Initialize the loader.

        Args:
            decorations: Doc comment markers that select declarations
                for schema generation
        """
        if decorations is None:
            decorations = [OPENAPI_SCHEMA_DECORATION, SWAGGER_SCHEMA_DECORATION]
        self.decorations = list(decorations)

    def load(self, paths: Iterable[str | Path]) -> DeclarationSource:
        """
        Load every `.go` file found at the given paths.

        Args:
            paths: Go files or package directories (not searched recursively)

        Returns:
            DeclarationSource with annotated declarations and package bindings

        Raises:
            LoadError: If a path is missing or a file cannot be parsed
        """
        source = DeclarationSource()
        files: list[Path] = []
        for raw_path in paths:
            path = Path(raw_path)
            if path.is_dir():
                found = sorted(p for p in path.glob("*.go") if not p.name.endswith("_test.go"))
                if not found:
                    raise LoadError(f"No Go files found in {path}")
                files.extend(found)
            elif path.is_file():
                files.append(path)
            else:
                raise LoadError(f"Path not found: {path}")

        for file_path in files:
            try:
                text = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise LoadError(f"Cannot read {file_path}: {e}") from e
            self.load_source(text, str(file_path), source)
        return source

    def load_source(self, text: str, path: str = "<memory>", source: DeclarationSource | None = None) -> DeclarationSource:
        """
        Parse Go source text and add its type declarations to a DeclarationSource.

        Args:
            text: Go source code
            path: File name used in declarations and error messages
            source: DeclarationSource to add to (a new one when None)

        Returns:
            The DeclarationSource
        """
        if source is None:
            source = DeclarationSource()
        parser = _FileParser(text, path, self.decorations)
        for declaration, annotated in parser.parse():
            source.add(declaration, annotated)
        logger.debug("Loaded %s: %d annotated declarations", path, len(source.declarations))
        return source


class _FileParser:
    """Parses the type declarations of one Go file."""

    def __init__(self, text: str, path: str, decorations: list[str]):
        self.path = path
        self.decorations = decorations
        self.lines: list[_Line] = []
        state = None
        for number, raw in enumerate(text.splitlines(), start=1):
            line, state = _split_line(number, raw, state)
            self.lines.append(line)
        self.package = ""
        self.results: list[tuple[Declaration, bool]] = []

    def parse(self) -> list[tuple[Declaration, bool]]:
        for line in self.lines:
            m = _PACKAGE_PATTERN.match(line.code)
            if m:
                self.package = m.group(1)
                break
        else:
            raise LoadError(f"{self.path}: missing package clause")

        doc: list[str] = []
        idx = 0
        while idx < len(self.lines):
            line = self.lines[idx]
            code = line.code.strip()
            if not code:
                if line.comment is not None:
                    doc.append(_comment_text(line.comment))
                else:
                    doc = []
                idx += 1
                continue

            m = _TYPE_KEYWORD_PATTERN.match(code)
            if m and m.group(1).startswith("("):
                idx = self._parse_group(idx, doc)
            elif m:
                idx = self._parse_spec(idx, m.group(1), doc)
            else:
                idx = self._skip_statement(idx)
            doc = []
        return self.results

    def _skip_statement(self, idx: int) -> int:
        start = self.lines[idx].number
        depth = _depth_delta(self.lines[idx].skeleton)
        idx += 1
        while depth > 0 and idx < len(self.lines):
            depth += _depth_delta(self.lines[idx].skeleton)
            idx += 1
        if depth != 0:
            raise LoadError(f"{self.path}:{start}: unbalanced braces")
        return idx

    def _parse_group(self, idx: int, group_doc: list[str]) -> int:
        start = self.lines[idx].number
        spec_doc: list[str] = []
        idx += 1
        while idx < len(self.lines):
            line = self.lines[idx]
            code = line.code.strip()
            if code.startswith(")"):
                return idx + 1
            if not code:
                if line.comment is not None:
                    spec_doc.append(_comment_text(line.comment))
                else:
                    spec_doc = []
                idx += 1
                continue
            idx = self._parse_spec(idx, code, group_doc + spec_doc)
            spec_doc = []
        raise LoadError(f"{self.path}:{start}: unterminated type group")

    def _parse_spec(self, idx: int, text: str, doc_lines: list[str]) -> int:
        line = self.lines[idx]
        m = _SPEC_PATTERN.match(text)
        if not m:
            raise LoadError(f"{self.path}:{line.number}: cannot parse type declaration '{text}'")
        name, rest = m.group(1), m.group(3).strip()
        doc = "\n".join(doc_lines)

        fields = None
        underlying = None
        struct_open = _STRUCT_OPEN_PATTERN.search(line.skeleton)
        if rest.startswith("struct") and struct_open:
            segments, next_idx = self._collect_block(idx, struct_open.end() - 1)
            fields = tuple(self._parse_fields(segments))
        elif _depth_delta(line.skeleton) > 0:
            # interface { ... } and other multi-line underlying types
            next_idx = self._skip_statement(idx)
            underlying = parse_type_expr(rest)
        else:
            next_idx = idx + 1
            underlying = parse_type_expr(rest)

        declaration = Declaration(
            name=name,
            package=self.package,
            doc=doc,
            fields=fields,
            underlying=underlying,
            source_path=self.path,
            line=line.number,
        )
        annotated = any(decoration in doc for decoration in self.decorations)
        self.results.append((declaration, annotated))
        return next_idx

    def _collect_block(self, idx: int, open_pos: int) -> tuple[list[_Line], int]:
        """Collect the line segments between a `{` and its matching `}`."""
        start = self.lines[idx].number
        segments: list[_Line] = []
        depth = 1
        pos = open_pos + 1
        first = idx
        while idx < len(self.lines):
            line = self.lines[idx]
            end = None
            for k in range(pos, len(line.skeleton)):
                ch = line.skeleton[k]
                if ch in "{(":
                    depth += 1
                elif ch in "})":
                    depth -= 1
                    if depth == 0:
                        end = k
                        break
            if end is None:
                segments.append(line.slice(pos, None, keep_comment=idx != first))
                idx += 1
                pos = 0
                continue
            segments.append(line.slice(pos, end, keep_comment=False))
            return segments, idx + 1
        raise LoadError(f"{self.path}:{start}: unbalanced braces in struct declaration")

    def _parse_fields(self, segments: list[_Line]) -> list[Field]:
        fields: list[Field] = []
        doc: list[str] = []
        j = 0
        while j < len(segments):
            segment = segments[j]
            code = segment.code.strip()
            if not code:
                if segment.comment is not None:
                    doc.append(_comment_text(segment.comment))
                else:
                    doc = []
                j += 1
                continue

            # Multi-line inline struct: its tag sits after the closing brace
            depth = _depth_delta(segment.skeleton)
            j += 1
            while depth > 0 and j < len(segments):
                depth += _depth_delta(segments[j].skeleton)
                j += 1
            if segments[j - 1] is not segment:
                tail = _RAW_TAG_PATTERN.search(segments[j - 1].code)
                if tail:
                    code = f"{code} `{tail.group(1)}`"

            fields.extend(self._parse_field(code, "\n".join(doc), segment.number))
            doc = []
        return fields

    def _parse_field(self, code: str, doc: str, line: int) -> list[Field]:
        tag = ""
        m = _RAW_TAG_PATTERN.search(code)
        if m:
            tag = m.group(1)
            code = code[: m.start()].strip()
        else:
            m = _QUOTED_TAG_PATTERN.search(code)
            if m:
                tag = m.group(1).replace('\\"', '"')
                code = code[: m.start()].strip()

        names = _FIELD_NAMES_PATTERN.match(code)
        if names is None:
            return [Field(name=None, type_expr=parse_type_expr(code), tag=tag, doc=doc, line=line)]

        type_expr = parse_type_expr(names.group(2))
        return [Field(name=name.strip(), type_expr=type_expr, tag=tag, doc=doc, line=line) for name in names.group(1).split(",")]
