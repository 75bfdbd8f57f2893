"""
Directive parser for struct tags and doc comment lines.

A directive is `key:value` or `key:"value"`. Several directives may share a
line; each is matched independently and anything that does not match is
ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# key:value, key:"value" or key: value; values may not contain quotes
DIRECTIVE_PATTERN = re.compile(r'([A-Za-z0-9_-]+):"? ?([ A-Za-z0-9{},._-]+)"? ?')

JSON_KEY = "json"
SCHEMA_DIRECTIVE_PREFIX = "oapi"
OMITEMPTY_MODIFIER = "omitempty"

# Structural markers recognized on field doc lines
ONE_OF_MARKER = "oapi_oneOf"
ALL_OF_MARKER = "oapi_allOf"

# Declaration doc directives
DISCRIMINATOR_KEY = "oapi_discriminator"
DISCRIMINATOR_PARSER_KEY = "oapi_discriminator_mapped_parser"
DISCRIMINATOR_PARSED_KEY = "oapi_discriminator_mapped_parsed"
SCHEMA_NAME_KEY = "oapi_name"

_MARKER_PATTERN = re.compile(r'^(oapi_oneOf|oapi_allOf)\b(?:\s*:\s*"?\s*([^"\s]*)\s*"?)?\s*(.*)$')


@dataclass(frozen=True)
class Directive:
    """A parsed (key, raw value) pair."""

    key: str
    raw_value: str
    text: str = ""  # The matched source text, for messages

    @property
    def is_schema_directive(self) -> bool:
        return self.key.startswith(SCHEMA_DIRECTIVE_PREFIX)


@dataclass(frozen=True)
class CompositionMarker:
    """`oapi_oneOf` or `oapi_allOf` found on a field doc line."""

    mode: str  # "oneOf" or "allOf"
    mapping_key: str | None = None
    rest: str = ""  # Directives following the marker on the same line


def parse_directives(text: str) -> list[Directive]:
    """Extract every directive from a tag string or doc line."""
    return [Directive(key=m.group(1), raw_value=m.group(2), text=m.group(0).strip()) for m in DIRECTIVE_PATTERN.finditer(text)]


def parse_composition_marker(line: str) -> CompositionMarker | None:
    """
    Recognize a composition marker doc line.

    Accepts `oapi_oneOf`, `oapi_oneOf: key` and `oapi_allOf` at the start of
    the line; any directives after the marker are kept in `rest`.

    Returns:
        The marker, or None if the line does not start with one
    """
    m = _MARKER_PATTERN.match(line.strip())
    if m is None:
        return None
    mode = "oneOf" if m.group(1) == ONE_OF_MARKER else "allOf"
    mapping_key = m.group(2) or None
    if mode == "allOf":
        mapping_key = None
    return CompositionMarker(mode=mode, mapping_key=mapping_key, rest=m.group(3))


def split_directive_key(key: str) -> tuple[str, str] | None:
    """
    Split a schema directive key into selector and attribute name.

    Returns:
        (selector, attribute) for `oapi_<attribute>`, None when the key
        does not have exactly two `_` separated segments
    """
    segments = key.split("_")
    if len(segments) != 2 or not segments[1]:
        return None
    return segments[0], segments[1]


def json_name(raw_value: str) -> str:
    """Field name from a json tag value: the part before the first comma."""
    return raw_value.split(",", 1)[0].strip()


def has_omitempty(raw_value: str) -> bool:
    """Whether a json tag value carries the omitempty modifier."""
    return OMITEMPTY_MODIFIER in (part.strip() for part in raw_value.split(",")[1:])


def doc_lines(doc: str) -> list[str]:
    """Doc comment lines carrying schema directives."""
    return [line.strip() for line in doc.splitlines() if line.strip().startswith(SCHEMA_DIRECTIVE_PREFIX)]
