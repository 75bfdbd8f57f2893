"""
Utility functions for the struct to OpenAPI generator.
"""

import re

# A lowercase letter or digit followed by an uppercase letter
_CASE_BOUNDARY_PATTERN = re.compile(r"([a-z0-9])([A-Z])")


def capitalize_first(text: str) -> str:
    """Uppercase the first character only: "readOnly" -> "ReadOnly"."""
    if not text:
        return ""
    return text[0].upper() + text[1:]


def to_upper_snake_case(text: str) -> str:
    """Convert camelCase or PascalCase text to UPPER_SNAKE_CASE.

    Only a lowercase letter or digit followed by an uppercase letter
    starts a new word, so runs of capitals stay together.

    Examples:
        "FooBar" -> "FOO_BAR"
        "fooBar" -> "FOO_BAR"
        "Item2Kind" -> "ITEM2_KIND"
        "HTTPServer" -> "HTTPSERVER"
    """
    return _CASE_BOUNDARY_PATTERN.sub(r"\1_\2", text).upper()
