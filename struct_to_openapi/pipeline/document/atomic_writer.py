"""
Atomic file writer for generated documents.

Ensures that file writes are atomic so that an interrupted run never
leaves a half-written document behind.
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable
from pathlib import Path

import yaml

from ..errors import OutputError


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(
        self,
        validate_json: Callable[[str], None] | None = None,
        validate_yaml: Callable[[str], None] | None = None,
    ):
        """Initialize the atomic writer.

        Args:
            validate_json: Optional validation function for JSON output
            validate_yaml: Optional validation function for YAML output
        """
        self._validate_json = validate_json or self._default_validate_json
        self._validate_yaml = validate_yaml or self._default_validate_yaml

    def write(
        self,
        path: Path,
        content: str,
        output_format: str,
        validate: bool = True,
    ) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            output_format: "json" or "yaml", selects the validation
            validate: Whether to validate before finalizing

        Raises:
            OutputError: If validation fails
            OSError: If file operations fail
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )

        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self._validate_content(content, output_format)

            temp_path.replace(path)

        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass  # Best effort cleanup
            raise

    def _validate_content(self, content: str, output_format: str) -> None:
        if output_format == "json":
            self._validate_json(content)
        elif output_format == "yaml":
            self._validate_yaml(content)

    def _default_validate_json(self, content: str) -> None:
        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            raise OutputError(f"Generated JSON document is not valid: {e}") from e
        self._check_root(document)

    def _default_validate_yaml(self, content: str) -> None:
        try:
            document = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise OutputError(f"Generated YAML document is not valid: {e}") from e
        self._check_root(document)

    @staticmethod
    def _check_root(document: object) -> None:
        if not isinstance(document, dict):
            raise OutputError("Generated document root must be a mapping")
        if "openapi" not in document:
            raise OutputError("Generated document is missing the openapi version field")
