"""
Schema module.

Contains the output schema model.
"""

from __future__ import annotations

from .nodes import SCHEMA_REF_PREFIX, Discriminator, Schema, SchemaRef, create_ref, ref_name

__all__ = [
    "Schema",
    "SchemaRef",
    "Discriminator",
    "SCHEMA_REF_PREFIX",
    "create_ref",
    "ref_name",
]
