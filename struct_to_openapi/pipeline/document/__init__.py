"""
Document module.

Holds the OpenAPI document store and the atomic file writer.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .store import DocumentStore

__all__ = [
    "DocumentStore",
    "AtomicWriter",
]
