from __future__ import annotations

"""File handlers package providing the sanitized file abstraction, naming rules, and storage primitives."""

__all__ = [
    "filenames",
    "models",
    "sanitized_file",
    "sources",
    "storage",
]
