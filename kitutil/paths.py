"""Path helpers."""

from __future__ import annotations

__all__ = ["basename"]


def basename(path: str) -> str:
    """Return the part of path after the last '/', or path itself if there is none."""
    return path.rpartition("/")[2]