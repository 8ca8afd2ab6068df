"""Diff-related data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class DiffLineType(str, Enum):
    """Classification of a single aligned line"""

    SAME = "same"
    ADDED = "added"
    REMOVED = "removed"


class DiffLine(BaseModel):
    """A single line of a before/after comparison"""

    type: DiffLineType
    content: str
    original_line_number: int | None = None  # 1-indexed, same/removed only
    new_line_number: int | None = None  # 1-indexed, same/added only


class DiffRow(BaseModel):
    """Two-column display row for a diff line"""

    marker: str  # "+", "-" or " "
    original_line_number: int | None = None
    new_line_number: int | None = None
    content: str


class DiffStats(BaseModel):
    """Per-kind line counts"""

    same: int = 0
    added: int = 0
    removed: int = 0


class DiffRequest(BaseModel):
    """Request to compare two documents"""

    original: str
    modified: str
    strategy: str = "lookahead"  # "lookahead" or "sequence"


class DiffResult(BaseModel):
    """Complete diff of two documents"""

    lines: list[DiffLine]
    stats: DiffStats
