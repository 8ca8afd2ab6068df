"""
Diff Generator Service - Line-aligned before/after comparison of code
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import Iterator

from models.diff import DiffLine, DiffLineType, DiffResult, DiffRow, DiffStats

# Lines scanned ahead when resynchronizing the two cursors
LOOKAHEAD = 4

STRATEGIES = ("lookahead", "sequence")

MARKERS = {
    DiffLineType.SAME: " ",
    DiffLineType.ADDED: "+",
    DiffLineType.REMOVED: "-",
}


def split_lines(text: str) -> list[str]:
    """Split text on "\\n"; the empty string has no lines"""
    # "" as [] rather than [""]: diff("", "") is empty and diff("", "\n")
    # is two added blank lines instead of same("") followed by added("")
    if not text:
        return []
    return text.split("\n")


def _same(content: str, i: int, j: int) -> DiffLine:
    return DiffLine(
        type=DiffLineType.SAME,
        content=content,
        original_line_number=i + 1,
        new_line_number=j + 1,
    )


def _added(content: str, j: int) -> DiffLine:
    return DiffLine(type=DiffLineType.ADDED, content=content, new_line_number=j + 1)


def _removed(content: str, i: int) -> DiffLine:
    return DiffLine(type=DiffLineType.REMOVED, content=content, original_line_number=i + 1)


class DiffGenerator:
    """Align the lines of an original and a modified document"""

    def __init__(self, lookahead: int = LOOKAHEAD):
        self.lookahead = lookahead

    def iter_diff(self, original: str, modified: str) -> Iterator[DiffLine]:
        """Lazily yield aligned lines using a two-pointer scan with bounded lookahead.

        When the current lines differ, the next ``lookahead`` lines of the
        modified document are searched for the current original line
        (insertion), then the next ``lookahead`` lines of the original for the
        current modified line (deletion). Nearest match wins. With no match
        the pair is treated as a substitution and the scan moves on without
        a second resynchronization attempt.
        """
        original_lines = split_lines(original)
        modified_lines = split_lines(modified)
        n, m = len(original_lines), len(modified_lines)
        i = j = 0

        while i < n or j < m:
            orig = original_lines[i] if i < n else None
            mod = modified_lines[j] if j < m else None

            if orig is not None and orig == mod:
                yield _same(orig, i, j)
                i += 1
                j += 1
                continue

            # Lines inserted before orig
            k = self._find_ahead(modified_lines, j, orig)
            if k:
                for x in range(k):
                    yield _added(modified_lines[j + x], j + x)
                j += k
                continue

            # Lines deleted before mod
            k = self._find_ahead(original_lines, i, mod)
            if k:
                for x in range(k):
                    yield _removed(original_lines[i + x], i + x)
                i += k
                continue

            # Substitution
            if i < n:
                yield _removed(orig, i)
                i += 1
            if j < m:
                yield _added(mod, j)
                j += 1

    def _find_ahead(self, lines: list[str], start: int, target: str | None) -> int:
        """Smallest offset k in 1..lookahead with lines[start + k] == target, else 0"""
        if target is None:
            return 0
        for k in range(1, self.lookahead + 1):
            if start + k >= len(lines):
                break
            if lines[start + k] == target:
                return k
        return 0

    def iter_sequence_diff(self, original: str, modified: str) -> Iterator[DiffLine]:
        """Yield aligned lines from difflib's longest-matching-block opcodes"""
        original_lines = split_lines(original)
        modified_lines = split_lines(modified)
        matcher = SequenceMatcher(None, original_lines, modified_lines, autojunk=False)

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                for offset in range(i2 - i1):
                    yield _same(original_lines[i1 + offset], i1 + offset, j1 + offset)
                continue
            # "replace" is reported as its removals followed by its additions
            if tag in ("delete", "replace"):
                for i in range(i1, i2):
                    yield _removed(original_lines[i], i)
            if tag in ("insert", "replace"):
                for j in range(j1, j2):
                    yield _added(modified_lines[j], j)

    def generate_diff(
        self,
        original: str,
        modified: str,
        strategy: str = "lookahead",
    ) -> list[DiffLine]:
        """Generate the ordered list of aligned lines for two documents"""
        if strategy == "lookahead":
            return list(self.iter_diff(original, modified))
        if strategy == "sequence":
            return list(self.iter_sequence_diff(original, modified))
        raise ValueError(f"Unsupported diff strategy: {strategy}")

    def build_result(
        self,
        original: str,
        modified: str,
        strategy: str = "lookahead",
    ) -> DiffResult:
        """Generate a diff together with its line counts"""
        lines = self.generate_diff(original, modified, strategy)
        return DiffResult(lines=lines, stats=summarize(lines))


def summarize(lines: list[DiffLine]) -> DiffStats:
    """Count lines per kind"""
    stats = DiffStats()
    for line in lines:
        if line.type == DiffLineType.SAME:
            stats.same += 1
        elif line.type == DiffLineType.ADDED:
            stats.added += 1
        else:
            stats.removed += 1
    return stats


def render_rows(lines: list[DiffLine]) -> list[DiffRow]:
    """Build two-column display rows with +/- markers"""
    return [
        DiffRow(
            marker=MARKERS[line.type],
            original_line_number=line.original_line_number,
            new_line_number=line.new_line_number,
            content=line.content,
        )
        for line in lines
    ]


def render_text(lines: list[DiffLine]) -> str:
    """Render aligned lines as marker-prefixed text"""
    return "\n".join(f"{row.marker} {row.content}" for row in render_rows(lines))


def generate_diff(original: str, modified: str) -> list[DiffLine]:
    """Convenience function for the default lookahead diff."""
    return DiffGenerator().generate_diff(original, modified)
