"""Source location tracking for error messages and debugging.

Provides SourceLocation dataclass for tracking positions in source text.
Blocks compute their location lazily from their start offset, so the
line/column scan only happens when a diagnostic is actually reported.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source location for error messages and debugging.

    All positions are 1-indexed (lineno and col_offset start at 1).
    ``offset`` and ``end_offset`` are absolute positions in the document.

    Attributes:
        lineno: Starting line number (1-indexed)
        col_offset: Starting column offset (1-indexed)
        offset: Absolute start offset in the document text
        end_offset: Absolute end offset in the document text
        source_file: Source file path (optional, for multi-file builds)

    Examples:
        >>> loc = SourceLocation(lineno=3, col_offset=5, source_file="index.md")
        >>> str(loc)
        'index.md:3:5'

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    source_file: str | None = None

    def __str__(self) -> str:
        """Format location for error messages.

        Returns:
            Formatted string like "file.md:10:5" or "10:5"
        """
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    @classmethod
    def from_offset(
        cls,
        source: str,
        offset: int,
        end_offset: int | None = None,
        source_file: str | None = None,
    ) -> SourceLocation:
        """Compute line and column of ``offset`` within ``source``.

        Args:
            source: Full document text
            offset: Absolute position (0-indexed)
            end_offset: Optional absolute end position
            source_file: Optional source file path

        Returns:
            SourceLocation with 1-indexed line and column
        """
        offset = max(0, min(offset, len(source)))
        lineno = source.count("\n", 0, offset) + 1
        line_start = source.rfind("\n", 0, offset) + 1
        return cls(
            lineno=lineno,
            col_offset=offset - line_start + 1,
            offset=offset,
            end_offset=end_offset if end_offset is not None else offset,
            source_file=source_file,
        )

    @classmethod
    def unknown(cls) -> SourceLocation:
        """Create an unknown/placeholder location."""
        return cls(lineno=0, col_offset=0)
