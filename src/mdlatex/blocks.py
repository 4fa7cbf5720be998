"""Block and BlockTag definitions.

The upstream segmenter splits a document into Block objects; each Block
borrows the document text and records the offsets of the span it owns.
The converters in this package consume one Block at a time.

Thread Safety:
Block is frozen (immutable) and safe to share across threads.
BlockTag is an enum (inherently immutable).

Performance Note:
Block stores raw offsets and lazily creates SourceLocation on demand,
since the location is only needed when an error is reported.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from mdlatex.location import SourceLocation

# End-of-stream sentinel appended to text handed to recursive conversions
EOS = "\0"


class BlockTag(Enum):
    """Closed set of block kinds produced by the segmenter."""

    # Code
    CODE_INLINE = auto()  # `code`
    CODE_BLOCK_EVAL = auto()  # ```lang:path ... ```
    CODE_BLOCK = auto()  # ``` ... ```

    # Raw HTML passthrough
    ESCAPE = auto()  # ~~~ ... ~~~

    # Math
    MATH_A = auto()  # $ ... $
    MATH_B = auto()  # $$ ... $$
    MATH_C = auto()  # \[ ... \]
    MATH_ALIGN = auto()  # \begin{align} ... \end{align}
    MATH_EQARRAY = auto()  # \begin{eqnarray} ... \end{eqnarray}
    MATH_INLINE = auto()  # _$>_ ... _$<_ (math produced by a macro)

    # Containers and commands
    DIV = auto()  # @@name ... @@
    MACRO_INVOCATION = auto()  # \name{arg}...


MATH_TAGS: frozenset[BlockTag] = frozenset(
    {
        BlockTag.MATH_A,
        BlockTag.MATH_B,
        BlockTag.MATH_C,
        BlockTag.MATH_ALIGN,
        BlockTag.MATH_EQARRAY,
        BlockTag.MATH_INLINE,
    }
)

# Math kinds that are never numbered
INLINE_MATH_TAGS: frozenset[BlockTag] = frozenset({BlockTag.MATH_A, BlockTag.MATH_INLINE})

DISPLAY_MATH_TAGS: frozenset[BlockTag] = MATH_TAGS - INLINE_MATH_TAGS


@dataclass(frozen=True, slots=True)
class Block:
    """A segmented block of the document.

    Attributes:
        tag: The block kind
        source: The whole document text (shared, never copied)
        start: Start offset of the raw span in source
        end: End offset of the raw span in source (exclusive)
        inner_start: Start of the content span for containers
        inner_end: End of the content span for containers
        source_file: Optional source file path for diagnostics

    The raw span always includes the block's own fences; stripping them is
    the converter's job.

    """

    tag: BlockTag
    source: str
    start: int
    end: int
    inner_start: int | None = None
    inner_end: int | None = None
    source_file: str | None = None
    _location_cache: SourceLocation | None = field(
        default=None, repr=False, compare=False, hash=False
    )

    @classmethod
    def from_text(
        cls,
        tag: BlockTag,
        text: str,
        *,
        open_len: int | None = None,
        close_len: int | None = None,
        source_file: str | None = None,
    ) -> Block:
        """Build a block owning the whole of ``text``.

        Args:
            tag: Block kind
            text: Raw span including fences
            open_len: Length of the opening token (containers only)
            close_len: Length of the closing token (containers only)
            source_file: Optional source file path

        Returns:
            Block spanning ``text``
        """
        inner_start = inner_end = None
        if open_len is not None:
            inner_start = open_len
            inner_end = len(text) - (close_len or 0)
        return cls(
            tag=tag,
            source=text,
            start=0,
            end=len(text),
            inner_start=inner_start,
            inner_end=inner_end,
            source_file=source_file,
        )

    @property
    def raw_span(self) -> str:
        """The exact source text owned by this block, fences included."""
        return self.source[self.start : self.end]

    @property
    def content(self) -> str:
        """Text between the opening and closing tokens (containers).

        Falls back to the raw span for blocks without a content span.
        """
        if self.inner_start is None or self.inner_end is None:
            return self.raw_span
        return self.source[self.inner_start : self.inner_end]

    @property
    def open_token(self) -> str:
        """Text of the opening token (empty for non-containers)."""
        if self.inner_start is None:
            return ""
        return self.source[self.start : self.inner_start]

    @property
    def source_offset(self) -> int:
        return self.start

    @property
    def location(self) -> SourceLocation:
        """Get source location (lazily created and cached)."""
        if self._location_cache is not None:
            return self._location_cache
        loc = SourceLocation.from_offset(
            self.source, self.start, self.end, source_file=self.source_file
        )
        # Safe mutation of frozen dataclass cache field (idempotent write)
        object.__setattr__(self, "_location_cache", loc)
        return loc

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.raw_span
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Block({self.tag.name}, {val!r}, @{self.start})"
